"""Tests for the onboarding profile endpoints."""

from __future__ import annotations

import pytest

from liftcoach.services.profile_service import load_training_goal, training_goal_for

ONBOARDING = {
    "full_name": "  Sam Lee ",
    "goals": ["muscle", "strength", "muscle"],
    "experience": "intermediate",
    "training_days": 4,
}


def test_new_user_needs_onboarding(client, auth_headers):
    body = client.get("/profile", headers=auth_headers).json()
    assert body["id"] == "user-1"
    assert body["needs_onboarding"] is True
    assert body["training_goal"] == "hypertrophy"


def test_onboarding_is_stored(client, auth_headers):
    response = client.put("/profile", json=ONBOARDING, headers=auth_headers)

    assert response.status_code == 200
    body = client.get("/profile", headers=auth_headers).json()
    assert body["full_name"] == "Sam Lee"
    assert body["goals"] == ["muscle", "strength"]
    assert body["training_days"] == 4
    assert body["training_goal"] == "strength"
    assert body["needs_onboarding"] is False
    assert load_training_goal("user-1") == "strength"


def test_onboarding_can_be_replaced(client, auth_headers):
    client.put("/profile", json=ONBOARDING, headers=auth_headers)
    client.put("/profile", json={**ONBOARDING, "goals": ["endurance"], "training_days": 2}, headers=auth_headers)

    body = client.get("/profile", headers=auth_headers).json()
    assert body["goals"] == ["endurance"]
    assert body["training_goal"] == "hypertrophy"


@pytest.mark.parametrize(
    "change",
    [
        {"full_name": " A "},
        {"goals": []},
        {"goals": ["cardio"]},
        {"experience": "expert"},
        {"training_days": 1},
        {"training_days": 7},
    ],
)
def test_incomplete_onboarding_is_rejected(client, auth_headers, change):
    assert client.put("/profile", json={**ONBOARDING, **change}, headers=auth_headers).status_code == 422


def test_profile_requires_auth(client):
    assert client.get("/profile").status_code == 401
    assert client.get("/profile", headers={"Authorization": "Bearer not-a-token"}).status_code == 401


def test_training_goal_mapping():
    assert training_goal_for(["strength"]) == "strength"
    assert training_goal_for(["muscle", "lose_fat"]) == "hypertrophy"
    assert training_goal_for(None) == "hypertrophy"
    assert load_training_goal(None) == "hypertrophy"
