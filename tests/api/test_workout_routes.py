"""Tests for the workout session endpoints."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from liftcoach.workouts.registry import registry


@pytest.fixture
def push_day(make_program, exercise_library):
    return make_program(
        "Push Day",
        [
            (exercise_library["Barbell Bench Press"], 2, 8, 90),
            (exercise_library["Dumbbell Fly"], 1, 12, 60),
        ],
    )


def _start(client, program_id, headers=None) -> dict:
    response = client.post("/workouts/sessions", json={"program_id": program_id}, headers=headers or {})
    assert response.status_code == 200
    return response.json()


class TestStart:
    def test_missing_program_is_empty(self, client):
        body = _start(client, "nope")
        assert body["status"] == "empty"
        assert body["empty_reason"] == "no_program"
        assert len(registry) == 0

    def test_program_without_exercises_is_empty(self, client, make_program, auth_headers):
        body = _start(client, make_program("Empty", []), auth_headers)
        assert body["empty_reason"] == "no_exercises"

    def test_start_returns_full_state(self, client, push_day, auth_headers):
        body = _start(client, push_day, auth_headers)

        assert body["status"] == "active"
        assert body["mode"] == "idle"
        assert body["name"] == "Push Day"
        assert [e["name"] for e in body["exercises"]] == ["Barbell Bench Press", "Dumbbell Fly"]
        assert body["exercises"][0]["current_set"] == 1
        assert body["current_reps"] == 8
        assert body["summary"]["completed_sets"] == 0

    def test_session_is_private_to_its_user(self, client, push_day, auth_headers):
        session_id = _start(client, push_day, auth_headers)["session_id"]
        assert client.get(f"/workouts/sessions/{session_id}").status_code == 404
        assert client.get(f"/workouts/sessions/{session_id}", headers=auth_headers).status_code == 200

    def test_anonymous_start_of_owned_program_is_empty(self, client, make_program, exercise_library):
        program_id = make_program("Secret Plan", [(exercise_library["Barbell Bench Press"], 3, 8, 90)])

        body = _start(client, program_id)

        assert body["status"] == "empty"
        assert body["empty_reason"] == "no_program"
        assert body["name"] is None
        assert body["exercises"] == []
        assert len(registry) == 0

    def test_anonymous_start_of_shared_program(self, client, make_program, exercise_library):
        program_id = make_program("Starter", [(exercise_library["Push-up"], 2, 15, 60)], shared=True)
        body = _start(client, program_id)
        assert body["status"] == "active"
        assert body["exercises"][0]["muscle_group"] == "chest"


class TestActions:
    def test_complete_set_opens_rest_and_persists(self, client, push_day, auth_headers):
        session_id = _start(client, push_day, auth_headers)["session_id"]

        response = client.post(
            f"/workouts/sessions/{session_id}/complete-set",
            json={"weight": 60, "reps": 8, "difficulty": "hard"},
            headers=auth_headers,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["mode"] == "resting"
        assert body["rest"]["duration"] == 90
        assert body["last_difficulty"] == "hard"
        assert body["exercises"][0]["sets"][0]["completed"] is True
        assert body["exercises"][0]["current_set"] == 2

        history = client.get("/history", headers=auth_headers).json()
        assert [h["id"] for h in history] == [session_id]
        assert history[0]["duration"] == "In progress"

    def test_actions_under_overlay_conflict(self, client, push_day, auth_headers):
        session_id = _start(client, push_day, auth_headers)["session_id"]
        url = f"/workouts/sessions/{session_id}"

        assert client.post(f"{url}/overlay", json={"action": "open_sets"}, headers=auth_headers).status_code == 200
        assert client.post(f"{url}/complete-set", json={}, headers=auth_headers).status_code == 409

        body = client.post(f"{url}/overlay", json={"action": "close_sets"}, headers=auth_headers).json()
        assert body["mode"] == "idle"

    def test_swipe_and_reorder(self, client, push_day, auth_headers):
        session_id = _start(client, push_day, auth_headers)["session_id"]
        url = f"/workouts/sessions/{session_id}"

        body = client.post(f"{url}/swipe", json={"dx": 120, "dy": 10}, headers=auth_headers).json()
        assert body["active_index"] == 1

        body = client.post(f"{url}/swipe", json={"dx": 20, "dy": 0}, headers=auth_headers).json()
        assert body["active_index"] == 1

        body = client.post(f"{url}/reorder", json={"direction": "up"}, headers=auth_headers).json()
        assert [e["name"] for e in body["exercises"]] == ["Dumbbell Fly", "Barbell Bench Press"]
        assert body["active_index"] == 0

    def test_inputs_and_skip_rest(self, client, push_day, auth_headers):
        session_id = _start(client, push_day, auth_headers)["session_id"]
        url = f"/workouts/sessions/{session_id}"

        body = client.put(f"{url}/inputs", json={"weight": 40, "weight_delta": 2.5}, headers=auth_headers).json()
        assert body["current_weight"] == 42.5

        client.post(f"{url}/complete-set", json={}, headers=auth_headers)
        body = client.post(f"{url}/skip-rest", headers=auth_headers).json()
        assert body["mode"] == "idle"
        assert body["rest"] is None

    def test_finished_session_is_released(self, client, make_program, exercise_library, auth_headers):
        program_id = make_program("Finisher", [(exercise_library["Barbell Squat"], 1, 5, 120)])
        session_id = _start(client, program_id, auth_headers)["session_id"]
        url = f"/workouts/sessions/{session_id}"

        body = client.post(f"{url}/complete-set", json={"weight": 100}, headers=auth_headers).json()

        assert body["summary"]["is_complete"] is True
        assert body["summary"]["total_volume"] == 500
        assert session_id not in registry
        assert client.get(url, headers=auth_headers).status_code == 404
        assert client.get("/history", headers=auth_headers).json()[0]["status"] == "completed"

    def test_unknown_session(self, client):
        assert client.post("/workouts/sessions/missing/complete-set", json={}).status_code == 404


class TestExit:
    def test_exit_without_sets_is_discarded(self, client, push_day, auth_headers):
        session_id = _start(client, push_day, auth_headers)["session_id"]
        url = f"/workouts/sessions/{session_id}"

        client.post(f"{url}/overlay", json={"action": "request_exit"}, headers=auth_headers)
        body = client.post(f"{url}/overlay", json={"action": "confirm_exit"}, headers=auth_headers).json()

        assert body["status"] == "closed"
        assert body["discarded"] is True
        assert client.get(url, headers=auth_headers).status_code == 404
        assert client.get("/history", headers=auth_headers).json() == []

    def test_confirm_without_request_conflicts(self, client, push_day, auth_headers):
        session_id = _start(client, push_day, auth_headers)["session_id"]
        response = client.post(
            f"/workouts/sessions/{session_id}/overlay", json={"action": "confirm_exit"}, headers=auth_headers
        )
        assert response.status_code == 409


class TestCoachInSession:
    @patch("liftcoach.coach.tips.complete_prompt")
    def test_tip_refresh(self, mock_complete, client, push_day, auth_headers):
        mock_complete.return_value = "Elbows at 45 degrees."
        session_id = _start(client, push_day, auth_headers)["session_id"]

        response = client.post(
            f"/workouts/sessions/{session_id}/tip", json={"debounce": False}, headers=auth_headers
        )

        assert response.json() == {"tip": "Elbows at 45 degrees.", "stale": False}
        assert client.get(f"/workouts/sessions/{session_id}", headers=auth_headers).json()["tip"] == (
            "Elbows at 45 degrees."
        )

    @patch("liftcoach.coach.chat.complete_conversation")
    def test_chat_requires_open_chat(self, mock_complete, client, push_day, auth_headers):
        mock_complete.return_value = "Retract your shoulder blades."
        session_id = _start(client, push_day, auth_headers)["session_id"]
        url = f"/workouts/sessions/{session_id}"

        assert client.post(f"{url}/chat", json={"message": "Form?"}, headers=auth_headers).status_code == 409

        client.post(f"{url}/overlay", json={"action": "open_chat"}, headers=auth_headers)
        body = client.post(f"{url}/chat", json={"message": "Form?"}, headers=auth_headers).json()

        assert body["reply"]["content"] == "Retract your shoulder blades."
        assert [m["role"] for m in body["messages"]] == ["user", "assistant"]


def test_history_requires_auth(client):
    assert client.get("/history").status_code == 401
