"""Tests for program and exercise library endpoints."""

from __future__ import annotations

import json
from unittest.mock import patch

from liftcoach.core.auth_jwt import create_access_token


class TestPrograms:
    def test_requires_auth(self, client):
        assert client.get("/programs").status_code == 401

    def test_create_list_get_delete(self, client, auth_headers, exercise_library):
        payload = {
            "name": "  Pull Day ",
            "exercises": [
                {"exercise_id": exercise_library["Cable Row"], "target_sets": 4, "target_reps": 12},
                {"exercise_id": exercise_library["Dumbbell Fly"], "rest_seconds": 45},
            ],
        }

        created = client.post("/programs", json=payload, headers=auth_headers)

        assert created.status_code == 201
        program = created.json()
        assert program["name"] == "Pull Day"
        assert program["exercise_count"] == 2
        assert [(e["name"], e["target_sets"], e["order_index"]) for e in program["exercises"]] == [
            ("Cable Row", 4, 0),
            ("Dumbbell Fly", 3, 1),
        ]

        listed = client.get("/programs", headers=auth_headers).json()
        assert [(p["id"], p["exercise_count"]) for p in listed] == [(program["id"], 2)]

        detail = client.get(f"/programs/{program['id']}", headers=auth_headers).json()
        assert detail["exercises"][1]["rest_seconds"] == 45

        assert client.delete(f"/programs/{program['id']}", headers=auth_headers).status_code == 204
        assert client.get(f"/programs/{program['id']}", headers=auth_headers).status_code == 404

    def test_unknown_exercise_is_rejected(self, client, auth_headers, db_engine):
        response = client.post(
            "/programs", json={"name": "Ghost", "exercises": [{"exercise_id": "ghost"}]}, headers=auth_headers
        )
        assert response.status_code == 422
        assert "ghost" in response.json()["detail"]

    def test_programs_are_scoped_to_owner(self, client, make_program, exercise_library):
        program_id = make_program("Mine", [(exercise_library["Barbell Squat"], 3, 5, 120)])
        other = {"Authorization": f"Bearer {create_access_token('someone-else')}"}

        assert client.get("/programs", headers=other).json() == []
        assert client.get(f"/programs/{program_id}", headers=other).status_code == 404
        assert client.delete(f"/programs/{program_id}", headers=other).status_code == 404


class TestGenerate:
    def test_requires_prompt_or_options(self, client, auth_headers, db_engine):
        assert client.post("/programs/generate", json={"goal": "strength"}, headers=auth_headers).status_code == 400

    @patch("liftcoach.coach.generation.complete_conversation")
    def test_structured_options_become_prompt(self, mock_complete, client, auth_headers, exercise_library):
        mock_complete.return_value = json.dumps({
            "name": "Chest Builder",
            "exercises": [{"name": "Barbell Bench Press", "target_sets": 4, "target_reps": 6}],
        })

        response = client.post(
            "/programs/generate",
            json={"goal": "strength", "body_parts": ["chest"], "exercise_count": 4},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Chest Builder"
        assert body["exercises"][0]["id"] == exercise_library["Barbell Bench Press"]
        history = mock_complete.call_args.args[1]
        assert history[0].content == "Create a strength workout targeting chest.\nInclude 4 exercises."

    @patch("liftcoach.coach.generation.complete_conversation")
    def test_unparseable_answer_is_bad_gateway(self, mock_complete, client, auth_headers, exercise_library):
        mock_complete.return_value = "Sure! Here's a great workout."

        response = client.post("/programs/generate", json={"prompt": "legs"}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to parse AI response"

    @patch("liftcoach.coach.generation.complete_conversation")
    def test_alternative(self, mock_complete, client, auth_headers, exercise_library):
        mock_complete.return_value = '{"exercises": [{"name": "Push-up"}]}'

        response = client.post(
            "/programs/alternative",
            json={"exercise_name": "Dumbbell Fly", "body_part": "chest", "target_sets": 3, "target_reps": 15},
            headers=auth_headers,
        )

        exercise = response.json()["exercise"]
        assert exercise["name"] == "Push-up"
        assert exercise["target_reps"] == 15


class TestExerciseSearch:
    def test_search_is_case_insensitive_and_rated_first(self, client, exercise_library):
        names = [e["name"] for e in client.get("/exercises", params={"search": "BARBELL"}).json()]
        assert names == ["Barbell Squat", "Barbell Bench Press"]

    def test_filter_by_body_part(self, client, exercise_library):
        names = [e["name"] for e in client.get("/exercises", params={"body_part": "chest"}).json()]
        assert names == ["Barbell Bench Press", "Dumbbell Fly", "Push-up"]
