"""Tests for the developer CLI."""

import json

from sqlalchemy import select
from typer.testing import CliRunner

from liftcoach.cli import app
from liftcoach.core.auth_jwt import decode_access_token
from liftcoach.db.models import Exercise
from liftcoach.db.session import get_session

runner = CliRunner()


def test_token_is_decodable():
    result = runner.invoke(app, ["token", "user-42"])
    assert result.exit_code == 0
    assert decode_access_token(result.stdout.strip().splitlines()[-1]) == "user-42"


def test_seed_exercises(db_engine, tmp_path):
    path = tmp_path / "library.json"
    path.write_text(
        json.dumps([
            {"name": "Romanian Deadlift", "equipment": "barbell", "body_part": "upper legs", "rating": 9.1},
            {"name": "Lat Pulldown", "equipment": "cable", "body_part": "back", "rating": 8.7},
        ]),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["seed-exercises", str(path)])

    assert result.exit_code == 0, result.output
    assert "created=2" in result.output
    with get_session() as session:
        assert sorted(session.execute(select(Exercise.name)).scalars().all()) == ["Lat Pulldown", "Romanian Deadlift"]


def test_seed_exercises_missing_file(tmp_path):
    result = runner.invoke(app, ["seed-exercises", str(tmp_path / "missing.json")])
    assert result.exit_code != 0


def test_check_db(db_engine):
    result = runner.invoke(app, ["check-db"])
    assert result.exit_code == 0
    assert "connection OK" in result.output
