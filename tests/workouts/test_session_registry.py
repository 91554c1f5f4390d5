"""Tests for the in-memory session registry."""

from __future__ import annotations

import pytest
from factories import build_exercise, build_session

from liftcoach.workouts.controller import WorkoutSessionController
from liftcoach.workouts.errors import SessionNotFoundError
from liftcoach.workouts.registry import SessionRegistry


class MonotonicClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _controller(session_id: str) -> WorkoutSessionController:
    return WorkoutSessionController(build_session(build_exercise("bench"), session_id=session_id))


@pytest.fixture
def monotonic():
    return MonotonicClock()


@pytest.fixture
def sessions(monotonic):
    return SessionRegistry(idle_ttl_seconds=600, clock=monotonic)


def test_owner_check(sessions):
    sessions.add(_controller("mine"), "user-1")
    sessions.add(_controller("anon"), None)

    assert sessions.get("mine", "user-1").state.id == "mine"
    assert sessions.get("anon", "user-2").state.id == "anon"
    with pytest.raises(SessionNotFoundError):
        sessions.get("mine", "user-2")
    with pytest.raises(SessionNotFoundError):
        sessions.get("mine", None)


def test_idle_sessions_are_dropped_on_add(sessions, monotonic):
    sessions.add(_controller("abandoned"), "user-1")
    monotonic.now = 601

    sessions.add(_controller("fresh"), "user-1")

    assert "abandoned" not in sessions
    assert len(sessions) == 1


def test_access_keeps_a_session_alive(sessions, monotonic):
    sessions.add(_controller("active"), "user-1")
    monotonic.now = 500
    sessions.get("active", "user-1")
    monotonic.now = 1000

    sessions.add(_controller("other"), "user-1")

    assert "active" in sessions


def test_expired_session_is_not_found(sessions, monotonic):
    sessions.add(_controller("stale"), None)
    monotonic.now = 700

    with pytest.raises(SessionNotFoundError):
        sessions.get("stale", None)
    assert len(sessions) == 0


def test_other_users_lookup_does_not_refresh(sessions, monotonic):
    sessions.add(_controller("mine"), "user-1")
    monotonic.now = 500
    with pytest.raises(SessionNotFoundError):
        sessions.get("mine", "user-2")
    monotonic.now = 700

    with pytest.raises(SessionNotFoundError):
        sessions.get("mine", "user-1")
