"""In-memory registry of running workout sessions.

Sessions live in process memory until they are exited, finished, or left
idle past the configured TTL; only completed sets reach the database. A
process restart therefore drops running sessions.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from liftcoach.config.settings import settings
from liftcoach.workouts.controller import WorkoutSessionController
from liftcoach.workouts.errors import SessionNotFoundError


@dataclass
class RegisteredSession:
    controller: WorkoutSessionController
    user_id: str | None
    last_seen: float


class SessionRegistry:
    """Running sessions keyed by id.

    Args:
        idle_ttl_seconds: Sessions not accessed for this long are dropped
        clock: Monotonic seconds source
    """

    def __init__(self, idle_ttl_seconds: float | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        self._sessions: dict[str, RegisteredSession] = {}
        self._lock = threading.Lock()
        self._idle_ttl = settings.session_idle_ttl_seconds if idle_ttl_seconds is None else idle_ttl_seconds
        self._clock = clock

    def _purge_idle_locked(self, now: float) -> int:
        expired = [sid for sid, entry in self._sessions.items() if now - entry.last_seen > self._idle_ttl]
        for session_id in expired:
            del self._sessions[session_id]
        return len(expired)

    def add(self, controller: WorkoutSessionController, user_id: str | None) -> None:
        now = self._clock()
        with self._lock:
            purged = self._purge_idle_locked(now)
            self._sessions[controller.state.id] = RegisteredSession(
                controller=controller, user_id=user_id, last_seen=now
            )
        if purged:
            logger.info(f"Dropped {purged} idle workout sessions")
        logger.debug(f"Registered workout session session_id={controller.state.id} active={len(self)}")

    def get(self, session_id: str, user_id: str | None) -> WorkoutSessionController:
        """Look up a session owned by ``user_id``.

        Sessions started anonymously are reachable by anyone holding the id.
        A session started by a user is reported as missing to everyone else,
        as is a session idle for longer than the TTL.

        Raises:
            SessionNotFoundError: If the session is unknown, expired or owned by someone else
        """
        now = self._clock()
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is not None and now - entry.last_seen > self._idle_ttl:
                del self._sessions[session_id]
                logger.info(f"Workout session expired after inactivity session_id={session_id}")
                entry = None
            if entry is not None and (entry.user_id is None or entry.user_id == user_id):
                entry.last_seen = now
        if entry is None or (entry.user_id is not None and entry.user_id != user_id):
            raise SessionNotFoundError(session_id)
        return entry.controller

    def remove(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


registry = SessionRegistry()
