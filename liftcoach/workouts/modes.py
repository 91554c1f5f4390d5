"""Foreground mode of a workout session.

A single state machine replaces independent visibility flags (rest timer,
sets sheet, chat, exit dialog) so impossible combinations cannot occur.

The rest window itself keeps running while an overlay is open. Closing an
overlay returns to RESTING if the window is still open, otherwise to IDLE.
"""

from __future__ import annotations

from enum import StrEnum

from liftcoach.workouts.errors import InvalidTransitionError


class SessionMode(StrEnum):
    IDLE = "idle"
    RESTING = "resting"
    VIEWING_SETS = "viewing_sets"
    CHATTING = "chatting"
    CONFIRMING_EXIT = "confirming_exit"
    CLOSED = "closed"


class ModeEvent(StrEnum):
    REST_STARTED = "rest_started"
    REST_ENDED = "rest_ended"
    OPEN_SETS = "open_sets"
    CLOSE_SETS = "close_sets"
    OPEN_CHAT = "open_chat"
    CLOSE_CHAT = "close_chat"
    REQUEST_EXIT = "request_exit"
    CANCEL_EXIT = "cancel_exit"
    CONFIRM_EXIT = "confirm_exit"


# Sentinel target: resolved to RESTING or IDLE depending on the rest window
_BASE = "base"

_TRANSITIONS: dict[SessionMode, dict[ModeEvent, SessionMode | str]] = {
    SessionMode.IDLE: {
        ModeEvent.REST_STARTED: SessionMode.RESTING,
        ModeEvent.REST_ENDED: SessionMode.IDLE,
        ModeEvent.OPEN_SETS: SessionMode.VIEWING_SETS,
        ModeEvent.OPEN_CHAT: SessionMode.CHATTING,
        ModeEvent.REQUEST_EXIT: SessionMode.CONFIRMING_EXIT,
    },
    SessionMode.RESTING: {
        ModeEvent.REST_STARTED: SessionMode.RESTING,
        ModeEvent.REST_ENDED: SessionMode.IDLE,
        ModeEvent.OPEN_SETS: SessionMode.VIEWING_SETS,
        ModeEvent.OPEN_CHAT: SessionMode.CHATTING,
        ModeEvent.REQUEST_EXIT: SessionMode.CONFIRMING_EXIT,
    },
    SessionMode.VIEWING_SETS: {
        ModeEvent.REST_ENDED: SessionMode.VIEWING_SETS,
        ModeEvent.CLOSE_SETS: _BASE,
    },
    SessionMode.CHATTING: {
        ModeEvent.REST_ENDED: SessionMode.CHATTING,
        ModeEvent.CLOSE_CHAT: _BASE,
    },
    SessionMode.CONFIRMING_EXIT: {
        ModeEvent.REST_ENDED: SessionMode.CONFIRMING_EXIT,
        ModeEvent.CANCEL_EXIT: _BASE,
        ModeEvent.CONFIRM_EXIT: SessionMode.CLOSED,
    },
    SessionMode.CLOSED: {},
}

# Modes in which the workout itself (sets, navigation) can be driven
INTERACTIVE_MODES = frozenset({SessionMode.IDLE, SessionMode.RESTING})


def transition(mode: SessionMode, event: ModeEvent, *, resting: bool) -> SessionMode:
    """Apply ``event`` to ``mode``.

    Args:
        mode: Current mode
        event: Event to apply
        resting: Whether a rest window is open after the event

    Raises:
        InvalidTransitionError: If the event is not allowed in ``mode``
    """
    target = _TRANSITIONS[mode].get(event)
    if target is None:
        raise InvalidTransitionError(mode.value, event.value)
    if target == _BASE:
        return SessionMode.RESTING if resting else SessionMode.IDLE
    return SessionMode(target)
