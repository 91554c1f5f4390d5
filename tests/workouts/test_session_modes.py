"""Tests for the session mode state machine."""

import pytest

from liftcoach.workouts.errors import InvalidTransitionError
from liftcoach.workouts.modes import ModeEvent, SessionMode, transition


class TestTransition:
    def test_rest_cycle(self):
        mode = transition(SessionMode.IDLE, ModeEvent.REST_STARTED, resting=True)
        assert mode == SessionMode.RESTING
        assert transition(mode, ModeEvent.REST_ENDED, resting=False) == SessionMode.IDLE

    @pytest.mark.parametrize(
        ("open_event", "close_event", "overlay"),
        [
            (ModeEvent.OPEN_SETS, ModeEvent.CLOSE_SETS, SessionMode.VIEWING_SETS),
            (ModeEvent.OPEN_CHAT, ModeEvent.CLOSE_CHAT, SessionMode.CHATTING),
            (ModeEvent.REQUEST_EXIT, ModeEvent.CANCEL_EXIT, SessionMode.CONFIRMING_EXIT),
        ],
    )
    def test_closing_overlay_returns_to_rest_while_window_open(self, open_event, close_event, overlay):
        mode = transition(SessionMode.RESTING, open_event, resting=True)
        assert mode == overlay
        assert transition(mode, close_event, resting=True) == SessionMode.RESTING
        assert transition(mode, close_event, resting=False) == SessionMode.IDLE

    def test_rest_ending_under_overlay_keeps_overlay(self):
        assert transition(SessionMode.CHATTING, ModeEvent.REST_ENDED, resting=False) == SessionMode.CHATTING

    def test_overlays_do_not_stack(self):
        with pytest.raises(InvalidTransitionError):
            transition(SessionMode.CHATTING, ModeEvent.OPEN_SETS, resting=False)

    def test_confirm_exit_closes(self):
        mode = transition(SessionMode.IDLE, ModeEvent.REQUEST_EXIT, resting=False)
        assert transition(mode, ModeEvent.CONFIRM_EXIT, resting=False) == SessionMode.CLOSED

    def test_closed_accepts_nothing(self):
        for event in ModeEvent:
            with pytest.raises(InvalidTransitionError):
                transition(SessionMode.CLOSED, event, resting=False)

    def test_confirm_without_request_is_invalid(self):
        with pytest.raises(InvalidTransitionError):
            transition(SessionMode.IDLE, ModeEvent.CONFIRM_EXIT, resting=False)
