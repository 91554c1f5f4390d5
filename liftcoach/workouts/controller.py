"""Workout session controller.

Owns one running session: the immutable SessionState plus the ephemeral
screen state around it (inputs, rest window, foreground mode, coaching tip,
chat). Every user action is applied locally first; persistence, tips and
chat are best effort and never roll a local change back.

Async work (tips, chat) is tagged with the active exercise and a sequence
number taken when the request starts. A response whose tag no longer matches
when it arrives is dropped.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from liftcoach.coach.errors import CoachChatError
from liftcoach.coach.schemas import ChatMessage, CoachingTipRequest, ExerciseContext, TipMode, TrainingGoal
from liftcoach.coach.tips import static_tip_for, time_of_day
from liftcoach.config.settings import settings
from liftcoach.workouts import transitions
from liftcoach.workouts.errors import InvalidTransitionError, SessionClosedError
from liftcoach.workouts.gestures import SwipeDirection, classify_swipe
from liftcoach.workouts.history import ExerciseHistory
from liftcoach.workouts.modes import INTERACTIVE_MODES, ModeEvent, SessionMode, transition
from liftcoach.workouts.persistence import NullSetStore, SetStore
from liftcoach.workouts.rest import Clock, RestWindow, now_ms
from liftcoach.workouts.state import Difficulty, SessionState
from liftcoach.workouts.summary import SessionSummary, summarize

TipGenerator = Callable[[CoachingTipRequest], Awaitable[str]]
ChatResponder = Callable[[list[ChatMessage], ExerciseContext | None], Awaitable[str]]

CHAT_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."
CHAT_CONNECTION_MESSAGE = "Sorry, I could not connect. Please check your connection."


@dataclass(frozen=True)
class TipContext:
    """Last tip shown and the inputs it was generated for."""

    tip: str
    weight: float
    reps: int


@dataclass(frozen=True)
class RequestTag:
    exercise_id: str
    sequence: int


class WorkoutSessionController:
    """Drives a single workout session.

    Args:
        session: Session to run
        store: Destination for completed sets (nothing is saved by default)
        tip_generator: Async callable producing a coaching tip
        chat_responder: Async callable answering chat messages
        history: Per-exercise last/PR history used for tips
        training_goal: Goal used for tips
        tip_mode: Initial tip mode
        clock: Epoch milliseconds source
        debounce_seconds: Quiet period before a tip request is sent
    """

    def __init__(
        self,
        session: SessionState,
        *,
        store: SetStore | None = None,
        tip_generator: TipGenerator | None = None,
        chat_responder: ChatResponder | None = None,
        history: dict[str, ExerciseHistory] | None = None,
        training_goal: TrainingGoal = "hypertrophy",
        tip_mode: TipMode = "quick",
        clock: Clock = now_ms,
        debounce_seconds: float | None = None,
    ):
        self.state = session
        self.store: SetStore = store or NullSetStore()
        self.tip_generator = tip_generator
        self.chat_responder = chat_responder
        self.history = history or {}
        self.training_goal: TrainingGoal = training_goal
        self.tip_mode: TipMode = tip_mode
        self.clock = clock
        self.debounce_seconds = settings.tip_debounce_seconds if debounce_seconds is None else debounce_seconds

        self.mode = SessionMode.IDLE
        self.rest: RestWindow | None = None
        self.pending_difficulty = Difficulty.NORMAL
        self.last_difficulty: Difficulty | None = None
        self.tip: str | None = None
        self.tip_context: TipContext | None = None
        self.chat_messages: list[ChatMessage] = []
        self.started_ms = clock()

        self._tip_sequence = 0
        self._chat_sequence = 0

        self.current_weight = 0.0
        self.current_reps = 0
        self._sync_inputs()

    # ------------------------------------------------------------------
    # Guards and helpers
    # ------------------------------------------------------------------

    @property
    def resting(self) -> bool:
        return self.rest is not None and not self.rest.is_over(self.clock())

    @property
    def rest_remaining(self) -> int:
        if self.rest is None:
            return 0
        return self.rest.remaining(self.clock())

    def _require_open(self) -> None:
        if self.mode == SessionMode.CLOSED:
            raise SessionClosedError(f"Workout session {self.state.id} was exited")

    def _require_interactive(self, action: str) -> None:
        self._require_open()
        if self.mode not in INTERACTIVE_MODES:
            raise InvalidTransitionError(self.mode.value, action)

    def _apply(self, event: ModeEvent) -> None:
        self._require_open()
        if self.rest is not None and self.rest.is_over(self.clock()):
            self._close_rest()
        self.mode = transition(self.mode, event, resting=self.rest is not None)

    def _sync_inputs(self) -> None:
        """Load weight and reps inputs from the active exercise's current set."""
        if not self.state.exercises:
            return
        current = self.state.active_exercise.current
        if current is None:
            return
        self.current_weight = current.weight or 0.0
        self.current_reps = current.completed_reps or current.target_reps

    def _invalidate_tip(self) -> None:
        self._tip_sequence += 1

    def _close_rest(self) -> None:
        self.rest = None
        self.mode = transition(self.mode, ModeEvent.REST_ENDED, resting=False)
        self._invalidate_tip()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_weight(self, weight: float) -> None:
        self._require_open()
        self.current_weight = max(0.0, float(weight))
        self._invalidate_tip()

    def adjust_weight(self, delta: float) -> None:
        """Step the weight input, never below zero."""
        self.set_weight(self.current_weight + delta)

    def set_reps(self, reps: int) -> None:
        self._require_open()
        self.current_reps = max(0, int(reps))
        self._invalidate_tip()

    def select_difficulty(self, difficulty: Difficulty | str) -> None:
        self._require_open()
        self.pending_difficulty = Difficulty(difficulty)

    def set_tip_mode(self, mode: TipMode) -> None:
        self.tip_mode = mode
        self._invalidate_tip()

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    def complete_set(self) -> transitions.SetCompletion:
        """Complete the active exercise's current set with the current inputs.

        Raises:
            SetAlreadyCompletedError: If the current set is not pending
            InvalidTransitionError: If an overlay is open
        """
        self._require_interactive("complete_set")
        difficulty = self.pending_difficulty
        completion = transitions.complete_current_set(
            self.state, self.current_reps, self.current_weight, difficulty
        )

        try:
            self.store.save_completed_set(completion.state, completion.exercise_index, completion.completed_set)
        except Exception:
            logger.error(
                f"Failed to save completed set session_id={self.state.id} "
                f"set={completion.completed_set.set_number}",
                exc_info=True,
            )

        self.state = completion.state
        if completion.moved_to_next_exercise:
            upcoming = self.state.active_exercise
            self.current_weight = upcoming.sets[0].weight or 0.0
            self.current_reps = upcoming.current.target_reps if upcoming.current else upcoming.sets[0].target_reps
        else:
            current = self.state.active_exercise.current
            # Keep the weight just lifted for the next set of the same exercise
            if current is not None and not current.completed:
                self.current_reps = current.target_reps

        self.last_difficulty = difficulty
        self.pending_difficulty = Difficulty.NORMAL

        if completion.opens_rest:
            self.rest = RestWindow.open(completion.rest_seconds, self.clock())
            self.mode = transition(self.mode, ModeEvent.REST_STARTED, resting=True)

        if self.state.is_complete:
            logger.info(f"All sets completed session_id={self.state.id}")
            try:
                self.store.mark_completed(self.state)
            except Exception:
                logger.error(f"Failed to mark session completed session_id={self.state.id}", exc_info=True)

        self._invalidate_tip()
        return completion

    def skip_set(self) -> None:
        """Move past the current set without recording it."""
        self._require_interactive("skip_set")
        previous_index = self.state.active_index
        self.state = transitions.skip_current_set(self.state)
        if self.state.active_index != previous_index:
            self._sync_inputs()
        else:
            current = self.state.active_exercise.current
            if current is not None and not current.completed:
                self.current_reps = current.target_reps
        self._invalidate_tip()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _navigate(self, new_state: SessionState) -> None:
        if new_state.active_index != self.state.active_index:
            self.state = new_state
            self._sync_inputs()
            self._invalidate_tip()
        else:
            self.state = new_state

    def next_exercise(self) -> None:
        self._require_interactive("next_exercise")
        self._navigate(transitions.next_exercise(self.state))

    def previous_exercise(self) -> None:
        self._require_interactive("previous_exercise")
        self._navigate(transitions.previous_exercise(self.state))

    def swipe(self, dx: float, dy: float) -> SwipeDirection | None:
        """Navigate on a horizontal swipe. Returns the direction taken, if any."""
        direction = classify_swipe(dx, dy)
        if direction is None:
            return None
        if direction == SwipeDirection.NEXT:
            self.next_exercise()
        else:
            self.previous_exercise()
        return direction

    def reorder(self, direction: transitions.ReorderDirection) -> None:
        self._require_interactive("reorder")
        self.state = transitions.reorder_active(self.state, direction)

    # ------------------------------------------------------------------
    # Rest
    # ------------------------------------------------------------------

    def tick(self) -> int:
        """Recompute remaining rest seconds; closes the window at zero."""
        if self.rest is None:
            return 0
        remaining = self.rest.remaining(self.clock())
        if remaining == 0:
            logger.debug(f"Rest finished session_id={self.state.id}")
            self._close_rest()
        return remaining

    def skip_rest(self) -> None:
        self._require_open()
        if self.rest is not None:
            self._close_rest()

    # ------------------------------------------------------------------
    # Overlays
    # ------------------------------------------------------------------

    def open_sets(self) -> None:
        self._apply(ModeEvent.OPEN_SETS)

    def close_sets(self) -> None:
        self._apply(ModeEvent.CLOSE_SETS)

    def open_chat(self) -> None:
        self._apply(ModeEvent.OPEN_CHAT)

    def close_chat(self) -> None:
        self._apply(ModeEvent.CLOSE_CHAT)
        # A reply still in flight belongs to the overlay that was just closed
        self._chat_sequence += 1

    def request_exit(self) -> None:
        self._apply(ModeEvent.REQUEST_EXIT)

    def cancel_exit(self) -> None:
        self._apply(ModeEvent.CANCEL_EXIT)

    def confirm_exit(self) -> bool:
        """Close the session.

        Returns:
            True if nothing was completed, meaning the session left no trace
        """
        self._apply(ModeEvent.CONFIRM_EXIT)
        self.rest = None
        self._invalidate_tip()
        self._chat_sequence += 1
        discarded = self.state.completed_set_count == 0
        logger.info(f"Workout session exited session_id={self.state.id} discarded={discarded}")
        return discarded

    # ------------------------------------------------------------------
    # Coaching tips
    # ------------------------------------------------------------------

    def tip_tag(self) -> RequestTag:
        return RequestTag(exercise_id=self.state.active_exercise.id, sequence=self._tip_sequence)

    def tip_is_stale(self, tag: RequestTag) -> bool:
        return self.mode == SessionMode.CLOSED or tag != self.tip_tag()

    def build_tip_request(self) -> CoachingTipRequest:
        """Bundle the current screen state into a tip request."""
        exercise = self.state.active_exercise
        history = self.history.get(exercise.id, ExerciseHistory())
        now = self.clock()
        resting = self.resting

        previous = self.tip_context if not resting else None
        return CoachingTipRequest(
            exercise_name=exercise.name,
            muscle_group=exercise.muscle_group,
            current_weight=self.current_weight,
            current_reps=self.current_reps,
            last_weight=history.last_weight,
            last_reps=history.last_reps,
            pr_weight=history.pr_weight,
            pr_reps=history.pr_reps,
            training_goal=self.training_goal,
            previous_tip=previous.tip if previous else None,
            previous_weight=previous.weight if previous else None,
            previous_reps=previous.reps if previous else None,
            is_resting=resting,
            rest_time_left=self.rest.remaining(now) if resting and self.rest else None,
            current_set=exercise.current_set,
            total_sets=exercise.total_sets,
            last_set_difficulty=self.last_difficulty.value if self.last_difficulty else None,
            time_of_day=time_of_day(datetime.fromtimestamp(now / 1000).hour),
            workout_duration=max(0, now - self.started_ms) // 60_000,
            total_sets_completed=self.state.completed_set_count,
            tip_mode=self.tip_mode,
        )

    async def refresh_tip(self, *, debounce: bool = True) -> str | None:
        """Fetch a tip for the current context.

        Returns:
            The tip, or None if the context changed before it arrived
        """
        self._require_open()
        tag = self.tip_tag()
        if debounce and self.debounce_seconds > 0:
            await asyncio.sleep(self.debounce_seconds)
            if self.tip_is_stale(tag):
                return None

        request = self.build_tip_request()
        if self.tip_generator is None:
            tip = static_tip_for(request)
        else:
            try:
                tip = await self.tip_generator(request)
            except Exception:
                logger.warning(f"Tip generator failed session_id={self.state.id}", exc_info=True)
                tip = static_tip_for(request)

        if self.tip_is_stale(tag):
            logger.debug(f"Discarding stale tip exercise_id={tag.exercise_id} sequence={tag.sequence}")
            return None

        self.tip = tip
        self.tip_context = TipContext(tip=tip, weight=self.current_weight, reps=self.current_reps)
        return tip

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    def exercise_context(self) -> ExerciseContext:
        exercise = self.state.active_exercise
        current = exercise.current
        return ExerciseContext(
            name=exercise.name,
            muscle_group=exercise.muscle_group,
            current_set=exercise.current_set,
            total_sets=exercise.total_sets,
            target_reps=current.target_reps if current else None,
            weight=self.current_weight,
        )

    async def send_chat(self, text: str) -> ChatMessage | None:
        """Send a chat message and append the reply.

        Failures become an assistant bubble instead of an exception.

        Returns:
            The appended assistant message, or None if it was discarded
        """
        self._require_open()
        if self.mode != SessionMode.CHATTING:
            raise InvalidTransitionError(self.mode.value, "send_chat")
        content = text.strip()
        if not content:
            return None

        self.chat_messages.append(ChatMessage(role="user", content=content))
        self._chat_sequence += 1
        tag = RequestTag(exercise_id=self.state.active_exercise.id, sequence=self._chat_sequence)

        if self.chat_responder is None:
            reply = CHAT_CONNECTION_MESSAGE
        else:
            try:
                reply = await self.chat_responder(list(self.chat_messages), self.exercise_context())
            except CoachChatError as e:
                logger.warning(f"Chat failed session_id={self.state.id}: {e.message}")
                reply = CHAT_ERROR_MESSAGE
            except Exception:
                logger.error(f"Chat request failed session_id={self.state.id}", exc_info=True)
                reply = CHAT_CONNECTION_MESSAGE

        current = RequestTag(exercise_id=self.state.active_exercise.id, sequence=self._chat_sequence)
        if self.mode == SessionMode.CLOSED or tag != current:
            logger.debug(f"Discarding stale chat reply sequence={tag.sequence}")
            return None

        message = ChatMessage(role="assistant", content=reply or CHAT_ERROR_MESSAGE)
        self.chat_messages.append(message)
        return message

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def summary(self) -> SessionSummary:
        return summarize(self.state)
