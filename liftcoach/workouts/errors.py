"""Error types for the workout session module.

These are user-flow errors (illegal actions for the current session state),
not infrastructure failures. Routes translate them into 4xx responses.
"""


class SessionError(Exception):
    """Base class for workout session errors."""


class SetAlreadyCompletedError(SessionError):
    """Raised when completing or skipping a set that is no longer pending."""

    def __init__(self, exercise_id: str, set_number: int):
        self.exercise_id = exercise_id
        self.set_number = set_number
        super().__init__(f"Set {set_number} of exercise {exercise_id} is already completed")


class InvalidTransitionError(SessionError):
    """Raised when an action is not allowed in the current session mode."""

    def __init__(self, mode: str, event: str):
        self.mode = mode
        self.event = event
        super().__init__(f"Cannot apply '{event}' while session is '{mode}'")


class SessionClosedError(SessionError):
    """Raised when acting on a session the user already exited."""


class SessionNotFoundError(SessionError):
    """Raised when a session id is unknown to the registry."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Workout session {session_id} not found")
