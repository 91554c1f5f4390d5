"""Error types for coach module."""


class CoachChatError(Exception):
    """Raised when the chat model cannot produce a reply.

    Carries the HTTP status to report to the caller.
    """

    def __init__(self, message: str, status_code: int = 502):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class WorkoutGenerationError(Exception):
    """Raised when a workout cannot be generated.

    There is no safe default for a whole program, so unlike tips this is
    always surfaced to the caller.
    """

    def __init__(self, message: str, raw_output: str | None = None):
        self.message = message
        self.raw_output = raw_output
        super().__init__(message)
