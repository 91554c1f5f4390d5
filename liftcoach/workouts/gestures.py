"""Swipe recognition for exercise navigation."""

from __future__ import annotations

from enum import StrEnum

# Minimum horizontal travel for a swipe to count as navigation
SWIPE_MIN_DISTANCE = 80
# Horizontal travel must exceed vertical travel by this factor
SWIPE_DOMINANCE_RATIO = 1.5


class SwipeDirection(StrEnum):
    NEXT = "next"
    PREVIOUS = "previous"


def is_navigation_swipe(dx: float, dy: float) -> bool:
    """Return True if a gesture is a deliberate horizontal swipe.

    Diagonal and vertical drags (scrolling) are rejected.
    """
    horizontal = abs(dx)
    return horizontal > SWIPE_MIN_DISTANCE and horizontal > abs(dy) * SWIPE_DOMINANCE_RATIO


def classify_swipe(dx: float, dy: float) -> SwipeDirection | None:
    """Classify a gesture by its displacement.

    Args:
        dx: start_x - end_x (positive when the finger moved left)
        dy: start_y - end_y

    Returns:
        NEXT for a left swipe, PREVIOUS for a right swipe, None otherwise
    """
    if not is_navigation_swipe(dx, dy):
        return None
    return SwipeDirection.NEXT if dx > 0 else SwipeDirection.PREVIOUS
