"""Coaching tip generation.

A tip is a one-line cue shown under the active exercise. The LLM is asked for
it with as much workout context as is available; whenever the model cannot
be reached or returns nothing, a deterministic tip from ``static_tip`` is
used instead so the caller always gets a tip.
"""

from __future__ import annotations

from loguru import logger

from liftcoach.coach.llm import complete_prompt
from liftcoach.coach.schemas import CoachingTipRequest, TimeOfDay, TipMode
from liftcoach.workouts.rest import format_clock

LAST_RESORT_TIP = "Focus on form and controlled movement."

_GOAL_CONTEXT = {
    "strength": "User goal: STRENGTH (heavy weights, 1-6 reps, power focus).",
    "hypertrophy": "User goal: HYPERTROPHY (8-15 reps, controlled tempo, mind-muscle connection).",
}

_TIME_OF_DAY_CONTEXT: dict[TimeOfDay, str] = {
    "morning": "Early workout - might need extra warm-up.",
    "afternoon": "Afternoon session - should be well warmed up.",
    "evening": "Evening workout - good energy levels expected.",
    "night": "Late night session - be mindful of fatigue.",
}

_MODE_INSTRUCTIONS: dict[TipMode, str] = {
    "quick": "Give a SHORT, actionable tip (max 15 words). Focus on the immediate set.",
    "form": (
        "Give a TECHNIQUE tip for {exercise}. Focus on body position, grip, range of motion, "
        "or common mistakes."
    ),
    "motivation": "Give a HYPE/MOTIVATIONAL message. Be energetic and encouraging! Use emojis. Get them fired up!",
}

_MODE_FOCUS: dict[TipMode, str] = {
    "quick": "If they followed your previous advice, acknowledge it! At PR? Extra encouragement.",
    "form": (
        'FORM FOCUS: Give specific technique cues for {exercise} (e.g., "drive through heels", '
        '"squeeze at top", "keep elbows tucked").'
    ),
    "motivation": (
        'HYPE MODE: Be enthusiastic! Use motivational language. Examples: "Let\'s GO! 🔥", '
        '"You\'ve got this!", "BEAST MODE! 💪"'
    ),
}

_RESTING_FOCUS = (
    'RESTING: Suggest weight adjustment based on difficulty. "Easy" = add weight. '
    '"Hard" = maybe drop. "Normal" = maintain.'
)

# Thresholds for the session context lines
LONG_WORKOUT_MINUTES = 45
MANY_SETS_COMPLETED = 12


def _kg(value: float) -> str:
    return f"{value:g}"


def static_tip(
    goal: str,
    current: float,
    previous: float,
    pr: float,
    is_resting: bool = False,
    difficulty: str | None = None,
    mode: str | None = None,
) -> str:
    """Deterministic tip used when the model is unavailable.

    Args:
        goal: "strength" or "hypertrophy"
        current: Weight currently selected
        previous: Weight the previous tip was generated for (0 when none)
        pr: Personal record weight (0 when none)
        is_resting: Whether a rest window is open
        difficulty: Difficulty of the last completed set
        mode: Tip mode

    Returns:
        Tip text
    """
    if mode == "motivation":
        return "💪 You've got this! Give it everything! 🔥"
    if mode == "form":
        return "Control the weight through full range of motion."
    if is_resting:
        if difficulty == "easy":
            return "💪 Easy set! Add some weight next round."
        if difficulty == "hard":
            return "😤 Tough one! Rest up, consider dropping weight."
        return "⏱️ Rest up! Same weight, focus on form."

    at_pr = pr > 0 and current >= pr
    weight_up = previous > 0 and current > previous
    if goal == "strength":
        if at_pr:
            return "🔥 PR attempt! Brace hard, explode up!"
        if weight_up:
            return "💪 Weight bump! Let's crush it!"
        return "Power and lockout. You've got this."
    if at_pr:
        return "🏆 At your max! Control every rep."
    if weight_up:
        return "👍 Good weight increase! Keep tempo slow."
    return "Slow eccentric, squeeze at peak."


def static_tip_for(request: CoachingTipRequest) -> str:
    return static_tip(
        request.training_goal,
        request.current_weight,
        request.previous_weight or 0,
        request.pr_weight,
        request.is_resting,
        request.last_set_difficulty,
        request.tip_mode,
    )


def time_of_day(hour: int) -> TimeOfDay:
    """Bucket a local hour (0-23) into a time of day."""
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def _session_context(request: CoachingTipRequest) -> str:
    parts: list[str] = []
    if request.time_of_day:
        parts.append(_TIME_OF_DAY_CONTEXT[request.time_of_day])
    if request.workout_duration and request.workout_duration > LONG_WORKOUT_MINUTES:
        parts.append(f"Been training {request.workout_duration} min - stay hydrated!")
    if request.total_sets_completed and request.total_sets_completed > MANY_SETS_COMPLETED:
        parts.append(f"{request.total_sets_completed} sets done - you're crushing it!")
    return " ".join(parts)


def _rest_context(request: CoachingTipRequest) -> str:
    if not request.is_resting or request.rest_time_left is None:
        return ""
    text = f"REST PERIOD: {format_clock(request.rest_time_left)} left."
    if request.last_set_difficulty:
        text += f" Last set felt: {request.last_set_difficulty.upper()}."
    return text


def _conversation_context(request: CoachingTipRequest) -> str:
    if request.is_resting or not request.previous_tip or request.previous_weight is None:
        return ""
    if request.current_weight == request.previous_weight:
        return ""
    direction = "INCREASED" if request.current_weight > request.previous_weight else "DECREASED"
    return (
        f'Previous tip: "{request.previous_tip}" at {_kg(request.previous_weight)}kg. '
        f"User {direction} to {_kg(request.current_weight)}kg."
    )


def _difficulty_context(request: CoachingTipRequest) -> str:
    if request.is_resting or not request.last_set_difficulty:
        return ""
    if not request.current_set or request.current_set <= 1:
        return ""
    return f"Previous set felt: {request.last_set_difficulty.upper()}."


def build_tip_prompt(request: CoachingTipRequest) -> str:
    """Build the single-message prompt for a coaching tip."""
    if request.last_weight > 0:
        history = (
            f"Last workout: {_kg(request.last_weight)}kg × {request.last_reps}. "
            f"PR: {_kg(request.pr_weight)}kg × {request.pr_reps}."
        )
    else:
        history = "First time doing this exercise."

    current = f"Current: {_kg(request.current_weight)}kg × {request.current_reps} reps."
    if request.current_set and request.total_sets:
        current += f" Set {request.current_set}/{request.total_sets}."

    if request.is_resting:
        focus = _RESTING_FOCUS
    else:
        focus = _MODE_FOCUS[request.tip_mode].replace("{exercise}", request.exercise_name)
    instructions = _MODE_INSTRUCTIONS[request.tip_mode].replace("{exercise}", request.exercise_name)
    lines = [
        f"You are a gym coach. {instructions}",
        "",
        _GOAL_CONTEXT[request.training_goal],
        history,
        current,
        _session_context(request),
        _difficulty_context(request),
        _rest_context(request),
        _conversation_context(request),
        "",
        focus,
        "",
        "Respond with ONLY the tip. No quotes. Keep it concise.",
    ]
    return "\n".join(lines)


def _sampling_for(mode: TipMode) -> tuple[float, int]:
    if mode == "motivation":
        return 0.9, 40
    return 0.7, 50


async def generate_coaching_tip(request: CoachingTipRequest) -> str:
    """Generate a coaching tip, never raising.

    Args:
        request: Tip context

    Returns:
        Model tip, or the static tip when the model fails or answers empty
    """
    try:
        prompt = build_tip_prompt(request)
    except Exception:
        logger.error("Failed to build coaching tip prompt", exc_info=True)
        return LAST_RESORT_TIP

    temperature, max_tokens = _sampling_for(request.tip_mode)
    try:
        tip = await complete_prompt(prompt, temperature=temperature, max_tokens=max_tokens)
    except Exception as e:
        logger.warning(f"Coaching tip model call failed, using static tip: {e}")
        return static_tip_for(request)

    tip = tip.strip().strip('"').strip()
    if not tip:
        logger.debug("Coaching tip model returned empty text, using static tip")
        return static_tip_for(request)
    return tip


class LLMTipGenerator:
    """Tip generator used by the session controller."""

    async def __call__(self, request: CoachingTipRequest) -> str:
        return await generate_coaching_tip(request)
