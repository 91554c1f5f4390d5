"""In-workout chat with the coach."""

from __future__ import annotations

from loguru import logger

from liftcoach.coach.errors import CoachChatError
from liftcoach.coach.llm import complete_conversation
from liftcoach.coach.schemas import ChatMessage, ExerciseContext
from liftcoach.workouts.history import PersonalRecord, load_personal_records

CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 500

NO_REPLY_MESSAGE = "Sorry, I could not generate a response."


def _format_weight(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:g}"


def build_system_prompt(context: ExerciseContext | None, records: list[PersonalRecord]) -> str:
    """Build the coach system prompt from the exercise on screen and the user's PRs."""
    if context is not None:
        exercise_block = (
            "Current exercise context:\n"
            f"- Exercise: {context.name}\n"
            f"- Muscle group: {context.muscle_group}\n"
            f"- Current set: {context.current_set} of {context.total_sets}\n"
            f"- Target reps: {context.target_reps}\n"
            f"- Weight: {_format_weight(context.weight)}kg"
        )
    else:
        exercise_block = "No specific exercise context provided."

    records_block = ""
    if records:
        lines = [f"- {r.exercise_name}: {r.weight:g}kg x {r.reps} reps" for r in records]
        records_block = "\n\nUser's Personal Records (PRs):\n" + "\n".join(lines)

    return (
        "You are an AI workout coach helping someone during their workout. "
        "Be concise, encouraging, and helpful.\n\n"
        f"{exercise_block}"
        f"{records_block}\n\n"
        "Provide brief, actionable advice. If asked about form, give clear step-by-step instructions. "
        "If asked about PRs or history, use the data provided above. "
        "Keep responses under 150 words unless detailed explanation is needed."
    )


def _records_for(user_id: str | None) -> list[PersonalRecord]:
    if user_id is None:
        return []
    try:
        return load_personal_records(user_id)
    except Exception:
        # Chat still works without history
        logger.warning(f"Could not load personal records for chat user_id={user_id}", exc_info=True)
        return []


async def generate_chat_reply(
    messages: list[ChatMessage],
    context: ExerciseContext | None = None,
    user_id: str | None = None,
) -> str:
    """Answer the latest user message in the conversation.

    Args:
        messages: Conversation so far, oldest first
        context: Exercise currently shown
        user_id: Authenticated user, used to include personal records

    Returns:
        Assistant reply text

    Raises:
        CoachChatError: If the chat model cannot be reached or fails
    """
    system_prompt = build_system_prompt(context, _records_for(user_id))
    try:
        reply = await complete_conversation(
            system_prompt,
            messages,
            temperature=CHAT_TEMPERATURE,
            max_tokens=CHAT_MAX_TOKENS,
        )
    except ValueError as e:
        logger.error(f"Chat model is not configured: {e}")
        raise CoachChatError("Failed to get response from AI", status_code=503) from e
    except Exception as e:
        logger.error("AI chat error", exc_info=True)
        raise CoachChatError("Failed to get response from AI") from e

    return reply or NO_REPLY_MESSAGE


class LLMChatResponder:
    """Chat responder used by the session controller."""

    def __init__(self, user_id: str | None = None):
        self.user_id = user_id

    async def __call__(self, messages: list[ChatMessage], context: ExerciseContext | None) -> str:
        return await generate_chat_reply(messages, context, self.user_id)
