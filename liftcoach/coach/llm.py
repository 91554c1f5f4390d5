"""Chat model access shared by tips, chat and workout generation."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_openai import ChatOpenAI
from loguru import logger
from pydantic import SecretStr

from liftcoach.coach.schemas import ChatMessage
from liftcoach.config.settings import settings

_single_prompt = ChatPromptTemplate.from_messages([("human", "{prompt}")])

_conversation_prompt = ChatPromptTemplate.from_messages([
    ("system", "{system_prompt}"),
    MessagesPlaceholder("history"),
])


def get_chat_model(*, temperature: float, max_tokens: int | None = None) -> ChatOpenAI:
    """Get configured chat model instance.

    Raises:
        ValueError: If OPENAI_API_KEY is not configured
    """
    if not settings.openai_api_key:
        raise ValueError("OPENAI_API_KEY is not set. Please configure it in your .env file or environment variables.")
    return ChatOpenAI(
        model=settings.openai_model,
        temperature=temperature,
        max_tokens=max_tokens,
        api_key=SecretStr(settings.openai_api_key),
    )


def message_text(response: Any) -> str:
    """Extract plain text from a chat model response."""
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return " ".join(str(item) for item in content if isinstance(item, str))
    return str(content)


def to_langchain_messages(messages: list[ChatMessage]) -> list[BaseMessage]:
    converted: list[BaseMessage] = []
    for message in messages:
        if message.role == "assistant":
            converted.append(AIMessage(content=message.content))
        else:
            converted.append(HumanMessage(content=message.content))
    return converted


async def complete_prompt(prompt: str, *, temperature: float, max_tokens: int | None = None) -> str:
    """Send a single user prompt and return the stripped reply text."""
    chain = _single_prompt | get_chat_model(temperature=temperature, max_tokens=max_tokens)
    logger.debug(f"Invoking chat model prompt_chars={len(prompt)}")
    response = await chain.ainvoke({"prompt": prompt})
    return message_text(response).strip()


async def complete_conversation(
    system_prompt: str,
    history: list[ChatMessage],
    *,
    temperature: float,
    max_tokens: int | None = None,
) -> str:
    """Send a system prompt plus conversation history and return the reply text."""
    chain = _conversation_prompt | get_chat_model(temperature=temperature, max_tokens=max_tokens)
    logger.debug(f"Invoking chat model with {len(history)} history messages")
    response = await chain.ainvoke({
        "system_prompt": system_prompt,
        "history": to_langchain_messages(history),
    })
    return message_text(response).strip()
