"""Streaming chat turns for the research assistant (OpenAI or Anthropic)."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from dataclasses import replace

from openai import OpenAI

import anthropic_client
from models import ChatMessage, ChatSession

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-5.2")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.3"))

APOLOGY_MESSAGE = (
    "I'm sorry, I encountered an error connecting to the assistant. Please try again."
)

LOGGER = logging.getLogger(__name__)


def chat_provider() -> str:
    """Return the configured chat backend: 'openai' (default) or 'anthropic'."""
    provider = os.getenv("CHAT_PROVIDER", "openai").strip().lower()
    if provider not in {"openai", "anthropic"}:
        raise RuntimeError(f"Unsupported CHAT_PROVIDER: {provider}")
    return provider


def default_model() -> str:
    if chat_provider() == "anthropic":
        return anthropic_client.CLAUDE_MODEL
    return OPENAI_MODEL


def stream_reply(session: ChatSession, message: str) -> Iterator[str]:
    """Yield reply fragments for message, given the session's instruction and history."""
    messages = _build_messages(session, message)
    if chat_provider() == "anthropic":
        yield from anthropic_client.claude_chat_stream(messages, model=session.model)
        return
    yield from _openai_stream(messages, model=session.model)


def send_message(
    session: ChatSession,
    message: str,
    on_chunk: Callable[[str], None] | None = None,
) -> ChatSession:
    """Run one chat exchange and return the session with the new turns appended.

    Fragments are concatenated in arrival order and passed to on_chunk as they
    arrive. Any transport error is logged and answered with APOLOGY_MESSAGE;
    text already streamed before the error is kept as its own model message
    ahead of the apology. The conversation can continue afterwards. Blank
    messages are ignored.
    """
    text = message.strip()
    if not text:
        return session

    turns = [ChatMessage(role="user", text=text)]
    reply = ""
    try:
        for fragment in stream_reply(session, text):
            if not fragment:
                continue
            reply += fragment
            if on_chunk is not None:
                on_chunk(fragment)
    except Exception:  # a failed exchange must not end the chat
        LOGGER.exception("Chat error for model=%s", session.model)
        if reply:
            turns.append(ChatMessage(role="model", text=reply))
        turns.append(ChatMessage(role="model", text=APOLOGY_MESSAGE))
    else:
        turns.append(ChatMessage(role="model", text=reply))

    return replace(session, history=session.history + tuple(turns))


def _openai_stream(messages: list[dict[str, str]], model: str) -> Iterator[str]:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is required")

    client = OpenAI(api_key=api_key)
    LOGGER.debug("Streaming OpenAI model=%s", model)
    response = client.chat.completions.create(
        model=model,
        temperature=OPENAI_TEMPERATURE,
        messages=messages,
        stream=True,
    )
    for chunk in response:
        if not chunk.choices:
            continue
        content = chunk.choices[0].delta.content
        if content:
            yield content


def _build_messages(session: ChatSession, message: str) -> list[dict[str, str]]:
    """Translate the session into provider-neutral role/content dicts.

    Model messages that precede the first user message (the welcome greeting)
    are display-only and are not sent. Consecutive messages from the same role
    (a partial reply followed by the apology) are joined into one turn.
    """
    messages = [{"role": "system", "content": session.system_instruction}]
    seen_user = False
    for msg in session.history:
        if msg.role == "user":
            seen_user = True
        elif not seen_user:
            continue
        role = "user" if msg.role == "user" else "assistant"
        if messages[-1]["role"] == role:
            messages[-1]["content"] += "\n\n" + msg.text
        else:
            messages.append({"role": role, "content": msg.text})
    messages.append({"role": "user", "content": message})
    return messages
