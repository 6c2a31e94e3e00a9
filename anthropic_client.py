"""Thin streaming wrapper around the Anthropic Messages API."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from typing import Any

import anthropic

CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "claude-opus-4-6")

LOGGER = logging.getLogger(__name__)


def claude_chat_stream(
    messages: list[dict[str, str]],
    model: str | None = None,
    max_tokens: int = 1024,
) -> Iterator[str]:
    """Stream the Claude reply as text fragments, in arrival order.

    Args:
        messages: List of message dicts with "role" and "content" keys.
                  A "system" role message is extracted and passed via the
                  Anthropic API's dedicated system= parameter.
        model: Model name; defaults to CLAUDE_MODEL.
        max_tokens: Hard cap on output tokens.
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError("ANTHROPIC_API_KEY environment variable is required")

    claude_model = model or CLAUDE_MODEL
    client = anthropic.Anthropic(api_key=api_key)

    system: str | None = None
    filtered: list[dict[str, Any]] = []
    for msg in messages:
        if msg["role"] == "system":
            system = msg["content"]
        else:
            filtered.append({"role": msg["role"], "content": msg["content"]})

    kwargs: dict[str, Any] = {
        "model": claude_model,
        "max_tokens": max_tokens,
        "messages": filtered,
    }
    if system:
        kwargs["system"] = system

    LOGGER.debug("Streaming Claude model=%s max_tokens=%s", claude_model, max_tokens)
    with client.messages.stream(**kwargs) as stream:
        yield from stream.text_stream
