from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from anthropic_client import claude_chat_stream


def _mock_client(fragments: list[str]) -> MagicMock:
    stream = MagicMock()
    stream.text_stream = iter(fragments)
    client = MagicMock()
    client.messages.stream.return_value.__enter__.return_value = stream
    return client


def test_claude_chat_stream_yields_fragments_and_extracts_system() -> None:
    client = _mock_client(["Hel", "lo"])
    messages = [
        {"role": "system", "content": "SYS"},
        {"role": "user", "content": "hi"},
    ]

    with patch("anthropic_client.anthropic.Anthropic", return_value=client), \
         patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test-key"}):
        fragments = list(claude_chat_stream(messages, model="claude-test"))

    assert fragments == ["Hel", "lo"]
    kwargs = client.messages.stream.call_args.kwargs
    assert kwargs["system"] == "SYS"
    assert kwargs["model"] == "claude-test"
    assert kwargs["messages"] == [{"role": "user", "content": "hi"}]


def test_claude_chat_stream_raises_without_api_key() -> None:
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(RuntimeError, match="ANTHROPIC_API_KEY"):
            list(claude_chat_stream([{"role": "user", "content": "hi"}]))
