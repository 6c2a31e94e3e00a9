"""Tests for the CLI entrypoint (main.main / main.chat_loop)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

import main
from chat_client import APOLOGY_MESSAGE
from models import ChatMessage, ChatSession, PublicationRecord, ResearcherProfile
from orcid_csv import MissingColumnError
from pipeline import EmptyBatchError

_PROFILE = ResearcherProfile(
    identifier="0000-0002-1825-0097",
    display_name="Researcher 0000-0002-1825-0097",
    works=(PublicationRecord(title="T", year=2021, type="BOOK", local_id="1"),),
)


@pytest.fixture(autouse=True)
def no_dotenv():
    with patch("main.load_dotenv"):
        yield


def test_parse_args_requires_a_source() -> None:
    with pytest.raises(SystemExit):
        main.parse_args([])


def test_parse_args_rejects_both_sources() -> None:
    with pytest.raises(SystemExit):
        main.parse_args(["--orcid", "x", "--csv", "y.csv"])


def test_main_single_prints_summary(capsys: pytest.CaptureFixture) -> None:
    with patch("main.analyze_single", return_value=[_PROFILE]) as mock_single:
        code = main.main(["--orcid", "0000-0002-1825-0097"])

    assert code == 0
    mock_single.assert_called_once_with("0000-0002-1825-0097")
    out = capsys.readouterr().out
    assert "Analysis Report" in out
    assert "Total Publications: 1" in out


def test_main_batch_writes_reports(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    with patch("main.analyze_csv", return_value=[_PROFILE]) as mock_csv:
        code = main.main(["--csv", "ids.csv", "--report-dir", str(tmp_path)])

    assert code == 0
    mock_csv.assert_called_once_with("ids.csv")
    assert (tmp_path / "researchers.csv").exists()
    assert "Reports written to" in capsys.readouterr().out


@pytest.mark.parametrize("error", [
    MissingColumnError("CSV must contain an 'orcid' column."),
    EmptyBatchError("No valid ORCID IDs found in file."),
    FileNotFoundError("ids.csv"),
])
def test_main_reports_user_errors(error: Exception, capsys: pytest.CaptureFixture) -> None:
    with patch("main.analyze_csv", side_effect=error):
        code = main.main(["--csv", "ids.csv"])

    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_main_opens_chat_with_session_for_summary() -> None:
    with patch("main.analyze_single", return_value=[_PROFILE]), \
         patch("main.chat_loop") as mock_loop:
        main.main(["--orcid", "0000-0002-1825-0097", "--chat"])

    session = mock_loop.call_args.args[0]
    assert "Total Researchers Analyzed: 1" in session.system_instruction


class _Console:
    def __init__(self, inputs: list[str]) -> None:
        self._inputs = iter(inputs)
        self.output: list[str] = []

    def read(self, prompt: str = "") -> str:
        try:
            return next(self._inputs)
        except StopIteration:
            raise EOFError from None

    def write(self, text: str = "", end: str = "\n", flush: bool = False) -> None:
        self.output.append(text + end)


_SESSION = ChatSession(
    system_instruction="SYS",
    model="test-model",
    history=(ChatMessage(role="model", text="Hello!"),),
)


def _fake_send(replies: list[str], stream: bool = True):
    replies_iter = iter(replies)

    def send(session, message, on_chunk=None):
        reply = next(replies_iter)
        if stream and on_chunk is not None and reply != APOLOGY_MESSAGE:
            on_chunk(reply)
        return ChatSession(
            system_instruction=session.system_instruction,
            model=session.model,
            history=session.history + (
                ChatMessage(role="user", text=message),
                ChatMessage(role="model", text=reply),
            ),
        )

    return send


def test_chat_loop_streams_replies_until_exit() -> None:
    console = _Console(["How many?", "", "exit", "never read"])

    with patch("main.send_message", side_effect=_fake_send(["Forty."])) as mock_send:
        session = main.chat_loop(_SESSION, read=console.read, write=console.write)

    assert mock_send.call_count == 1
    assert session.history[-1].text == "Forty."
    assert "".join(console.output) == "Hello!\nForty.\n"


def test_chat_loop_prints_apology_and_stops_on_eof() -> None:
    console = _Console(["Hello?"])

    with patch("main.send_message", side_effect=_fake_send([APOLOGY_MESSAGE])):
        main.chat_loop(_SESSION, read=console.read, write=console.write)

    assert "".join(console.output) == f"Hello!\n{APOLOGY_MESSAGE}\n"


def test_chat_loop_prints_apology_after_partial_stream() -> None:
    console = _Console(["Which year?"])

    def send(session, message, on_chunk=None):
        on_chunk("The busiest")
        return ChatSession(
            system_instruction=session.system_instruction,
            model=session.model,
            history=session.history + (
                ChatMessage(role="user", text=message),
                ChatMessage(role="model", text="The busiest"),
                ChatMessage(role="model", text=APOLOGY_MESSAGE),
            ),
        )

    with patch("main.send_message", side_effect=send):
        main.chat_loop(_SESSION, read=console.read, write=console.write)

    assert "".join(console.output) == f"Hello!\nThe busiest\n{APOLOGY_MESSAGE}\n"
