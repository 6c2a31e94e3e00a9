"""CLI entrypoint for ORCID publication analytics."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from chat_client import send_message
from chat_context import new_chat_session
from models import AggregateSummary, ChatSession
from orcid_csv import MissingColumnError
from pipeline import EmptyBatchError, analyze_csv, analyze_single
from report import format_summary, generate_reports
from stats import compute_summary

_EXIT_COMMANDS = frozenset({"exit", "quit"})


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Analyze ORCID publication records")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--orcid", help="Single ORCID iD, e.g. 0000-0002-1825-0097")
    source.add_argument("--csv", help="CSV file with an 'orcid' column (batch analysis)")
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Write researchers / by-year / by-type CSV reports to this directory",
    )
    parser.add_argument(
        "--chat",
        action="store_true",
        help="Open an interactive assistant chat about the analysis",
    )
    return parser.parse_args(argv)


def run(orcid: str | None, csv_path: str | None) -> AggregateSummary | None:
    """Run one analysis and return its summary (None when nothing was fetched)."""
    if csv_path:
        profiles = analyze_csv(csv_path)
    else:
        profiles = analyze_single(orcid or "")
    logging.info("Analysis fetched %s profiles", len(profiles))
    return compute_summary(profiles)


def chat_loop(session: ChatSession, read=input, write=print) -> ChatSession:
    """Read questions until 'exit' or EOF, streaming each answer to write()."""
    write(session.history[-1].text)
    while True:
        try:
            question = read("> ")
        except EOFError:
            break
        if question.strip().lower() in _EXIT_COMMANDS:
            break
        if not question.strip():
            continue

        streamed: list[str] = []

        def on_chunk(fragment: str) -> None:
            streamed.append(fragment)
            write(fragment, end="", flush=True)

        session = send_message(session, question, on_chunk=on_chunk)
        reply = session.history[-1].text
        if streamed:
            write("")  # streamed fragments end without a newline
        if reply != "".join(streamed):
            write(reply)
    return session


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute the analysis."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    try:
        summary = run(orcid=args.orcid, csv_path=args.csv)
    except (MissingColumnError, EmptyBatchError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if summary is None:
        print("No researcher profiles could be analyzed.", file=sys.stderr)
        return 1

    print(format_summary(summary))

    if args.report_dir:
        out = generate_reports(summary, args.report_dir)
        print(f"\nReports written to {out}")

    if args.chat:
        chat_loop(new_chat_session(summary))

    return 0


if __name__ == "__main__":
    sys.exit(main())
