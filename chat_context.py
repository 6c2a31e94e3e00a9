"""System instruction and session construction for the research assistant chat."""

from __future__ import annotations

from chat_client import default_model
from models import AggregateSummary, ChatMessage, ChatSession

BASE_INSTRUCTION = (
    "You are a helpful research assistant bot analyzing academic publication data."
)

WELCOME_MESSAGE = (
    "Hello! I'm your Research Assistant. I can help you analyze the publication "
    "data from the current report. Ask me anything!"
)

_TOP_N = 3


def build_system_instruction(summary: AggregateSummary | None) -> str:
    """Return the chat system instruction for the latest summary.

    Without a summary only the base instruction is returned.
    """
    if summary is None:
        return BASE_INSTRUCTION

    top_years = ", ".join(
        f"{year} ({count})" for year, count in summary.year_histogram[:_TOP_N]
    )
    top_types = ", ".join(
        f"{work_type} ({count})" for work_type, count in summary.type_histogram[:_TOP_N]
    )
    return (
        f"{BASE_INSTRUCTION}\n\n"
        "CURRENT DATA CONTEXT:\n"
        f"- Total Researchers Analyzed: {summary.researcher_count}\n"
        f"- Total Publications: {summary.publication_count}\n"
        f"- Average Publications per Researcher: {summary.average_per_researcher:.1f}\n"
        f"- Top Years: {top_years}\n"
        f"- Top Types: {top_types}\n\n"
        "Use this data to answer user questions about the specific analysis "
        "currently on screen. Be concise and professional."
    )


def new_chat_session(summary: AggregateSummary | None, model: str | None = None) -> ChatSession:
    """Start a fresh chat session whose instruction reflects only this summary."""
    if model is None:
        model = default_model()
    return ChatSession(
        system_instruction=build_system_instruction(summary),
        model=model,
        history=(ChatMessage(role="model", text=WELCOME_MESSAGE),),
    )
