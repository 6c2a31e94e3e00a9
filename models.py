"""Shared typed models for the analytics pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal


@dataclass(frozen=True, slots=True)
class PublicationRecord:
    """One work attributed to a researcher, flattened from the registry response."""

    title: str
    year: int | None
    type: str
    local_id: str
    external_id: str | None = None  # DOI when the registry lists one
    journal: str | None = None


@dataclass(frozen=True, slots=True)
class ResearcherProfile:
    """Normalized researcher record produced by a single fetch."""

    identifier: str
    display_name: str
    works: tuple[PublicationRecord, ...] = ()
    synthetic: bool = False


@dataclass(frozen=True, slots=True)
class AggregateSummary:
    """Summary statistics over a collection of researcher profiles."""

    researcher_count: int
    publication_count: int
    average_per_researcher: float
    year_histogram: tuple[tuple[int, int], ...]
    type_histogram: tuple[tuple[str, int], ...]
    source_profiles: tuple[ResearcherProfile, ...]


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: Literal["user", "model"]
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True)
class ChatSession:
    """Everything needed to run one chat turn: instruction, model and history."""

    system_instruction: str
    model: str
    history: tuple[ChatMessage, ...] = ()
