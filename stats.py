"""Aggregate statistics over researcher profiles (pure functions, no I/O)."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from models import AggregateSummary, ResearcherProfile

OTHER_TYPE = "Other"


def compute_summary(profiles: Sequence[ResearcherProfile]) -> AggregateSummary | None:
    """Reduce profiles to counts and histograms; None when there are none.

    - year_histogram: works whose year is not None, ascending by year.
    - type_histogram: falsy types bucketed as "Other", descending by count.
      Ties keep the order in which each type was first seen.
    """
    if not profiles:
        return None

    year_counts: Counter[int] = Counter()
    type_counts: Counter[str] = Counter()  # insertion order = first-seen order
    publication_count = 0

    for profile in profiles:
        publication_count += len(profile.works)
        for work in profile.works:
            if work.year is not None:
                year_counts[work.year] += 1
            type_counts[work.type or OTHER_TYPE] += 1

    researcher_count = len(profiles)
    return AggregateSummary(
        researcher_count=researcher_count,
        publication_count=publication_count,
        average_per_researcher=(
            publication_count / researcher_count if researcher_count > 0 else 0.0
        ),
        year_histogram=tuple(sorted(year_counts.items())),
        # sorted() is stable, so equal counts stay in first-seen order
        type_histogram=tuple(
            sorted(type_counts.items(), key=lambda item: item[1], reverse=True)
        ),
        source_profiles=tuple(profiles),
    )


def latest_work_year(profile: ResearcherProfile) -> int | None:
    """Most recent known publication year for a profile, if any."""
    years = [work.year for work in profile.works if work.year is not None]
    return max(years) if years else None
