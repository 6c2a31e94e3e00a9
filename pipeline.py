"""Analysis entry points: single ORCID iD, explicit batch, or CSV upload."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from models import ResearcherProfile
from orcid_client import fetch_orcid_profile
from orcid_csv import load_orcid_csv

LOGGER = logging.getLogger(__name__)

Fetcher = Callable[[str], ResearcherProfile]


class EmptyBatchError(ValueError):
    """Raised when a batch has no identifiers to process."""


def analyze_batch(
    orcid_ids: Iterable[str],
    fetcher: Fetcher = fetch_orcid_profile,
) -> list[ResearcherProfile]:
    """Fetch every identifier one at a time and return the profiles obtained.

    Requests are issued strictly sequentially to keep load on the registry
    low. A failing identifier is logged and skipped; the batch carries on.

    Raises:
        EmptyBatchError: if orcid_ids is empty. No fetch is attempted.
    """
    ids = list(orcid_ids)
    if not ids:
        raise EmptyBatchError("No valid ORCID IDs found.")

    profiles: list[ResearcherProfile] = []
    skipped = 0
    for orcid_id in ids:
        try:
            profiles.append(fetcher(orcid_id))
        except Exception as exc:  # one bad identifier must not abort the batch
            skipped += 1
            LOGGER.warning("Skipping orcid=%s due to error: %s", orcid_id, exc)

    LOGGER.info(
        "Batch complete. requested=%s fetched=%s skipped=%s synthetic=%s",
        len(ids),
        len(profiles),
        skipped,
        sum(1 for p in profiles if p.synthetic),
    )
    return profiles


def analyze_single(
    orcid_id: str,
    fetcher: Fetcher = fetch_orcid_profile,
) -> list[ResearcherProfile]:
    """Analyze one researcher; returns a one-element profile list."""
    if not orcid_id.strip():
        raise ValueError("An ORCID iD is required.")
    return analyze_batch([orcid_id], fetcher=fetcher)


def analyze_csv(
    path: str | Path,
    fetcher: Fetcher = fetch_orcid_profile,
) -> list[ResearcherProfile]:
    """Extract identifiers from a CSV file and analyze them as a batch.

    Raises:
        MissingColumnError: if the file has no 'orcid' column.
        EmptyBatchError: if the column holds no valid identifiers.
    """
    ids = load_orcid_csv(path)
    if not ids:
        raise EmptyBatchError("No valid ORCID IDs found in file.")
    LOGGER.info("Loaded %s ORCID IDs from %s", len(ids), path)
    return analyze_batch(ids, fetcher=fetcher)
