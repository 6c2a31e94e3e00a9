"""ORCID public API client with a synthetic-data fallback."""

from __future__ import annotations

import logging
import os
import random
import time
from typing import Any

import requests

from models import PublicationRecord, ResearcherProfile

ORCID_API_BASE = os.getenv("ORCID_API_BASE", "https://pub.orcid.org/v3.0")
REQUEST_TIMEOUT_SECONDS = 20
FALLBACK_DELAY_SECONDS = float(os.getenv("ORCID_FALLBACK_DELAY_SECONDS", "0.5"))
# Parsed at import so a malformed seed fails at startup, not inside the fallback.
MOCK_SEED = int(os.environ["ORCID_MOCK_SEED"]) if os.getenv("ORCID_MOCK_SEED") else None

_MOCK_YEARS = (2018, 2019, 2020, 2021, 2022, 2023, 2024)
_MOCK_TYPES = ("JOURNAL_ARTICLE", "CONFERENCE_PAPER", "BOOK_CHAPTER", "BOOK")
_MOCK_MIN_WORKS = 5
_MOCK_MAX_WORKS = 24

LOGGER = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when the registry returns a non-success response."""


class NotFoundError(FetchError):
    """Raised when the registry has no record for the identifier."""

    def __init__(self, orcid_id: str) -> None:
        super().__init__(f"ORCID {orcid_id} not found.")
        self.orcid_id = orcid_id


def fetch_orcid_profile(
    orcid_id: str,
    *,
    rng: random.Random | None = None,
    session: requests.Session | None = None,
) -> ResearcherProfile:
    """Fetch a researcher's works from ORCID, falling back to synthetic data.

    Any failure (network error, 404, other non-2xx status, malformed body) is
    logged as a warning and, after FALLBACK_DELAY_SECONDS, replaced with a
    generated profile for the same identifier. This function does not raise
    for upstream problems; callers always get a profile back.

    Args:
        orcid_id: ORCID iD; surrounding whitespace is ignored.
        rng: Random source for the fallback. Defaults to _default_rng().
        session: Optional requests session to issue the call with.
    """
    clean_id = orcid_id.strip()
    try:
        profile = _fetch_works(clean_id, session=session)
    except Exception as exc:  # every failure degrades to synthetic data
        LOGGER.warning(
            "ORCID fetch failed for orcid=%s, using synthetic data. Reason: %s",
            clean_id,
            exc,
        )
        time.sleep(FALLBACK_DELAY_SECONDS)
        return generate_mock_profile(clean_id, rng=rng)

    LOGGER.info("ORCID fetch: orcid=%s works=%s", clean_id, len(profile.works))
    return profile


def _fetch_works(orcid_id: str, session: requests.Session | None = None) -> ResearcherProfile:
    """Call the works endpoint and normalize the response.

    Raises:
        NotFoundError: on HTTP 404.
        FetchError: on any other non-success status.
    """
    url = f"{ORCID_API_BASE}/{orcid_id}/works"
    getter = session.get if session is not None else requests.get
    response = getter(
        url,
        headers={"Accept": "application/json"},
        timeout=REQUEST_TIMEOUT_SECONDS,
    )

    if response.status_code == 404:
        raise NotFoundError(orcid_id)
    if not response.ok:
        raise FetchError(
            f"Failed to fetch data for {orcid_id}: HTTP {response.status_code}"
        )

    works = _parse_works_payload(response.json())
    return ResearcherProfile(
        identifier=orcid_id,
        display_name=f"Researcher {orcid_id}",
        works=tuple(works),
    )


def _parse_works_payload(payload: Any) -> list[PublicationRecord]:
    """Map the nested ORCID works response into flat PublicationRecords.

    Each group contributes its first work summary.
    """
    if not isinstance(payload, dict):
        raise FetchError("Unexpected ORCID works payload shape: expected an object")

    parsed: list[PublicationRecord] = []
    for group in payload.get("group") or []:
        summary = group["work-summary"][0]

        year_raw = _nested_value(summary, "publication-date", "year", "value")
        raw_type = summary.get("type")

        parsed.append(
            PublicationRecord(
                title=_nested_value(summary, "title", "title", "value") or "Untitled",
                year=int(year_raw) if year_raw else None,
                type=raw_type.replace("_", " ") if raw_type else "UNKNOWN",
                local_id=str(summary.get("put-code", "")),
                external_id=_first_doi(summary),
                journal=_nested_value(summary, "journal-title", "value"),
            )
        )

    return parsed


def _first_doi(summary: dict[str, Any]) -> str | None:
    external_ids = _nested_value(summary, "external-ids", "external-id") or []
    for entry in external_ids:
        if isinstance(entry, dict) and entry.get("external-id-type") == "doi":
            return entry.get("external-id-value")
    return None


def _nested_value(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def generate_mock_profile(orcid_id: str, rng: random.Random | None = None) -> ResearcherProfile:
    """Build a synthetic profile used when the registry is unreachable."""
    rng = rng or _default_rng()
    count = rng.randint(_MOCK_MIN_WORKS, _MOCK_MAX_WORKS)
    works = tuple(
        PublicationRecord(
            title=f"Sample Research Publication {i + 1} for {orcid_id}",
            year=rng.choice(_MOCK_YEARS),
            type=rng.choice(_MOCK_TYPES),
            local_id=f"mock-{i}",
            external_id=f"10.1000/mock.{i}",
        )
        for i in range(count)
    )
    return ResearcherProfile(
        identifier=orcid_id,
        display_name=f"Researcher {orcid_id[:4]}",
        works=works,
        synthetic=True,
    )


def _default_rng() -> random.Random:
    """Return a Random seeded with MOCK_SEED when set, else unseeded."""
    return random.Random(MOCK_SEED)
