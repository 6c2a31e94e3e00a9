"""Extract ORCID identifiers from an uploaded CSV file."""

from __future__ import annotations

import csv
import logging
import re
from pathlib import Path

LOGGER = logging.getLogger(__name__)

ORCID_COLUMN = "orcid"

# Four hyphen-separated groups of four ASCII digits; the last may be the X checksum.
_ORCID_PATTERN = re.compile(r"(\d{4}-){3}\d{3}[\dX]", re.ASCII)


class MissingColumnError(ValueError):
    """Raised when the CSV header has no 'orcid' column."""


def is_valid_orcid(value: str) -> bool:
    """Return True if value has the structural shape of an ORCID iD.

    The checksum character is not verified arithmetically.
    """
    return bool(_ORCID_PATTERN.fullmatch(value))


def parse_orcid_csv(text: str) -> list[str]:
    """Return the valid ORCID iDs found in the 'orcid' column, in file order.

    The header lookup is case-insensitive and ignores surrounding whitespace.
    Rows too short to reach the column are skipped, as are values that fail
    is_valid_orcid. Duplicates are kept. An empty result is not an error.

    Raises:
        MissingColumnError: if no header cell equals 'orcid'.
    """
    rows = csv.reader(text.splitlines())
    header = next(rows, None)
    if header is None:
        raise MissingColumnError("CSV must contain an 'orcid' column.")

    normalized = [cell.strip().lower() for cell in header]
    if ORCID_COLUMN not in normalized:
        raise MissingColumnError("CSV must contain an 'orcid' column.")
    index = normalized.index(ORCID_COLUMN)

    ids: list[str] = []
    rejected = 0
    for row in rows:
        if len(row) <= index:
            continue
        candidate = row[index].strip()
        if is_valid_orcid(candidate):
            ids.append(candidate)
        else:
            rejected += 1

    LOGGER.info("CSV parse: accepted=%s rejected=%s", len(ids), rejected)
    return ids


def load_orcid_csv(path: str | Path) -> list[str]:
    """Read a CSV file from disk and extract its ORCID iDs."""
    text = Path(path).read_text(encoding="utf-8-sig")
    return parse_orcid_csv(text)
