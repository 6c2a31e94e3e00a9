"""Report tables for an analysis: terminal summary plus CSV exports.

Three CSV files are written by generate_reports():

  researchers.csv           : one row per researcher: ORCID iD, display name,
                              publication count, latest work year and whether
                              the profile is synthetic fallback data.

  publications_by_year.csv  : year histogram, ascending by year.

  publications_by_type.csv  : type histogram, most common type first.
"""

from __future__ import annotations

import csv
import logging
import os
from pathlib import Path

from models import AggregateSummary, ResearcherProfile
from stats import latest_work_year

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configurable paths
# ---------------------------------------------------------------------------

REPORT_DIR = os.getenv("REPORT_DIR", "reports")
RESEARCHERS_FILENAME = "researchers.csv"
BY_YEAR_FILENAME = "publications_by_year.csv"
BY_TYPE_FILENAME = "publications_by_type.csv"

# ---------------------------------------------------------------------------
# Output schemas
# ---------------------------------------------------------------------------

RESEARCHER_COLUMNS = [
    "orcid_id",
    "display_name",
    "publications",
    "latest_work",
    "synthetic",   # True when the registry was unreachable and data was generated
]

BY_YEAR_COLUMNS = ["year", "count"]
BY_TYPE_COLUMNS = ["type", "count"]

# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------


def _latest_work_label(profile: ResearcherProfile) -> str | int:
    if not profile.works:
        return "-"
    latest = latest_work_year(profile)
    return latest if latest is not None else "N/A"


def researcher_rows(summary: AggregateSummary) -> list[dict]:
    return [
        {
            "orcid_id": profile.identifier,
            "display_name": profile.display_name,
            "publications": len(profile.works),
            "latest_work": _latest_work_label(profile),
            "synthetic": profile.synthetic,
        }
        for profile in summary.source_profiles
    ]


def _write_csv(path: Path, columns: list[str], rows: list[dict]) -> None:
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


# ---------------------------------------------------------------------------
# Terminal rendering
# ---------------------------------------------------------------------------


def format_summary(summary: AggregateSummary) -> str:
    """Render KPIs and tables as plain text for the terminal."""
    lines = [
        "Analysis Report",
        "===============",
        f"Researchers:        {summary.researcher_count}",
        f"Total Publications: {summary.publication_count}",
        f"Avg. per Person:    {summary.average_per_researcher:.1f}",
        f"Active Years:       {len(summary.year_histogram)}",
        "",
        "Publications by Year",
    ]
    lines.extend(f"  {year}  {count}" for year, count in summary.year_histogram)
    lines.append("")
    lines.append("Publications by Type")
    lines.extend(f"  {work_type:<24} {count}" for work_type, count in summary.type_histogram)
    lines.append("")
    lines.append("Researcher Breakdown")
    for row in researcher_rows(summary):
        marker = " (synthetic)" if row["synthetic"] else ""
        lines.append(
            f"  {row['orcid_id']}  {row['display_name']:<32} "
            f"{row['publications']:>5}  {row['latest_work']}{marker}"
        )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def generate_reports(summary: AggregateSummary, output_dir: str | Path | None = None) -> Path:
    """Write the researcher, year and type tables; returns the output directory."""
    out = Path(output_dir or REPORT_DIR)
    out.mkdir(parents=True, exist_ok=True)

    rows = researcher_rows(summary)
    _write_csv(out / RESEARCHERS_FILENAME, RESEARCHER_COLUMNS, rows)
    LOGGER.info("report: %d researchers → %s", len(rows), out / RESEARCHERS_FILENAME)

    year_rows = [{"year": year, "count": count} for year, count in summary.year_histogram]
    _write_csv(out / BY_YEAR_FILENAME, BY_YEAR_COLUMNS, year_rows)

    type_rows = [{"type": t, "count": count} for t, count in summary.type_histogram]
    _write_csv(out / BY_TYPE_FILENAME, BY_TYPE_COLUMNS, type_rows)
    LOGGER.info(
        "report: %d years, %d types → %s", len(year_rows), len(type_rows), out
    )
    return out
