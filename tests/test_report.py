from __future__ import annotations

import csv
from pathlib import Path

import pytest

import report
from models import PublicationRecord, ResearcherProfile
from stats import compute_summary


def _work(year: int | None, work_type: str = "JOURNAL ARTICLE") -> PublicationRecord:
    return PublicationRecord(title="A work", year=year, type=work_type, local_id="1")


@pytest.fixture
def summary():
    profiles = [
        ResearcherProfile(
            identifier="0000-0002-1825-0097",
            display_name="Researcher 0000-0002-1825-0097",
            works=(_work(2020), _work(2023, "BOOK"), _work(None)),
        ),
        ResearcherProfile(
            identifier="0000-0001-5109-3700",
            display_name="Researcher 0000",
            works=(_work(None),),
            synthetic=True,
        ),
        ResearcherProfile(identifier="0000-0003-0000-0001", display_name="Researcher empty"),
    ]
    return compute_summary(profiles)


def _read(path: Path) -> list[dict]:
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def test_researcher_rows_latest_work_labels(summary) -> None:
    rows = report.researcher_rows(summary)

    assert [r["latest_work"] for r in rows] == [2023, "N/A", "-"]
    assert [r["publications"] for r in rows] == [3, 1, 0]
    assert [r["synthetic"] for r in rows] == [False, True, False]


def test_generate_reports_writes_three_tables(summary, tmp_path: Path) -> None:
    out = report.generate_reports(summary, tmp_path / "out")

    researchers = _read(out / report.RESEARCHERS_FILENAME)
    assert researchers[0]["orcid_id"] == "0000-0002-1825-0097"
    assert researchers[1]["synthetic"] == "True"
    assert list(researchers[0].keys()) == report.RESEARCHER_COLUMNS

    by_year = _read(out / report.BY_YEAR_FILENAME)
    assert by_year == [{"year": "2020", "count": "1"}, {"year": "2023", "count": "1"}]

    by_type = _read(out / report.BY_TYPE_FILENAME)
    assert by_type[0] == {"type": "JOURNAL ARTICLE", "count": "3"}
    assert by_type[1] == {"type": "BOOK", "count": "1"}


def test_generate_reports_defaults_to_report_dir(summary, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(report, "REPORT_DIR", str(tmp_path / "default"))

    out = report.generate_reports(summary)

    assert out == tmp_path / "default"
    assert (out / report.RESEARCHERS_FILENAME).exists()


def test_format_summary_contains_kpis_and_tables(summary) -> None:
    text = report.format_summary(summary)

    assert "Researchers:        3" in text
    assert "Total Publications: 4" in text
    assert "Avg. per Person:    1.3" in text
    assert "Active Years:       2" in text
    assert "0000-0001-5109-3700" in text
    assert "(synthetic)" in text
