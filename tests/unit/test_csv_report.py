"""
Unit tests for CSV rendering.

Rows are read back with the standard csv module to check quoting.
"""

from __future__ import annotations

import csv
import io

from issue_cost_estimator.domain.models import AnalyzedIssue, ComplexityTier
from issue_cost_estimator.services.csv_report import (
    CSV_HEADER,
    empty_csv,
    quote,
    to_csv,
)


def _issue(number: int = 1, **overrides) -> AnalyzedIssue:
    fields = {
        "issue_number": number,
        "title": "Crash on save",
        "tier": ComplexityTier.LOW,
        "cost": 200,
        "labels_joined": "bug; ui",
        "url": f"https://github.com/octo/reef/issues/{number}",
    }
    fields.update(overrides)
    return AnalyzedIssue(**fields)


def test_header() -> None:
    assert CSV_HEADER == "issue_number,title,complexity,estimated_cost,labels,url"


def test_quote_doubles_embedded_quotes() -> None:
    assert quote('say "hi"') == '"say ""hi"""'


def test_row_layout() -> None:
    text = to_csv([_issue(7)])

    assert text.splitlines()[1] == (
        '7,"Crash on save",low,$200,"bug; ui",https://github.com/octo/reef/issues/7'
    )
    assert not text.endswith("\n")


def test_awkward_titles_survive_csv_reader() -> None:
    title = 'Fails with "quoted, comma" input'
    text = to_csv([_issue(1, title=title, labels_joined=""), _issue(2)])

    rows = list(csv.reader(io.StringIO(text)))

    assert rows[0] == CSV_HEADER.split(",")
    assert rows[1] == [
        "1",
        title,
        "low",
        "$200",
        "",
        "https://github.com/octo/reef/issues/1",
    ]
    assert [row[0] for row in rows[1:]] == ["1", "2"]


def test_rows_keep_input_order() -> None:
    text = to_csv([_issue(9), _issue(3), _issue(5)])

    assert [line.split(",")[0] for line in text.splitlines()[1:]] == ["9", "3", "5"]


def test_empty_csv_is_header_line() -> None:
    assert empty_csv() == CSV_HEADER + "\n"
    assert to_csv([]) == CSV_HEADER
