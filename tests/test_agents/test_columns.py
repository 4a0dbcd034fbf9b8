"""
Unit tests for header detection and column resolution.
"""

import pytest

from review_audit.agents.columns import (
    COLUMN_RULES,
    HEADER_RULES,
    ColumnMap,
    find_column,
    find_header_row,
    normalize_header_cells,
    resolve_columns,
)
from review_audit.exceptions import ColumnResolutionError


def test_rule_order_is_fixed():
    assert [rule.role for rule in COLUMN_RULES] == ["date", "rating", "text", "reviewer"]
    assert [rule.role for rule in COLUMN_RULES if rule.required] == ["date", "rating"]
    assert [rule.role for rule in HEADER_RULES] == ["date", "rating"]


def test_normalize_header_cells():
    assert normalize_header_cells(['"Date"', "RATING", 'Review "Text"']) == [
        "date", "rating", 'review "text'
    ]


def test_find_header_row_skips_preamble():
    rows = [
        ["Reputation export"],
        ["Generated for", "Maple Court"],
        ["Review Date", "Star Rating", "Comment", "Author"],
        ["2024-01-01", "5", "Great", "Ann"],
    ]

    index, headers = find_header_row(rows)

    assert index == 2
    assert headers == ["review date", "star rating", "comment", "author"]


def test_find_header_row_accepts_value_as_rating_hint():
    index, _ = find_header_row([["x"], ["Published", "Value"]])
    assert index == 1


def test_find_header_row_falls_back_to_first_row():
    rows = [["Foo", "Bar"], ["1", "2"]]
    assert find_header_row(rows) == (0, ["foo", "bar"])


def test_find_header_row_respects_scan_limit():
    rows = [["junk"]] * 10 + [["date", "rating"]]
    index, headers = find_header_row(rows)
    assert index == 0
    assert headers == ["junk"]


def test_resolve_columns_full_map():
    columns = resolve_columns(["date", "rating", "review text", "reviewer name"])
    assert columns == ColumnMap(date=0, rating=1, text=2, reviewer=3)


def test_resolve_columns_optional_roles_missing():
    columns = resolve_columns(["posted", "stars"])
    assert columns.text is None
    assert columns.reviewer is None
    assert columns.min_row_length == 2


def test_resolve_columns_roles_are_independent():
    """'review date' satisfies both the date and the text keywords."""
    columns = resolve_columns(["review date", "score"])
    assert columns.date == 0
    assert columns.text == 0


def test_resolve_columns_first_match_wins():
    rule = COLUMN_RULES[0]
    assert find_column(["created", "timestamp"], rule) == 0
    assert find_column(["name", "text"], rule) is None


def test_missing_rating_column_lists_headers():
    with pytest.raises(ColumnResolutionError) as exc_info:
        resolve_columns(["date", "value", "comment"])

    assert exc_info.value.headers == ["date", "value", "comment"]
    assert "Could not identify Date or Rating columns" in str(exc_info.value)
    assert "Found headers: date, value, comment" in str(exc_info.value)


def test_missing_date_column_raises():
    with pytest.raises(ColumnResolutionError):
        resolve_columns(["rating", "comment"])
