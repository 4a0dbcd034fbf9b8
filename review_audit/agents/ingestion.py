"""
Ingestion Agent.

Turns an uploaded CSV export into validated Review records:
delimiter detection, tokenizing, header/column resolution, and
row-by-row record building with malformed-row tolerance.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

from review_audit.agents.columns import (
    DEFAULT_HEADER_SCAN_ROWS,
    ColumnMap,
    find_header_row,
    resolve_columns,
)
from review_audit.models.review import DEFAULT_REVIEWER_NAME, Review
from review_audit.utils.csv_tokenizer import DEFAULT_SAMPLE_SIZE, detect_delimiter, tokenize
from review_audit.utils.dates import normalize_date

logger = logging.getLogger(__name__)

BOM = "\ufeff"

_NON_NUMERIC = re.compile(r"[^\d.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_WRAPPING_QUOTE = re.compile(r'^"|"$')


def clean_rating(raw: str) -> float:
    """
    Read a numeric rating out of a messy cell.

    Everything except digits and dots is removed ("4.5 stars" -> "4.5"),
    then the leading number is parsed. Unreadable values become 0.
    """
    match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", raw or ""))
    return float(match.group(0)) if match else 0.0


def _strip_quote_artifacts(value: str) -> str:
    return _WRAPPING_QUOTE.sub("", value).strip()


class IngestionAgent:
    """
    Parses review exports of unknown shape.

    Nothing about the file is declared up front: the delimiter, the
    header row, and the column roles are all inferred. Individual bad
    rows are dropped; only structural problems raise.
    """

    def __init__(
        self,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        header_scan_rows: int = DEFAULT_HEADER_SCAN_ROWS,
        default_reviewer: str = DEFAULT_REVIEWER_NAME,
        now: Optional[datetime] = None
    ):
        """
        Initialize ingestion agent.

        Args:
            sample_size: Characters inspected for delimiter detection
            header_scan_rows: Rows searched for the header
            default_reviewer: Name used when the reviewer cell is missing
            now: Fixed reference time for relative dates (tests)
        """
        self.sample_size = sample_size
        self.header_scan_rows = header_scan_rows
        self.default_reviewer = default_reviewer
        self.now = now

    def load_file(self, path: Union[str, Path]) -> str:
        """Read an export as UTF-8, dropping a leading byte-order mark."""
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            text = f.read()
        logger.info(f"Loaded {len(text)} characters from {path}")
        return text

    def parse_file(self, path: Union[str, Path]) -> List[Review]:
        return self.parse_text(self.load_file(path))

    def parse_text(self, text: str) -> List[Review]:
        """
        Parse raw CSV text into reviews, most recent first.

        Raises:
            EmptyFileError: No rows after tokenizing
            ColumnResolutionError: Date or rating column not found
        """
        content = text[1:] if text.startswith(BOM) else text

        delimiter = detect_delimiter(content, sample_size=self.sample_size)
        rows = tokenize(content, delimiter)

        header_index, headers = find_header_row(rows, max_scan=self.header_scan_rows)
        columns = resolve_columns(headers)

        data_rows = rows[header_index + 1:]
        reviews = []
        for row in data_rows:
            review = self._build_review(row, columns)
            if review is not None:
                reviews.append(review)

        dropped = len(data_rows) - len(reviews)
        logger.info(
            f"Parsed {len(reviews)} reviews from {len(data_rows)} data rows "
            f"({dropped} dropped)"
        )

        reviews.sort(key=lambda r: r.parsed_date, reverse=True)
        return reviews

    def _build_review(self, row: Sequence[str], columns: ColumnMap) -> Optional[Review]:
        """Build a Review from one data row, or None if the row is unusable."""
        if len(row) < columns.min_row_length:
            logger.debug(f"Skipping short row ({len(row)} cells): {list(row)}")
            return None

        date_text = row[columns.date]
        parsed_date = normalize_date(date_text, now=self.now)
        if parsed_date is None:
            logger.debug(f"Skipping row with unparseable date: {date_text!r}")
            return None

        text = self._optional_cell(row, columns.text) or ""
        reviewer = self._optional_cell(row, columns.reviewer) or self.default_reviewer

        return Review(
            raw_date_text=_strip_quote_artifacts(date_text),
            parsed_date=parsed_date,
            rating=clean_rating(row[columns.rating]),
            text=_strip_quote_artifacts(text),
            reviewer_name=_strip_quote_artifacts(reviewer),
        )

    @staticmethod
    def _optional_cell(row: Sequence[str], index: Optional[int]) -> str:
        if index is None or index >= len(row):
            return ""
        return row[index]


# Design Rationale and Trade-offs:
#
# 1. Why drop rows with unparseable dates but keep bad ratings?
#    - Every metric is bucketed by date, so an undated row is unusable
#    - A rating cell like "n/a" defaults to 0 so the review still counts
#    - Trade-off: A 0 rating pulls the average down, visible in the distribution
#
# 2. Why skip short rows silently?
#    - Trailing notes and totals lines are common in exports
#    - Trade-off: A truncated file loses rows without an error
#
# 3. Why sort by date descending here?
#    - Downstream consumers (top reviews, prompt caps) all want newest first
#    - Trade-off: Stable sort keeps file order for same-day reviews only
