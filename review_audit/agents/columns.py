"""
Header and column resolver.

Finds the header row of an export and maps semantic roles (date,
rating, text, reviewer) to column indices with ordered keyword rules.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from review_audit.exceptions import ColumnResolutionError

logger = logging.getLogger(__name__)

DEFAULT_HEADER_SCAN_ROWS = 10

_WRAPPING_QUOTE = re.compile(r'^"|"$')


@dataclass(frozen=True)
class ColumnRule:
    """Keyword set that claims a semantic role. Matching is substring-based."""
    role: str
    keywords: Tuple[str, ...]
    required: bool = False

    def matches(self, cell: str) -> bool:
        return any(keyword in cell for keyword in self.keywords)


# A row counts as the header when it satisfies every rule in this list.
HEADER_RULES: Tuple[ColumnRule, ...] = (
    ColumnRule("date", ("date", "time", "published", "period", "timestamp")),
    ColumnRule("rating", ("rating", "star", "score", "grade", "value")),
)

# Evaluated in order; each role takes the first header cell it matches.
COLUMN_RULES: Tuple[ColumnRule, ...] = (
    ColumnRule(
        "date",
        ("date", "time", "published", "created", "posted", "timestamp", "period"),
        required=True,
    ),
    ColumnRule("rating", ("rating", "star", "score", "grade"), required=True),
    ColumnRule(
        "text",
        ("text", "review", "content", "comment", "body", "message", "description", "feedback"),
    ),
    ColumnRule(
        "reviewer",
        ("name", "reviewer", "author", "user", "customer", "client", "person"),
    ),
)


@dataclass(frozen=True)
class ColumnMap:
    """Resolved column indices; optional roles are None when absent."""
    date: int
    rating: int
    text: Optional[int] = None
    reviewer: Optional[int] = None

    @property
    def min_row_length(self) -> int:
        """Rows shorter than this cannot supply both date and rating."""
        return max(self.date, self.rating) + 1


def normalize_header_cells(row: Sequence[str]) -> List[str]:
    """Lower-case cells and strip one leftover quote at each end."""
    return [_WRAPPING_QUOTE.sub("", cell.lower()) for cell in row]


def find_header_row(
    rows: Sequence[Sequence[str]],
    max_scan: int = DEFAULT_HEADER_SCAN_ROWS,
    rules: Sequence[ColumnRule] = HEADER_RULES
) -> Tuple[int, List[str]]:
    """
    Locate the header row.

    Returns:
        (row index, normalized header cells). Falls back to row 0 when no
        row within `max_scan` satisfies every header rule.
    """
    for index, row in enumerate(rows[:max_scan]):
        cells = normalize_header_cells(row)
        if all(any(rule.matches(cell) for cell in cells) for rule in rules):
            logger.debug(f"Header found at row {index}: {cells}")
            return index, cells

    logger.warning(
        f"No header row found in the first {max_scan} rows, assuming row 0"
    )
    return 0, normalize_header_cells(rows[0])


def find_column(headers: Sequence[str], rule: ColumnRule) -> Optional[int]:
    """Index of the first header cell matched by `rule`, or None."""
    for index, cell in enumerate(headers):
        if rule.matches(cell):
            return index
    return None


def resolve_columns(
    headers: Sequence[str],
    rules: Sequence[ColumnRule] = COLUMN_RULES
) -> ColumnMap:
    """
    Map every role in `rules` to a column index.

    Roles are resolved independently, so one column may serve two roles.

    Raises:
        ColumnResolutionError: If a required role (date, rating) is missing
    """
    indices: Dict[str, Optional[int]] = {
        rule.role: find_column(headers, rule) for rule in rules
    }

    missing = [rule.role for rule in rules if rule.required and indices[rule.role] is None]
    if missing:
        logger.error(f"Missing required columns {missing} in headers {list(headers)}")
        raise ColumnResolutionError(list(headers))

    columns = ColumnMap(
        date=indices["date"],
        rating=indices["rating"],
        text=indices.get("text"),
        reviewer=indices.get("reviewer"),
    )
    logger.info(f"Resolved columns: {columns}")
    return columns


# Design Rationale and Trade-offs:
#
# 1. Why ordered keyword rules instead of exact header names?
#    - Every review platform names its columns differently
#    - The leftmost matching header wins for each role
#    - Trade-off: A header like "review date" can match two roles
#
# 2. Why fall back to row 0 when no header row is found?
#    - Lets resolve_columns report the actual headers in its error
#    - Trade-off: One wasted pass on files with no recognizable header
