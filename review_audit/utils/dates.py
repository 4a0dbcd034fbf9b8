"""
Date normalizer.

Turns a free-form date cell into a calendar date, or None when nothing
sensible can be read from it.
"""

import logging
import re
from datetime import date, datetime
from typing import List, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

_QUOTES = re.compile(r"['\"]")
_DIGITS = re.compile(r"\d+")


def normalize_date(raw: str, now: Optional[datetime] = None) -> Optional[date]:
    """
    Normalize a raw date string.

    Strategies, first success wins:
    1. "today" / "yesterday"
    2. "<n> <unit> ago" (day, week, month, year; n defaults to 1)
    3. dateutil parsing (ISO-8601, "Oct 12, 2024", ...)
    4. Numeric fallback over the digit runs (see parse_numeric_date)

    Args:
        raw: Cell value as it appears in the file
        now: Reference instant for relative dates (defaults to datetime.now())

    Returns:
        The parsed date, or None if the cell is not a date.
        Callers must drop the row on None.
    """
    if not raw:
        return None

    clean = _QUOTES.sub("", raw).strip()
    if not clean:
        return None

    today = (now or datetime.now()).date()
    lower = clean.lower()

    if lower == "today":
        return today
    if lower == "yesterday":
        return today - relativedelta(days=1)
    if "ago" in lower:
        try:
            return _parse_relative(lower, today)
        except (ValueError, OverflowError):
            logger.debug(f"Relative date out of range: {clean}")
            return None

    try:
        return date_parser.parse(clean).date()
    except (ValueError, OverflowError):
        pass

    return parse_numeric_date(clean)


def _parse_relative(lower: str, today: date) -> date:
    """Resolve "3 weeks ago" style strings against `today`."""
    match = _DIGITS.search(lower)
    amount = int(match.group(0)) if match else 1

    if "day" in lower:
        return today - relativedelta(days=amount)
    if "week" in lower:
        return today - relativedelta(days=amount * 7)
    if "month" in lower:
        return today - relativedelta(months=amount)
    if "year" in lower:
        return today - relativedelta(years=amount)

    # "2 hours ago", "a moment ago"
    return today


def parse_numeric_date(clean: str) -> Optional[date]:
    """
    Build a date from the first three digit runs of `clean`.

    - first run has 4 digits        -> YYYY-M-D
    - first number <= 12, 4-digit third run -> M/D/YYYY (US first)
    - second number <= 12, 4-digit third run -> D/M/YYYY

    Ambiguous input such as "03/04/2024" is always read month-first.
    """
    parts: List[str] = _DIGITS.findall(clean)
    if len(parts) < 3:
        return None

    n1, n2, n3 = (int(p) for p in parts[:3])

    if len(parts[0]) == 4:
        return _safe_date(n1, n2, n3)
    if n1 <= 12 and len(parts[2]) == 4:
        return _safe_date(n3, n1, n2)
    if n2 <= 12 and len(parts[2]) == 4:
        return _safe_date(n3, n2, n1)

    return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except (ValueError, OverflowError):
        logger.debug(f"Rejected impossible date components {year}-{month}-{day}")
        return None


# Design Rationale and Trade-offs:
#
# 1. Why month-first for ambiguous numeric dates?
#    - Most exports we receive come from US-configured accounts
#    - dateutil defaults to the same order, so both paths agree
#    - Trade-off: 03/04/2024 from a European export lands a month off
#
# 2. Why return None instead of rolling impossible dates over?
#    - 2024-13-40 is a typo, not February 9 of next year
#    - Out-of-range values (OverflowError) are treated the same way
#    - Trade-off: The row is dropped rather than approximated
#
# 3. Why treat "5 hours ago" as today?
#    - Sub-day precision does not matter for quarterly buckets
#    - Trade-off: None at quarter granularity
