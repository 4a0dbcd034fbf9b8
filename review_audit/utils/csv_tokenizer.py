"""
CSV tokenizer.

Delimiter detection and a quote-aware row tokenizer for loosely
formatted CSV exports (multi-line fields, doubled quotes, CRLF, mixed
delimiters).
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from review_audit.exceptions import EmptyFileError

logger = logging.getLogger(__name__)

QUOTE = '"'
CANDIDATE_DELIMITERS: Tuple[str, ...] = (",", ";", "\t", "|")
DEFAULT_SAMPLE_SIZE = 1000


def detect_delimiter(
    text: str,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    candidates: Sequence[str] = CANDIDATE_DELIMITERS
) -> str:
    """
    Pick the delimiter that occurs most often outside double quotes.

    Best effort: only the first `sample_size` characters are scanned.
    Ties (including all-zero counts) keep the earlier candidate.
    """
    sample = text[:sample_size]
    best = candidates[0]
    best_count = 0

    for candidate in candidates:
        in_quotes = False
        count = 0
        for char in sample:
            if char == QUOTE:
                in_quotes = not in_quotes
            elif char == candidate and not in_quotes:
                count += 1
        if count > best_count:
            best, best_count = candidate, count

    logger.debug(f"Delimiter {best!r} chosen ({best_count} occurrences in sample)")
    return best


class TokenizerState(Enum):
    """Scanner states of the row tokenizer."""
    ROW_BOUNDARY = "row_boundary"  # Nothing pending; a row was just closed
    NORMAL = "normal"  # Accumulating an unquoted stretch of a field
    IN_QUOTES = "in_quotes"  # Inside a double-quoted span


class Action(Enum):
    """Side effect the tokenizer applies for one transition."""
    APPEND = "append"  # Add the current char to the field
    APPEND_QUOTE = "append_quote"  # Add a single literal quote
    TOGGLE = "toggle"  # Quote opened or closed, nothing appended
    END_FIELD = "end_field"
    END_ROW = "end_row"


def transition(
    state: TokenizerState,
    char: str,
    next_char: Optional[str],
    delimiter: str
) -> Tuple[TokenizerState, Action, int]:
    """
    Single transition of the tokenizer.

    Returns:
        (next_state, action, number of characters consumed)
    """
    if char == QUOTE:
        if state is TokenizerState.IN_QUOTES:
            if next_char == QUOTE:
                return TokenizerState.IN_QUOTES, Action.APPEND_QUOTE, 2
            return TokenizerState.NORMAL, Action.TOGGLE, 1
        return TokenizerState.IN_QUOTES, Action.TOGGLE, 1

    if state is TokenizerState.IN_QUOTES:
        return TokenizerState.IN_QUOTES, Action.APPEND, 1

    if char == delimiter:
        return TokenizerState.NORMAL, Action.END_FIELD, 1

    if char == "\n":
        return TokenizerState.ROW_BOUNDARY, Action.END_ROW, 1
    if char == "\r":
        consumed = 2 if next_char == "\n" else 1
        return TokenizerState.ROW_BOUNDARY, Action.END_ROW, consumed

    return TokenizerState.NORMAL, Action.APPEND, 1


def _is_blank_row(row: List[str]) -> bool:
    return len(row) == 1 and row[0] == ""


def tokenize(text: str, delimiter: str) -> List[List[str]]:
    """
    Split raw CSV text into rows of trimmed field values.

    Rows keep whatever number of fields they have; blank lines are
    dropped. A pending row is flushed at end of input even without a
    trailing newline or with an unterminated quote.

    Raises:
        EmptyFileError: If no rows were produced
    """
    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    state = TokenizerState.ROW_BOUNDARY

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else None
        state, action, consumed = transition(state, char, next_char, delimiter)

        if action is Action.APPEND:
            field.append(char)
        elif action is Action.APPEND_QUOTE:
            field.append(QUOTE)
        elif action is Action.END_FIELD:
            row.append("".join(field).strip())
            field = []
        elif action is Action.END_ROW:
            row.append("".join(field).strip())
            if not _is_blank_row(row):
                rows.append(row)
            row, field = [], []

        i += consumed

    if state is not TokenizerState.ROW_BOUNDARY:
        row.append("".join(field).strip())
        if not _is_blank_row(row):
            rows.append(row)

    if not rows:
        raise EmptyFileError()

    logger.info(f"Tokenized {len(rows)} rows (delimiter={delimiter!r})")
    return rows


# Design Rationale and Trade-offs:
#
# 1. Why a hand-written state machine instead of the csv module?
#    - Delimiter is detected from the text, not a dialect guess over lines
#    - Quotes toggle mid-field ("4"" TV") the way exports actually write them
#    - Blank rows are dropped at every boundary, including end of input
#    - Trade-off: More code to maintain, but every transition is testable
#
# 2. Why sample only the first 1000 characters for the delimiter?
#    - Headers and first rows decide the format
#    - Trade-off: A file whose body switches delimiter is misread
