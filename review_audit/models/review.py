"""
Review data model.

Represents a single review parsed from an uploaded CSV export.
"""

from dataclasses import dataclass
from datetime import date


DEFAULT_REVIEWER_NAME = "Anonymous"


def quarter_of(month: int) -> int:
    """Calendar quarter (1-4) of a 1-based month."""
    return (month - 1) // 3 + 1


@dataclass(frozen=True)
class Review:
    """
    One review row that survived parsing.
    Only built when the date column produced a real calendar date.
    """
    raw_date_text: str  # Date cell as written in the file (display only)
    parsed_date: date  # Used for all quarter/year bucketing
    rating: float  # Not bounds-checked; "4.5 stars" -> 4.5
    text: str = ""  # Review body, may be empty
    reviewer_name: str = DEFAULT_REVIEWER_NAME

    @property
    def year(self) -> int:
        return self.parsed_date.year

    @property
    def quarter(self) -> int:
        return quarter_of(self.parsed_date.month)

    def to_dict(self) -> dict:
        """Serialize for JSON export."""
        return {
            "date": self.raw_date_text,
            "parsed_date": self.parsed_date.isoformat(),
            "rating": self.rating,
            "text": self.text,
            "reviewer": self.reviewer_name,
        }


# Design Rationale and Trade-offs:
#
# 1. Why keep raw_date_text next to parsed_date?
#    - Reports echo the date the way the platform wrote it ("2 weeks ago")
#    - All arithmetic uses parsed_date only
#    - Trade-off: Two date fields per record
#
# 2. Why no bounds check on rating?
#    - Exports occasionally carry 0 or 10-point scores
#    - Out-of-range ratings still count toward totals and averages
#    - Distribution drops them instead (see aggregation.rating_distribution)
#    - Trade-off: A stray 10 skews the average, but the row is not lost
#
# 3. Why frozen?
#    - Top-review selection dedups by identity across pools
#    - Trade-off: None, records are never edited after parsing
