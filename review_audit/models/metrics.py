"""
Aggregate data models.

Quarter/year buckets, star distribution, and the full analytics result
handed to charting, insight, and report collaborators.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from review_audit.models.review import Review


@dataclass
class QuarterBucket:
    """Review count and average rating for one calendar quarter."""
    year: int
    quarter: int  # 1-4
    review_count: int = 0
    average_rating: float = 0.0  # Rounded to 2 decimals, 0 when empty

    def __post_init__(self):
        if not (1 <= self.quarter <= 4):
            raise ValueError(f"Invalid quarter: {self.quarter}. Must be 1-4")

    @property
    def label(self) -> str:
        return f"Q{self.quarter}"

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "year": self.year,
            "quarter": self.quarter,
            "review_count": self.review_count,
            "average_rating": self.average_rating,
        }


@dataclass
class YearBucket:
    """Review count and average rating for one calendar year."""
    year: int
    review_count: int = 0
    average_rating: float = 0.0

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "review_count": self.review_count,
            "average_rating": self.average_rating,
        }


@dataclass
class DistributionBucket:
    """Number of reviews whose rounded rating equals `stars`."""
    stars: int  # 1-5
    count: int = 0

    @property
    def label(self) -> str:
        return "1 Star" if self.stars == 1 else f"{self.stars} Stars"

    def to_dict(self) -> dict:
        return {"label": self.label, "stars": self.stars, "count": self.count}


@dataclass
class AnalyticsResult:
    """
    Everything computed for one (file, client, year, quarter) selection.

    The review lists are kept so collaborators (insight generation,
    report rendering) can work from the same filtered sets.
    """
    client_name: str
    year: int
    quarter: int
    all_time_total: int
    ytd_total: int
    ytd_average: float
    quarter_total: int
    quarter_average: float
    distribution: List[DistributionBucket]
    quarterly_trend: List[QuarterBucket]
    yearly_trend: List[YearBucket]
    reviews_to_improve: int
    top_reviews: List[Review] = field(default_factory=list)
    ytd_reviews: List[Review] = field(default_factory=list)
    quarter_reviews: List[Review] = field(default_factory=list)
    previous_quarter_reviews: List[Review] = field(default_factory=list)
    previous_period: Optional[Tuple[int, int]] = None

    @property
    def period_label(self) -> str:
        return f"Q{self.quarter} {self.year}"

    def to_dict(self) -> dict:
        """JSON-serializable summary (review sets reduced to counts)."""
        return {
            "client_name": self.client_name,
            "year": self.year,
            "quarter": self.quarter,
            "metrics": {
                "all_time_total": self.all_time_total,
                "ytd_total": self.ytd_total,
                "ytd_average": self.ytd_average,
                "quarter_total": self.quarter_total,
                "quarter_average": self.quarter_average,
                "reviews_to_improve": self.reviews_to_improve,
                "distribution": [b.to_dict() for b in self.distribution],
                "quarterly_trend": [b.to_dict() for b in self.quarterly_trend],
                "yearly_trend": [b.to_dict() for b in self.yearly_trend],
            },
            "previous_period": (
                {"year": self.previous_period[0], "quarter": self.previous_period[1]}
                if self.previous_period else None
            ),
            "previous_quarter_total": len(self.previous_quarter_reviews),
            "top_reviews": [r.to_dict() for r in self.top_reviews],
        }


# Design Rationale and Trade-offs:
#
# 1. Why zero-filled buckets instead of omitting empty quarters?
#    - Charts always get Q1-Q4 in order
#    - Trade-off: A 0.0 average is indistinguishable from 0-star reviews,
#      review_count disambiguates
#
# 2. Why keep review lists on AnalyticsResult?
#    - The insight agent needs the quarter and previous-quarter texts
#    - to_dict only exports counts, so the summary JSON stays small
#    - Trade-off: The result holds references to every YTD review
