"""
Insight report data model.

Narrative output of the insight agent for one reporting period.
"""

from dataclasses import dataclass, field
from typing import Dict, List


MAX_LIST_ITEMS = 3


@dataclass
class Quote:
    """A review excerpt the insight agent chose to highlight."""
    category: str
    text: str
    author: str

    def to_dict(self) -> Dict[str, str]:
        return {"category": self.category, "text": self.text, "author": self.author}


@dataclass
class EmailContent:
    feedback_highlights: str = ""
    opportunities: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "feedback_highlights": self.feedback_highlights,
            "opportunities": self.opportunities,
        }


@dataclass
class InsightReport:
    """
    Structured narrative insights for a client and quarter.
    List fields are capped at three items.
    """
    trends: List[str] = field(default_factory=list)
    opportunities: List[str] = field(default_factory=list)
    wins: List[str] = field(default_factory=list)
    executive_summary: List[str] = field(default_factory=list)
    seo_impact: str = ""
    quotes: List[Quote] = field(default_factory=list)
    email_content: EmailContent = field(default_factory=EmailContent)

    def __post_init__(self):
        self.trends = self.trends[:MAX_LIST_ITEMS]
        self.opportunities = self.opportunities[:MAX_LIST_ITEMS]
        self.wins = self.wins[:MAX_LIST_ITEMS]
        self.executive_summary = self.executive_summary[:MAX_LIST_ITEMS]

    @classmethod
    def from_dict(cls, data: dict) -> "InsightReport":
        """
        Create InsightReport from the LLM's JSON payload.

        Raises:
            KeyError: If a required field is missing
            TypeError: If a field has the wrong shape
        """
        email = data["emailContent"]
        return cls(
            trends=list(data["trends"]),
            opportunities=list(data["opportunities"]),
            wins=list(data["wins"]),
            executive_summary=list(data["executiveSummary"]),
            seo_impact=data["seoImpact"],
            quotes=[
                Quote(category=q["category"], text=q["text"], author=q["author"])
                for q in data.get("quotes", [])
            ],
            email_content=EmailContent(
                feedback_highlights=email["feedbackHighlights"],
                opportunities=email["opportunities"],
            ),
        )

    def to_dict(self) -> dict:
        return {
            "trends": self.trends,
            "opportunities": self.opportunities,
            "wins": self.wins,
            "executive_summary": self.executive_summary,
            "seo_impact": self.seo_impact,
            "quotes": [q.to_dict() for q in self.quotes],
            "email_content": self.email_content.to_dict(),
        }


# Design Rationale and Trade-offs:
#
# 1. Why camelCase in from_dict but snake_case in to_dict?
#    - The prompt asks the model for the camelCase shape of the web report
#    - Exported JSON follows the rest of the summary file
#    - Trade-off: Two key styles to keep in sync
#
# 2. Why truncate lists to three items?
#    - The report layout has room for three bullets per section
#    - The model does not always respect "max 3" in the prompt
#    - Trade-off: Extra items are silently dropped
