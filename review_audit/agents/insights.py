"""
Insight Agent.

Produces the narrative part of a quarterly reputation report (trends,
wins, opportunities, email highlights) from the quarter's review texts
using Gemini in JSON mode.
"""

import copy
import json
import logging
from datetime import date
from typing import Optional, Sequence
import google.generativeai as genai

from review_audit.models.insight import EmailContent, InsightReport
from review_audit.models.review import Review

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a Senior Reputation Analyst writing quarterly review audits for property managers.

Your task:
Analyze the provided resident reviews and generate a professional, high-level executive report.

Rules:
- BE CONCISE. All lists have a MAXIMUM of 3 items. The executive summary is a MAXIMUM of 3 short sentences.
- "trends" = the top 3 specific, negative recurring themes (e.g. "Slow maintenance response on AC units")
- "wins" = the top 3 specific staff names or positive amenities mentioned
- "opportunities" = 3 actionable, concise next steps for the property manager
- "emailContent" = highly scannable highlights for a busy property manager
- Tone: expert, data-driven, yet constructive

Output valid JSON only."""


RESPONSE_SCHEMA_HINT = """{
  "trends": ["..."],
  "opportunities": ["..."],
  "wins": ["..."],
  "executiveSummary": ["..."],
  "seoImpact": "...",
  "quotes": [{"category": "...", "text": "...", "author": "..."}],
  "emailContent": {"feedbackHighlights": "...", "opportunities": "..."}
}"""


FALLBACK_REPORT = InsightReport(
    trends=["Continue monitoring resident sentiment regarding common area maintenance."],
    opportunities=["Leverage recent positive staff mentions for social proof in marketing."],
    wins=["Team is maintaining a professional and responsive presence online."],
    executive_summary=["Overall reputation remains stable with positive engagement noted."],
    seo_impact="Steady review volume is positively supporting local map visibility.",
    quotes=[],
    email_content=EmailContent(
        feedback_highlights=(
            "Sentiment remains largely positive with consistent mentions of great staff service."
        ),
        opportunities=(
            "Focus on increasing review volume from long-term residents to boost YTD averages."
        ),
    ),
)


def format_reviews(reviews: Sequence[Review], limit: int) -> str:
    """One `[<rating> Stars] "<text>"` line per review."""
    return "\n".join(f'[{r.rating:g} Stars] "{r.text}"' for r in list(reviews)[:limit])


def build_prompt(
    current_reviews: Sequence[Review],
    previous_reviews: Sequence[Review],
    client_name: str,
    year: int,
    quarter: int,
    today: date,
    max_current: int = 50,
    max_previous: int = 20
) -> str:
    """Construct the user prompt for one reporting period."""
    current_block = format_reviews(current_reviews, max_current)
    previous_block = format_reviews(previous_reviews, max_previous)

    return f"""Current Date: {today.strftime('%a %b %d %Y')}
Reporting Period: Q{quarter} {year}
Client Property: "{client_name}"

Current Quarter Reviews:
{current_block or "No reviews found for this quarter."}

Historical Context (Previous Quarter):
{previous_block or "No previous quarter data."}

Respond as JSON:
{RESPONSE_SCHEMA_HINT}"""


class InsightAgent:
    """
    Generates narrative insights for a client's quarter.

    Receives raw review text (not aggregates) for the target quarter and
    the previous quarter. Never fails the report: after `max_retries`
    unsuccessful attempts a neutral fallback report is returned.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-1.5-flash",
        temperature: float = 0.3,
        max_retries: int = 3,
        max_current_reviews: int = 50,
        max_previous_reviews: int = 20
    ):
        """
        Initialize insight agent.

        Args:
            api_key: Gemini API key
            model_name: Gemini model to use
            temperature: LLM temperature
            max_retries: Number of attempts before falling back
            max_current_reviews: Target-quarter reviews included in the prompt
            max_previous_reviews: Previous-quarter reviews included in the prompt
        """
        self.model_name = model_name
        self.temperature = temperature
        self.max_retries = max_retries
        self.max_current_reviews = max_current_reviews
        self.max_previous_reviews = max_previous_reviews

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=model_name,
            generation_config={
                "temperature": temperature,
                "response_mime_type": "application/json"
            },
            system_instruction=SYSTEM_PROMPT
        )

        logger.info(f"Initialized InsightAgent with model={model_name}, temp={temperature}")

    def analyze(
        self,
        current_reviews: Sequence[Review],
        previous_reviews: Sequence[Review],
        client_name: str,
        year: int,
        quarter: int,
        today: Optional[date] = None
    ) -> InsightReport:
        """
        Generate the insight report for one period.

        Args:
            current_reviews: Reviews of the target quarter
            previous_reviews: Reviews of the quarter before it
            client_name: Property/client label
            year: Target year
            quarter: Target quarter (1-4)
            today: Date shown to the model as "current date"

        Returns:
            InsightReport (the fallback report if every attempt failed)
        """
        prompt = build_prompt(
            current_reviews,
            previous_reviews,
            client_name,
            year,
            quarter,
            today or date.today(),
            max_current=self.max_current_reviews,
            max_previous=self.max_previous_reviews
        )

        for attempt in range(self.max_retries):
            try:
                response = self.model.generate_content(prompt)
                report = self._parse_llm_response(response.text)
                logger.info(
                    f"Generated insights for {client_name} Q{quarter} {year} "
                    f"({len(report.trends)} trends, {len(report.wins)} wins)"
                )
                return report

            except (json.JSONDecodeError, KeyError, TypeError) as e:
                logger.error(f"Invalid insight response (attempt {attempt + 1}): {e}")

            except Exception as e:
                logger.error(f"LLM API error (attempt {attempt + 1}): {e}")

        logger.warning(
            f"Max retries reached for {client_name} Q{quarter} {year}, using fallback insights"
        )
        return self.fallback_report()

    @staticmethod
    def fallback_report() -> InsightReport:
        """Fresh copy of the neutral report used when generation fails."""
        return copy.deepcopy(FALLBACK_REPORT)

    def _parse_llm_response(self, response_text: str) -> InsightReport:
        """
        Parse the LLM JSON payload.

        Raises:
            json.JSONDecodeError: If response is not valid JSON
            KeyError: If a required field is missing
        """
        data = json.loads(response_text)
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
        return InsightReport.from_dict(data)


# Design Rationale and Trade-offs:
#
# 1. Why return a fallback report instead of raising?
#    - Metrics are the core deliverable, narrative is a bonus
#    - A quota error should not throw away a finished analysis
#    - Trade-off: Generic text can slip into a report unnoticed,
#      the WARNING log line records it
#
# 2. Why JSON mode plus strict from_dict?
#    - Missing keys raise KeyError and trigger a retry
#    - Trade-off: A mostly-good response is discarded over one field
#
# 3. Why temperature 0.3?
#    - Reports should read consistently quarter over quarter
#    - Trade-off: Less varied phrasing
