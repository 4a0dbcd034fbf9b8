"""
Pipeline Orchestrator.

Runs one report: load → parse → aggregate → (insights) → export.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from review_audit.agents.aggregation import TemporalAggregator
from review_audit.agents.ingestion import IngestionAgent
from review_audit.agents.insights import InsightAgent
from review_audit.models.insight import InsightReport
from review_audit.models.metrics import AnalyticsResult
from review_audit.utils.storage import ReportWriter
import config.settings as settings

logger = logging.getLogger(__name__)


@dataclass
class ReportOutcome:
    """What a pipeline run produced."""
    result: AnalyticsResult
    insights: Optional[InsightReport] = None
    paths: Dict[str, str] = field(default_factory=dict)


class ReportOrchestrator:
    """
    Coordinates the report pipeline for a single upload.

    1. Ingestion → 2. Aggregation → 3. Insights (optional) → 4. Export
    """

    def __init__(
        self,
        output_root: str,
        api_key: Optional[str] = None,
        use_insights: bool = False,
        now: Optional[datetime] = None
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            output_root: Directory for report files
            api_key: Google API key, required when use_insights is True
            use_insights: Call the insight agent for narrative output
            now: Fixed reference time for relative dates (tests)
        """
        if use_insights and not api_key:
            raise ValueError("An API key is required when insights are enabled")

        logger.info("Initializing pipeline components...")

        self.ingestion_agent = IngestionAgent(
            sample_size=settings.DELIMITER_SAMPLE_SIZE,
            header_scan_rows=settings.HEADER_SCAN_ROWS,
            default_reviewer=settings.DEFAULT_REVIEWER_NAME,
            now=now
        )

        self.aggregator = TemporalAggregator(
            yearly_trend_years=settings.YEARLY_TREND_YEARS,
            top_review_count=settings.TOP_REVIEW_COUNT,
            top_review_min_text_length=settings.TOP_REVIEW_MIN_TEXT_LENGTH,
            improvement_step=settings.IMPROVEMENT_STEP
        )

        self.insight_agent = None
        if use_insights:
            self.insight_agent = InsightAgent(
                api_key=api_key,
                model_name=settings.INSIGHT_MODEL,
                temperature=settings.LLM_TEMPERATURE,
                max_retries=settings.INSIGHT_MAX_RETRIES,
                max_current_reviews=settings.INSIGHT_MAX_CURRENT_REVIEWS,
                max_previous_reviews=settings.INSIGHT_MAX_PREVIOUS_REVIEWS
            )

        self.writer = ReportWriter(output_root)

        logger.info("Pipeline initialized successfully")

    def run(
        self,
        csv_path: str,
        client_name: str = settings.DEFAULT_CLIENT_NAME,
        year: Optional[int] = None,
        quarter: Optional[int] = None,
        reviews_to_improve_override: Optional[int] = None
    ) -> ReportOutcome:
        """
        Build the report for one file and period.

        Args:
            csv_path: Review export to read
            client_name: Client/property label
            year: Target year (defaults to the latest review's year)
            quarter: Target quarter (defaults to the latest review's quarter)
            reviews_to_improve_override: Manual "reviews to improve" value

        Returns:
            ReportOutcome with the metrics, insights, and written file paths

        Raises:
            EmptyFileError, ColumnResolutionError, NoReviewsError
        """
        logger.info(f"Starting report for {client_name} from {csv_path}")

        # STAGE 1: Ingestion
        reviews = self.ingestion_agent.parse_file(csv_path)

        # STAGE 2: Aggregation
        result = self.aggregator.aggregate(
            reviews,
            client_name=client_name,
            year=year,
            quarter=quarter,
            reviews_to_improve_override=reviews_to_improve_override
        )

        # STAGE 3: Insights
        insights = None
        if self.insight_agent is not None:
            insights = self.insight_agent.analyze(
                result.quarter_reviews,
                result.previous_quarter_reviews,
                client_name,
                result.year,
                result.quarter
            )

        # STAGE 4: Export
        paths = self.writer.write(result, insights)

        logger.info(f"Report complete for {client_name} {result.period_label}")
        return ReportOutcome(result=result, insights=insights, paths=paths)


# Design Rationale and Trade-offs:
#
# 1. Why build components from settings in __init__?
#    - One place wires configuration into the agents
#    - The agents themselves take plain arguments and stay easy to test
#    - Trade-off: Changing a setting at runtime needs a new orchestrator
#
# 2. Why run insights after aggregation?
#    - The prompt uses the resolved period's quarter and previous quarter
#    - Trade-off: Insight latency adds to every report when enabled
