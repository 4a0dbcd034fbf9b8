"""
Storage utility.

Writes the computed report (trend tables and a JSON summary) to disk.
"""

import json
import logging
import os
import re
from datetime import datetime, timezone
from typing import Dict, Optional

import pandas as pd

from review_audit.models.insight import InsightReport
from review_audit.models.metrics import AnalyticsResult

logger = logging.getLogger(__name__)

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """'Maple Court Apts.' -> 'maple-court-apts'"""
    return _NON_SLUG.sub("-", name.lower()).strip("-") or "client"


class ReportWriter:
    """
    Exports one AnalyticsResult.

    Files (prefix = <client-slug>_Q<q>_<year>):
    - <prefix>_quarterly.csv
    - <prefix>_yearly.csv
    - <prefix>_distribution.csv
    - <prefix>_summary.json
    """

    def __init__(self, output_dir: str):
        """
        Initialize report writer.

        Args:
            output_dir: Directory receiving the report files
        """
        self.output_dir = output_dir
        os.makedirs(self.output_dir, exist_ok=True)

        logger.info(f"Initialized ReportWriter with output_dir={output_dir}")

    def prefix_for(self, result: AnalyticsResult) -> str:
        return f"{slugify(result.client_name)}_Q{result.quarter}_{result.year}"

    def write(
        self,
        result: AnalyticsResult,
        insights: Optional[InsightReport] = None
    ) -> Dict[str, str]:
        """
        Write all report files.

        Returns:
            Mapping of file kind ("quarterly", "yearly", "distribution",
            "summary") to its path
        """
        prefix = self.prefix_for(result)
        paths = {
            kind: os.path.join(self.output_dir, f"{prefix}_{kind}.{ext}")
            for kind, ext in (
                ("quarterly", "csv"),
                ("yearly", "csv"),
                ("distribution", "csv"),
                ("summary", "json"),
            )
        }

        quarterly = pd.DataFrame(
            [b.to_dict() for b in result.quarterly_trend],
            columns=["label", "year", "quarter", "review_count", "average_rating"]
        )
        yearly = pd.DataFrame(
            [b.to_dict() for b in result.yearly_trend],
            columns=["year", "review_count", "average_rating"]
        )
        distribution = pd.DataFrame(
            [b.to_dict() for b in result.distribution],
            columns=["label", "stars", "count"]
        )

        try:
            quarterly.to_csv(paths["quarterly"], index=False)
            yearly.to_csv(paths["yearly"], index=False)
            distribution.to_csv(paths["distribution"], index=False)

            summary = result.to_dict()
            summary["insights"] = insights.to_dict() if insights else None
            summary["generated_at"] = datetime.now(timezone.utc).isoformat()
            with open(paths["summary"], "w", encoding="utf-8") as f:
                json.dump(summary, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to write report {prefix}: {e}")
            raise

        logger.info(f"Report {prefix} written to {self.output_dir}")
        return paths


# Design Rationale and Trade-offs:
#
# 1. Why CSV tables plus one JSON summary?
#    - Trend tables open directly in spreadsheets for client decks
#    - The JSON summary carries everything a dashboard needs in one file
#    - Trade-off: Some numbers are written twice
#
# 2. Why prefix files with client slug and period?
#    - Several clients and quarters share one output directory
#    - Re-running a period overwrites its own files only
#    - Trade-off: Renaming a client starts a new file series
