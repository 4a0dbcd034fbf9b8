"""
Configuration settings for ReviewAudit.

Centralized configuration for the parser, aggregator, insight agent,
and CLI.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
OUTPUT_ROOT = PROJECT_ROOT / "output"

# API Configuration
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")

# Insight Agent
INSIGHT_MODEL = "gemini-1.5-flash"
LLM_TEMPERATURE = 0.3
INSIGHT_MAX_RETRIES = 3
INSIGHT_MAX_CURRENT_REVIEWS = 50  # Target-quarter reviews sent to the LLM
INSIGHT_MAX_PREVIOUS_REVIEWS = 20  # Previous-quarter reviews sent as context

# Parsing
DELIMITER_SAMPLE_SIZE = 1000  # Characters scanned for delimiter detection
HEADER_SCAN_ROWS = 10
DEFAULT_REVIEWER_NAME = "Anonymous"

# Aggregation
DEFAULT_CLIENT_NAME = "Client Name"
YEARLY_TREND_YEARS = 5
TOP_REVIEW_COUNT = 3
TOP_REVIEW_MIN_TEXT_LENGTH = 20
IMPROVEMENT_STEP = 0.1  # Average increase targeted by "reviews to improve"

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "review_audit.log"


# Design Rationale and Trade-offs:
#
# 1. Why environment variable for the API key?
#    - Keeps credentials out of the repository
#    - Insights are optional, so an empty default is valid
#    - Trade-off: Requires setting env var before --insights
#
# 2. Why module constants instead of a config file?
#    - Single source of truth for parser and aggregator knobs
#    - Components still take plain constructor arguments, so tests bypass this
#    - Trade-off: Tuning means editing code, acceptable for V1
#
# 3. Why 50/20 review caps for the insight prompt?
#    - Keeps the prompt well inside the model's context window
#    - Most recent reviews come first, so the cap drops the oldest
#    - Trade-off: Very busy quarters are summarized from a sample
