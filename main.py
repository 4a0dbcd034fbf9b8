"""
ReviewAudit - Quarterly Review Reputation Report

CLI entry point for building a report from a review CSV export.
"""

import argparse
import logging
import sys

from review_audit.exceptions import ReviewAuditError
from review_audit.orchestrator import ReportOrchestrator
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ReviewAudit - Quarterly review reputation report",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report on the most recent quarter in the file
  python main.py --csv reviews.csv --client "Maple Court"

  # Report on a specific quarter with AI insights
  python main.py --csv reviews.csv --client "Maple Court" \\
                 --year 2024 --quarter 1 --insights

Note: Set GOOGLE_API_KEY environment variable before using --insights.
        """
    )

    # Required arguments
    parser.add_argument(
        "--csv",
        required=True,
        help="Path to the review CSV export"
    )

    parser.add_argument(
        "--client",
        required=True,
        help="Client / property name shown in the report"
    )

    # Optional arguments
    parser.add_argument(
        "--year",
        type=int,
        help="Target year. Defaults to the year of the most recent review"
    )

    parser.add_argument(
        "--quarter",
        type=int,
        choices=[1, 2, 3, 4],
        help="Target quarter. Defaults to the quarter of the most recent review"
    )

    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Report directory (default: {settings.OUTPUT_ROOT})"
    )

    parser.add_argument(
        "--insights",
        action="store_true",
        help="Generate narrative insights with Gemini"
    )

    parser.add_argument(
        "--reviews-to-improve",
        type=int,
        help="Override the computed 'reviews to improve' number"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if args.insights and not settings.GOOGLE_API_KEY:
        logger.error(
            "GOOGLE_API_KEY environment variable not set. "
            "Set it or run without --insights."
        )
        sys.exit(1)

    print("=" * 60)
    print("ReviewAudit - Quarterly Review Reputation Report")
    print("=" * 60)
    print(f"File: {args.csv}")
    print(f"Client: {args.client}")
    if args.year or args.quarter:
        print(f"Period: Q{args.quarter or '?'} {args.year or '?'}")
    print(f"Insights: {args.insights}")
    print("=" * 60)
    print()

    try:
        orchestrator = ReportOrchestrator(
            output_root=args.output_dir,
            api_key=settings.GOOGLE_API_KEY,
            use_insights=args.insights
        )

        outcome = orchestrator.run(
            csv_path=args.csv,
            client_name=args.client,
            year=args.year,
            quarter=args.quarter,
            reviews_to_improve_override=args.reviews_to_improve
        )

        result = outcome.result
        print()
        print("=" * 60)
        print(f"✅ {result.period_label} report for {result.client_name}")
        print("=" * 60)
        print(f"All-time reviews: {result.all_time_total}")
        print(f"YTD: {result.ytd_total} reviews, average {result.ytd_average:.2f}")
        print(f"Quarter: {result.quarter_total} reviews, average {result.quarter_average:.2f}")
        print(f"5-star reviews to gain +0.1: {result.reviews_to_improve}")
        for kind, path in outcome.paths.items():
            print(f"{kind.capitalize()}: {path}")
        print("=" * 60)

        logger.info("ReviewAudit completed successfully")
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Report interrupted by user")
        print("\n⚠️  Report interrupted")
        sys.exit(1)

    except ReviewAuditError as e:
        logger.error(f"Input file rejected: {e}")
        print(f"\n❌ {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Report failed: {e}", exc_info=True)
        print(f"\n❌ Report failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)


if __name__ == "__main__":
    main()


# Design Rationale and Trade-offs:
#
# 1. Why check GOOGLE_API_KEY before building the pipeline?
#    - A missing key is only discovered after parsing otherwise
#    - Exit code 1 with a clear log line, no partial report on disk
#    - Trade-off: Key validity is still only known on the first API call
#
# 2. Why separate ReviewAuditError from other exceptions?
#    - Bad uploads are user errors: print the message, no traceback
#    - Anything else is a bug: log with exc_info and point at the log file
#    - Trade-off: Two except branches that both exit 1
#
# 3. Why a --reviews-to-improve override?
#    - Account managers sometimes quote a number agreed with the client
#    - Trade-off: The report can show a value the data does not support
