#!/usr/bin/env python3
"""
Entrypoint for one feed ingestion run. Meant to be triggered by cron.

Usage:
    # Fetch, score and store new bookmarks
    uv run python run_ingestion.py

    # Only run if the configured collection cadence says a run is due
    uv run python run_ingestion.py --if-due

    # Use a different config file
    uv run python run_ingestion.py --config /path/to/curation.yaml
"""
import argparse
import sys

from content_screening import db_engine
from content_screening.bookmarks import init_db
from content_screening.scanner import IngestionPipeline, is_scan_due
from content_screening.schedule import collection_interval, first_collection_run
from llm.gateway import LLMGateway
from util.config import ConfigurationError, load_config
from util.constants import DEFAULT_CONFIG_PATH
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Fetch feeds, score articles and store new bookmarks")
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to the YAML config (default: {DEFAULT_CONFIG_PATH})"
    )
    parser.add_argument(
        "--if-due",
        action="store_true",
        help="Skip the run unless the collection cadence says one is due"
    )
    parser.add_argument(
        "--show-schedule",
        action="store_true",
        help="Print the collection interval and first run time, then exit"
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    cadence = config.digest.collection_cadence

    if args.show_schedule:
        print(f"Cadence: {cadence}")
        print(f"Interval: {collection_interval(cadence)}s")
        print(f"First run: {first_collection_run(cadence):%Y-%m-%d %H:%M:%S}")
        sys.exit(0)

    db_engine.configure(config.storage.bookmarks_url)
    init_db()

    if args.if_due and not is_scan_due(cadence):
        logger.info("Ingestion not due yet")
        sys.exit(0)

    try:
        gateway = LLMGateway(config.llm)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    result = IngestionPipeline(config, gateway).run()
    print(f"{len(result.created)} new bookmark(s) from {result.candidates} candidate(s)")


if __name__ == "__main__":
    main()
