#!/usr/bin/env python3
"""
Entrypoint for building the weekly digest draft. Meant to be triggered by cron
on the configured digest day.

Usage:
    uv run python create_digest.py

    # Print when the next digest run should happen
    uv run python create_digest.py --next-run
"""
import argparse
import sys

from content_screening import db_engine
from content_screening.bookmarks import init_db
from content_screening.digest import DigestAssembler
from content_screening.notifier import Notifier
from content_screening.schedule import next_digest_run
from util.config import ConfigurationError, load_config
from util.constants import DEFAULT_CONFIG_PATH


def main():
    parser = argparse.ArgumentParser(description="Create the weekly digest draft from pending bookmarks")
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to the YAML config (default: {DEFAULT_CONFIG_PATH})"
    )
    parser.add_argument(
        "--next-run",
        action="store_true",
        help="Print the next scheduled digest time and exit"
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.next_run:
        print(f"{next_digest_run(config.digest.digest_day):%Y-%m-%d %H:%M:%S}")
        sys.exit(0)

    db_engine.configure(config.storage.bookmarks_url)
    init_db()

    assembler = DigestAssembler(config.digest, Notifier(config.notification))
    post_id = assembler.run()
    if post_id is None:
        print("No digest created")
        sys.exit(1)

    print(f"Created digest draft {post_id}: {assembler.title}")


if __name__ == "__main__":
    main()
