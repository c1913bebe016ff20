"""
Date helpers for the external scheduler and the digest.

Nothing in here schedules anything: cron (or whatever runs run_ingestion.py
and create_digest.py) decides when to call the entry points. These helpers
work out the times it should use and the week a digest covers.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from util.constants import VALID_DAYS
from util.logging_util import setup_logger

logger = setup_logger(__name__)

DAY_SECONDS = 24 * 60 * 60

CADENCE_INTERVALS = {
    "Daily at Midnight": DAY_SECONDS,
    "Every other day at Midnight": 2 * DAY_SECONDS,
    "Every Sunday at Midnight": 7 * DAY_SECONDS,
}
DEFAULT_CADENCE = "Daily at Midnight"

END_OF_DAY = time(23, 59, 59)


def validate_day_name(day: str) -> str:
    """Return day if it is a weekday name, otherwise Sunday."""
    return day if day in VALID_DAYS else "Sunday"


def _next_weekday(start: date, day: str) -> date:
    """The first date strictly after start falling on day."""
    target = VALID_DAYS.index(validate_day_name(day))
    days_ahead = (target - start.weekday()) % 7 or 7
    return start + timedelta(days=days_ahead)


def next_digest_run(day: str, now: Optional[datetime] = None) -> datetime:
    """Midnight at the start of the next given weekday (never today)."""
    now = now or datetime.now()
    return datetime.combine(_next_weekday(now.date(), day), time.min)


def collection_interval(cadence: str) -> int:
    """Seconds between feed collection runs for a cadence name."""
    if cadence not in CADENCE_INTERVALS:
        logger.warning(f"Unknown collection cadence '{cadence}', using '{DEFAULT_CADENCE}'")
        cadence = DEFAULT_CADENCE
    return CADENCE_INTERVALS[cadence]


def first_collection_run(cadence: str, now: Optional[datetime] = None) -> datetime:
    """When the first collection run for a cadence should happen."""
    now = now or datetime.now()
    if cadence == "Every Sunday at Midnight":
        return datetime.combine(_next_weekday(now.date(), "Sunday"), END_OF_DAY)
    return datetime.combine(now.date(), END_OF_DAY)


def digest_week_start(today: Optional[date] = None) -> date:
    """The Sunday on or after the same day last week."""
    today = today or date.today()
    week_ago = today - timedelta(days=7)
    return week_ago + timedelta(days=(6 - week_ago.weekday()) % 7)


def _ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_week_date(day: date) -> str:
    """E.g. "18th of October 2026"."""
    return f"{day.day}{_ordinal_suffix(day.day)} of {day.strftime('%B')} {day.year}"


def week_date_string(today: Optional[date] = None) -> str:
    return format_week_date(digest_week_start(today))
