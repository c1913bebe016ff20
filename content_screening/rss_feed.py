"""
RSS/Atom feed fetching.

Only the title, permalink and id/guid of each entry are used. Entries are
returned in feed order, which downstream scoring relies on.
"""

from typing import Iterable, List, Optional

import feedparser  # type: ignore
from html2text import html2text

from content_screening.models import ArticleCandidate
from util.config import FeedConfig
from util.logging_util import setup_logger

logger = setup_logger(__name__)


def _clean_title(raw_title: str) -> str:
    """Feed titles sometimes carry markup or entities; reduce them to plain text."""
    if not raw_title:
        return ""
    if "<" in raw_title or "&" in raw_title:
        return " ".join(html2text(raw_title).split())
    return raw_title.strip()


def _entry_guid(entry: dict) -> Optional[str]:
    guid = entry.get("id") or entry.get("guid")
    if not guid:
        return None
    return str(guid).strip() or None


def list_candidates(feed_url: str, max_items: int = 5) -> List[ArticleCandidate]:
    """
    Parse a feed and return up to max_items candidates in feed order.

    A feed that cannot be fetched or parsed yields an empty list; the failure
    is logged and the caller carries on with the other feeds.
    """
    try:
        rss_content = feedparser.parse(feed_url)
    except Exception as e:
        logger.error(f"Error fetching RSS for {feed_url}: {e}")
        return []

    status = rss_content.get("status")
    if status and status >= 400:
        logger.warning(f"HTTP {status} for feed {feed_url}")
        return []

    entries = rss_content.get("entries", [])
    if not entries:
        if rss_content.get("bozo"):
            logger.warning(f"Could not parse feed {feed_url}: {rss_content.get('bozo_exception')}")
        else:
            logger.info(f"No entries in feed {feed_url}")
        return []

    candidates = []
    for entry in entries[:max(max_items, 0)]:
        link = (entry.get("link") or "").strip()
        guid = _entry_guid(entry)
        if not link and not guid:
            logger.debug(f"Skipping entry without link or guid in {feed_url}")
            continue

        candidates.append(ArticleCandidate(
            title=_clean_title(entry.get("title", "")),
            link=link or guid,
            guid=guid,
        ))

    return candidates


def list_all_candidates(feeds: Iterable[FeedConfig], max_items: int = 5) -> List[ArticleCandidate]:
    """Concatenate the candidates of every configured feed, keeping feed order."""
    candidates = []
    feed_count = 0
    for feed in feeds:
        feed_count += 1
        feed_candidates = list_candidates(feed.url, max_items)
        logger.debug(f"{len(feed_candidates)} candidate(s) from {feed.name}")
        candidates.extend(feed_candidates)

    logger.info(f"Fetched {len(candidates)} candidates from {feed_count} RSS feeds")
    return candidates
