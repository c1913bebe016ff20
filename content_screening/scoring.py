"""
Turns the LLM's scoring response into a thresholded list of articles.

The LLM refers to articles by the 1-based "post_id" they were given in the
prompt. article_for_post_id() is the only place that arithmetic happens.
Anything malformed (the payload, the envelope, a single entry, an unknown
post_id) is logged and skipped; nothing here raises.
"""

from typing import Any, List, Optional, Sequence

from content_screening.models import Link, ScoredArticle, ScoredResult
from util.logging_util import log_pipeline_step, setup_logger

logger = setup_logger(__name__)

REQUIRED_FIELDS = ("post_id", "score", "confidence", "category")


def article_for_post_id(links: Sequence[Link], post_id: int) -> Optional[Link]:
    """Return the article the prompt numbered post_id, or None if there is no such post."""
    index = post_id - 1
    if index < 0 or index >= len(links):
        return None
    return links[index]


def _coerce_int(value: Any) -> Optional[int]:
    """Non-negative int from a JSON number or numeric string; None if not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        return abs(int(value))
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        return abs(int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return None


def unwrap_results(payload: Any) -> Optional[list]:
    """
    Find the list of scored entries in a parsed response.

    Accepts {"results": [...]}, a bare list, or a single entry object.
    Returns None when the payload or its "results" is not a container.
    """
    if not isinstance(payload, (dict, list)):
        return None

    if isinstance(payload, dict) and "results" in payload:
        payload = payload["results"]
        if not isinstance(payload, (dict, list)):
            return None

    if isinstance(payload, dict):
        if "post_id" in payload:
            return [payload]
        return list(payload.values())

    return list(payload)


def parse_scored_entry(entry: Any) -> Optional[ScoredResult]:
    """Validate one entry. Returns None if a field is missing or not usable."""
    if not isinstance(entry, dict):
        logger.warning(f"Skipping invalid link data item: {entry!r}")
        return None

    missing = [name for name in REQUIRED_FIELDS if entry.get(name) is None]
    if missing:
        logger.warning(f"Skipping link data item missing {missing}: {entry!r}")
        return None

    post_id = _coerce_int(entry["post_id"])
    score = _coerce_int(entry["score"])
    confidence = _coerce_int(entry["confidence"])
    if post_id is None or score is None or confidence is None:
        logger.warning(f"Skipping link data item with non-numeric fields: {entry!r}")
        return None

    return ScoredResult(
        post_id=post_id,
        score=score,
        confidence=min(confidence, 100),
        category=str(entry["category"]).strip(),
    )


def select_articles(payload: Any, links: Sequence[Link], threshold: int) -> List[ScoredArticle]:
    """
    Join scored entries back to their articles and keep those at or above threshold.

    Args:
        payload: The gateway's JSON mode result (dict, list, None or an error string).
        links: The articles in the order they were submitted.
        threshold: Minimum score, inclusive.

    Returns:
        Surviving articles, in the order the LLM returned them.
    """
    entries = unwrap_results(payload)
    if entries is None:
        logger.error(f"LLM response is not a valid container, cannot process bookmarks: {payload!r}")
        return []

    selected = []
    for entry in entries:
        result = parse_scored_entry(entry)
        if result is None:
            continue

        link = article_for_post_id(links, result.post_id)
        if link is None:
            logger.warning(f"Could not find original link data for post_id {result.post_id}")
            continue

        if result.score < threshold:
            logger.debug(f"Below threshold ({result.score} < {threshold}): {link.url}")
            continue

        selected.append(ScoredArticle(
            title=link.title,
            url=link.url,
            excerpt=link.excerpt,
            score=result.score,
            category=result.category,
            confidence=result.confidence,
        ))

    log_pipeline_step(logger, "score", len(selected), len(links))
    return selected
