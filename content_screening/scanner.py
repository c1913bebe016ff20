"""
Ingestion run orchestration: feeds -> extraction -> scoring -> bookmarks.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from content_screening.article_content import ArticleExtractor
from content_screening.bookmarks import create_bookmarks, get_last_scan_time, record_scan_run
from content_screening.models import Link, ScoredArticle
from content_screening.prompt_builder import PromptBuilder
from content_screening.rss_feed import list_all_candidates
from content_screening.schedule import collection_interval
from content_screening.scoring import select_articles
from llm.gateway import LLMGateway, is_error_result
from util.config import AppConfig
from util.logging_util import setup_logger

logger = setup_logger(__name__)


@dataclass
class IngestionResult:
    candidates: int = 0
    extracted: int = 0
    scored: List[ScoredArticle] = field(default_factory=list)
    created: List[int] = field(default_factory=list)


class IngestionPipeline:
    """One ingestion pass over every configured feed.

    Individual feed, page and scoring failures only shrink the result; the run
    itself completes and can be re-triggered safely since stored URLs are
    never stored twice.
    """

    def __init__(
        self,
        config: AppConfig,
        gateway: LLMGateway,
        extractor: Optional[ArticleExtractor] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        self.config = config
        self.gateway = gateway
        self.extractor = extractor or ArticleExtractor(timeout=config.scoring.fetch_timeout_seconds)
        self.prompt_builder = prompt_builder or PromptBuilder(config.scoring)

    def score(self, links: List[Link]) -> List[ScoredArticle]:
        """Ask the LLM to score the batch and keep what clears the threshold."""
        if not links:
            return []

        payload = self.gateway.send(self.prompt_builder.messages(links), json_mode=True)
        if is_error_result(payload):
            logger.error(f"Scoring request failed: {payload}")
            return []

        return select_articles(payload, links, self.config.scoring.minimum_threshold_score)

    def run(self) -> IngestionResult:
        logger.info("Starting RSS scan")
        result = IngestionResult()

        candidates = list_all_candidates(self.config.feeds, self.config.scoring.max_articles_per_feed)
        result.candidates = len(candidates)

        links = self.extractor.extract_all(candidates)
        result.extracted = len(links)

        result.scored = self.score(links)
        result.created = create_bookmarks(result.scored)

        record_scan_run(result.candidates, result.extracted, len(result.scored), len(result.created))
        logger.info(
            f"RSS scan complete: {result.candidates} found, {result.extracted} extracted, "
            f"{len(result.scored)} above threshold, {len(result.created)} new"
        )
        return result


def is_scan_due(cadence: str) -> bool:
    """Check if a scan is due for the configured collection cadence."""
    last_scan = get_last_scan_time()
    if last_scan is None:
        return True
    return (time.time() - last_scan) >= collection_interval(cadence)
