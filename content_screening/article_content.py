"""
Full-text extraction for feed candidates.

Each candidate goes through a fixed ladder, stopping at the first rung that
yields readable content:

1. fetch the link and run trafilatura over the page
2. fetch the guid instead, when it differs from the link
3. fetch the URL with "&#038;" unescaped to "&"
4. re-encode each fetched page with numeric character references and extract again

Candidates that fail every rung are dropped and logged. Page fetches use a
short timeout and skip TLS verification so that badly configured sources
still get read.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

import requests
import trafilatura

from content_screening.constants import ESCAPED_AMPERSAND, FETCH_TIMEOUT_SECONDS, USER_AGENT
from content_screening.models import ArticleCandidate, Link
from util.logging_util import log_pipeline_step, setup_logger

logger = setup_logger(__name__)


@dataclass
class FetchedPage:
    url: str
    text: str
    content: bytes


def reencode_html(content: bytes) -> str:
    """Turn every non-ASCII character into a numeric character reference."""
    decoded = content.decode("utf-8", errors="replace")
    return decoded.encode("ascii", "xmlcharrefreplace").decode("ascii")


def extract_readable(html: str, url: str, fallback_title: str = "") -> Optional[Link]:
    """Run trafilatura over a page, returning None if nothing readable comes out."""
    try:
        text = trafilatura.extract(
            html,
            url=url,
            include_comments=False,
            include_tables=False,
        )
    except Exception as e:
        logger.debug(f"trafilatura failed for {url}: {e}")
        return None

    if not text or not text.strip():
        return None

    title = ""
    try:
        metadata = trafilatura.extract_metadata(html)
    except Exception as e:
        logger.debug(f"Metadata extraction failed for {url}: {e}")
        metadata = None
    if metadata is not None and metadata.title:
        title = metadata.title.strip()

    return Link(url=url, title=title or fallback_title, excerpt=text.strip())


class ArticleExtractor:
    """Fetches candidate pages and extracts their readable content."""

    def __init__(self, timeout: int = FETCH_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str) -> Optional[FetchedPage]:
        """GET a page. Returns None on network errors, non-200 responses and empty bodies."""
        try:
            resp = self.session.get(
                url,
                timeout=self.timeout,
                verify=False,
                headers={"User-Agent": USER_AGENT},
            )
        except requests.RequestException as e:
            logger.warning(f"Error fetching article content from {url}: {e}")
            return None

        if resp.status_code != 200:
            logger.warning(f"Non-200 response code when fetching {url}: {resp.status_code}")
            return None

        if not resp.content:
            logger.warning(f"Empty response body when fetching {url}")
            return None

        return FetchedPage(url=url, text=resp.text, content=resp.content)

    def _candidate_urls(self, candidate: ArticleCandidate) -> List[str]:
        urls = [candidate.link]
        if candidate.guid and candidate.guid != candidate.link:
            urls.append(candidate.guid)
        for url in list(urls):
            if ESCAPED_AMPERSAND in url:
                unescaped = url.replace(ESCAPED_AMPERSAND, "&")
                if unescaped not in urls:
                    urls.append(unescaped)
        return [url for url in urls if url]

    def extract_content(self, candidate: ArticleCandidate) -> Optional[Link]:
        """Walk the fallback ladder for one candidate."""
        fetched = []
        for url in self._candidate_urls(candidate):
            page = self.fetch(url)
            if page is None:
                continue
            fetched.append(page)

            link = extract_readable(page.text, page.url, candidate.title)
            if link is not None:
                return link

        for page in fetched:
            link = extract_readable(reencode_html(page.content), page.url, candidate.title)
            if link is not None:
                logger.info(f"Extracted {page.url} after re-encoding")
                return link

        logger.warning(f"Failed to extract readable content for {candidate.link}")
        return None

    def extract_all(self, candidates: Iterable[ArticleCandidate]) -> List[Link]:
        """Extract every candidate, keeping input order and dropping failures."""
        candidates = list(candidates)
        links = []
        for candidate in candidates:
            link = self.extract_content(candidate)
            if link is not None:
                links.append(link)

        log_pipeline_step(logger, "extract", len(links), len(candidates))
        return links
