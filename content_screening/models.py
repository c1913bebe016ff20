"""
Data models for the content screening system.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Visibility(Enum):
    # Scored and stored, not yet used in a digest
    PENDING = "N"
    # Included in a digest
    PUBLISHED = "Y"


@dataclass
class ArticleCandidate:
    """A feed item before its page has been fetched."""
    title: str
    link: str
    guid: Optional[str] = None


@dataclass
class Link:
    """Extracted article content. Position in a batch is its identity for scoring."""
    url: str
    title: str
    excerpt: str


@dataclass
class ScoredResult:
    """One validated entry from the LLM's scoring response."""
    post_id: int
    score: int
    confidence: int
    category: str


@dataclass
class ScoredArticle:
    """A Link joined with its score, ready to become a bookmark."""
    title: str
    url: str
    excerpt: str
    score: int
    category: str
    confidence: int


@dataclass
class Category:
    name: str
    id: Optional[int] = None


@dataclass
class Bookmark:
    url: str
    title: str
    excerpt: str
    category: str
    score: int
    visible: Visibility = Visibility.PENDING
    confidence: int = 0
    created_at: int = 0
    id: Optional[int] = None


@dataclass
class DigestPost:
    """A digest draft post."""
    title: str
    excerpt: str
    content: str
    author_id: int
    category_id: int
    status: str = "draft"
    created_at: int = 0
    id: Optional[int] = None


@dataclass
class ScanRun:
    """Bookkeeping for one ingestion run."""
    run_at: int
    candidates: int = 0
    extracted: int = 0
    scored: int = 0
    created: int = 0
    id: Optional[int] = None
