"""
Bookmark store operations.

Uses SQLAlchemy ORM for database access. The public API uses dataclass models
from models.py, with conversion to/from ORM models handled internally.

A bookmark is created as PENDING and flipped to PUBLISHED once a digest has
used it. A URL that is already stored, in either state, is never stored again.
"""

import time
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import exists, or_, select, update

from content_screening.constants import BOOKMARK_EXCERPT_WORDS, BOOKMARK_TITLE_WORDS
from content_screening.db_engine import get_engine, get_session
from content_screening.models import Bookmark, Category, DigestPost, ScanRun, ScoredArticle, Visibility
from content_screening.orm_models import (
    Base,
    BookmarkORM,
    CategoryORM,
    DigestPostORM,
    ScanHistoryORM,
    bookmark_orm_to_dataclass,
    category_orm_to_dataclass,
    digest_post_orm_to_dataclass,
    scan_run_orm_to_dataclass,
)
from util.constants import OTHER_CATEGORY
from util.logging_util import log_pipeline_step, setup_logger
from util.text import truncate_words

logger = setup_logger(__name__)


def init_db():
    """Initialize the database schema."""
    engine = get_engine()
    Base.metadata.create_all(engine)


# Categories


def get_category_id(name: str) -> Optional[int]:
    """Get the id of a category by name."""
    with get_session() as session:
        stmt = select(CategoryORM.id).where(CategoryORM.name == name)
        return session.execute(stmt).scalar_one_or_none()


def ensure_category(name: str) -> int:
    """Create the category if it does not exist yet. Returns its id."""
    name = (name or "").strip() or OTHER_CATEGORY

    existing = get_category_id(name)
    if existing is not None:
        return existing

    with get_session() as session:
        orm = CategoryORM(name=name, created_at=int(time.time()))
        session.add(orm)
        session.flush()
        logger.info(f"Created bookmark category '{name}'")
        return orm.id


def list_categories() -> List[Category]:
    """All categories, in creation order."""
    with get_session() as session:
        stmt = select(CategoryORM).order_by(CategoryORM.id.asc())
        return [category_orm_to_dataclass(orm) for orm in session.execute(stmt).scalars().all()]


# Bookmarks


def is_duplicate(url: str) -> bool:
    """True if any stored bookmark, published or not, contains this URL."""
    if not url:
        return False
    with get_session() as session:
        stmt = select(exists().where(BookmarkORM.url.contains(url, autoescape=True)))
        return bool(session.execute(stmt).scalar())


def insert_bookmark(article: ScoredArticle, category_id: int) -> int:
    """Store a scored article as a pending bookmark. Returns the bookmark id."""
    orm = BookmarkORM(
        url=article.url.strip(),
        title=truncate_words(article.title, BOOKMARK_TITLE_WORDS),
        excerpt=truncate_words(article.excerpt, BOOKMARK_EXCERPT_WORDS),
        category_id=category_id,
        score=article.score,
        confidence=article.confidence,
        visible=Visibility.PENDING.value,
        created_at=int(time.time()),
    )

    with get_session() as session:
        session.add(orm)
        session.flush()
        return orm.id


def create_bookmarks(articles: Iterable[ScoredArticle]) -> List[int]:
    """
    Store every scored article whose URL is not already known.

    Returns:
        Ids of the bookmarks created, in input order.
    """
    articles = list(articles)
    created = []
    for article in articles:
        if is_duplicate(article.url):
            logger.debug(f"Duplicate bookmark skipped: {article.url}")
            continue

        category_id = ensure_category(article.category)
        created.append(insert_bookmark(article, category_id))

    log_pipeline_step(logger, "store", len(created), len(articles))
    return created


def get_bookmark_by_id(bookmark_id: int) -> Optional[Bookmark]:
    with get_session() as session:
        orm = session.get(BookmarkORM, bookmark_id)
        if orm is None:
            return None
        return bookmark_orm_to_dataclass(orm)


def get_bookmarks_by_ids(bookmark_ids: Sequence[int]) -> List[Bookmark]:
    """Load bookmarks keeping the order of the ids given. Unknown ids are left out."""
    if not bookmark_ids:
        return []
    with get_session() as session:
        stmt = select(BookmarkORM).where(BookmarkORM.id.in_(list(bookmark_ids)))
        by_id = {orm.id: bookmark_orm_to_dataclass(orm) for orm in session.execute(stmt).scalars().all()}
    return [by_id[bookmark_id] for bookmark_id in bookmark_ids if bookmark_id in by_id]


def get_bookmarks(visibility: Optional[Visibility] = None) -> List[Bookmark]:
    """All bookmarks, optionally filtered by visibility, in insertion order."""
    with get_session() as session:
        stmt = select(BookmarkORM).order_by(BookmarkORM.id.asc())
        if visibility is not None:
            stmt = stmt.where(BookmarkORM.visible == visibility.value)
        return [bookmark_orm_to_dataclass(orm) for orm in session.execute(stmt).scalars().all()]


def get_pending_bookmarks_by_category(category_ids: Sequence[int]) -> Dict[int, List[Bookmark]]:
    """
    Pending bookmarks grouped by category id.

    Only categories that have at least one pending bookmark appear, in the
    order the ids were given.
    """
    if not category_ids:
        return {}

    with get_session() as session:
        stmt = (
            select(BookmarkORM)
            .where(
                BookmarkORM.visible == Visibility.PENDING.value,
                BookmarkORM.category_id.in_(list(category_ids)),
            )
            .order_by(BookmarkORM.id.asc())
        )
        orms = session.execute(stmt).scalars().all()

        grouped: Dict[int, List[Bookmark]] = {}
        for category_id in category_ids:
            bookmarks = [bookmark_orm_to_dataclass(orm) for orm in orms if orm.category_id == category_id]
            if bookmarks:
                grouped[category_id] = bookmarks
        return grouped


def mark_published(bookmark_ids: Sequence[int]) -> int:
    """Flip bookmarks to PUBLISHED. Returns the number of rows changed."""
    if not bookmark_ids:
        return 0
    with get_session() as session:
        stmt = (
            update(BookmarkORM)
            .where(BookmarkORM.id.in_(list(bookmark_ids)))
            .values(visible=Visibility.PUBLISHED.value)
        )
        return session.execute(stmt).rowcount


def search_published(patterns: Sequence[str], limit: int = 3, escape: Optional[str] = None) -> List[Bookmark]:
    """
    Published bookmarks whose title or excerpt matches any LIKE pattern.

    Results are in insertion order and capped at limit.
    """
    if not patterns:
        return []

    clauses = []
    for pattern in patterns:
        clauses.append(BookmarkORM.title.like(pattern, escape=escape))
        clauses.append(BookmarkORM.excerpt.like(pattern, escape=escape))

    with get_session() as session:
        stmt = (
            select(BookmarkORM)
            .where(BookmarkORM.visible == Visibility.PUBLISHED.value, or_(*clauses))
            .order_by(BookmarkORM.id.asc())
            .limit(limit)
        )
        return [bookmark_orm_to_dataclass(orm) for orm in session.execute(stmt).scalars().all()]


# Digest posts


def insert_digest_post(post: DigestPost) -> int:
    """Store a digest post. Returns the post id."""
    orm = DigestPostORM(
        title=post.title,
        excerpt=post.excerpt,
        content=post.content,
        status=post.status,
        author_id=post.author_id,
        category_id=post.category_id,
        created_at=post.created_at or int(time.time()),
    )

    with get_session() as session:
        session.add(orm)
        session.flush()
        return orm.id


def get_digest_post(post_id: int) -> Optional[DigestPost]:
    with get_session() as session:
        orm = session.get(DigestPostORM, post_id)
        if orm is None:
            return None
        return digest_post_orm_to_dataclass(orm)


# Scan history


def record_scan_run(candidates: int = 0, extracted: int = 0, scored: int = 0, created: int = 0) -> int:
    """Record the outcome of an ingestion run. Returns the row id."""
    orm = ScanHistoryORM(
        run_at=int(time.time()),
        candidates=candidates,
        extracted=extracted,
        scored=scored,
        created=created,
    )
    with get_session() as session:
        session.add(orm)
        session.flush()
        return orm.id


def get_last_scan_time() -> Optional[int]:
    """Epoch of the most recent ingestion run, if any."""
    last_run = get_last_scan_run()
    if last_run is None:
        return None
    return last_run.run_at


def get_last_scan_run() -> Optional[ScanRun]:
    with get_session() as session:
        stmt = select(ScanHistoryORM).order_by(ScanHistoryORM.id.desc()).limit(1)
        orm = session.execute(stmt).scalar_one_or_none()
        if orm is None:
            return None
        return scan_run_orm_to_dataclass(orm)
