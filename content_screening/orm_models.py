"""
SQLAlchemy ORM models for the bookmark store.

These models are internal to the database layer. The public interface
uses the dataclass models from models.py.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from content_screening.models import Bookmark, Category, DigestPost, ScanRun, Visibility


class Base(DeclarativeBase):
    pass


class CategoryORM(Base):
    """SQLAlchemy model for link_categories table."""

    __tablename__ = "link_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)


class BookmarkORM(Base):
    """SQLAlchemy model for bookmarks table."""

    __tablename__ = "bookmarks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_id: Mapped[int] = mapped_column(Integer, ForeignKey("link_categories.id"), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    confidence: Mapped[int] = mapped_column(Integer, default=0)
    visible: Mapped[str] = mapped_column(String(1), nullable=False, default=Visibility.PENDING.value)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)

    category: Mapped[CategoryORM] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_bookmarks_visible", "visible"),
        Index("idx_bookmarks_category_id", "category_id"),
    )


class DigestPostORM(Base):
    """SQLAlchemy model for digest_posts table."""

    __tablename__ = "digest_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft")
    author_id: Mapped[int] = mapped_column(Integer, nullable=False)
    category_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)


class ScanHistoryORM(Base):
    """SQLAlchemy model for scan_history table."""

    __tablename__ = "scan_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_at: Mapped[int] = mapped_column(Integer, nullable=False)
    candidates: Mapped[int] = mapped_column(Integer, default=0)
    extracted: Mapped[int] = mapped_column(Integer, default=0)
    scored: Mapped[int] = mapped_column(Integer, default=0)
    created: Mapped[int] = mapped_column(Integer, default=0)


# Conversion functions between ORM models and dataclasses


def category_orm_to_dataclass(orm: CategoryORM) -> Category:
    """Convert a CategoryORM instance to a Category dataclass."""
    return Category(id=orm.id, name=orm.name)


def bookmark_orm_to_dataclass(orm: BookmarkORM) -> Bookmark:
    """Convert a BookmarkORM instance to a Bookmark dataclass."""
    return Bookmark(
        id=orm.id,
        url=orm.url,
        title=orm.title,
        excerpt=orm.excerpt or "",
        category=orm.category.name if orm.category is not None else "",
        score=orm.score,
        confidence=orm.confidence or 0,
        visible=Visibility(orm.visible),
        created_at=orm.created_at,
    )


def digest_post_orm_to_dataclass(orm: DigestPostORM) -> DigestPost:
    """Convert a DigestPostORM instance to a DigestPost dataclass."""
    return DigestPost(
        id=orm.id,
        title=orm.title,
        excerpt=orm.excerpt or "",
        content=orm.content,
        status=orm.status,
        author_id=orm.author_id,
        category_id=orm.category_id,
        created_at=orm.created_at,
    )


def scan_run_orm_to_dataclass(orm: ScanHistoryORM) -> ScanRun:
    """Convert a ScanHistoryORM instance to a ScanRun dataclass."""
    return ScanRun(
        id=orm.id,
        run_at=orm.run_at,
        candidates=orm.candidates or 0,
        extracted=orm.extracted or 0,
        scored=orm.scored or 0,
        created=orm.created or 0,
    )
