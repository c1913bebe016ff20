"""
SQLAlchemy ORM models for the chat store.
"""

import json
from typing import Optional

from sqlalchemy import Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class JSONEncodedDict(TypeDecorator):
    """Represents a dict as a JSON-encoded string."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Optional[dict], dialect) -> Optional[str]:
        if value is None or value == {}:
            return None
        return json.dumps(value)

    def process_result_value(self, value: Optional[str], dialect) -> dict:
        if value is None:
            return {}
        return json.loads(value)


class Base(DeclarativeBase):
    pass


class ChatDocumentORM(Base):
    """SQLAlchemy model for user_chats table: one row per user, all their chats."""

    __tablename__ = "user_chats"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    chats: Mapped[dict] = mapped_column(JSONEncodedDict, nullable=True)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)
