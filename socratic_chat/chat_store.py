"""
Persistence of each user's chat document.

The whole chat_id -> chat mapping for a user is read and written in one go,
so a save either stores every change of a turn or none of them. Concurrent
turns for the same user are last-write-wins.
"""

import time
from typing import Dict

from socratic_chat.db_engine import get_engine, get_session
from socratic_chat.models import Chat
from socratic_chat.orm_models import Base, ChatDocumentORM

ChatMap = Dict[str, Chat]


def init_db():
    """Initialize the database schema."""
    engine = get_engine()
    Base.metadata.create_all(engine)


def load_chats(user_id: int) -> ChatMap:
    """All chats for a user, oldest first. Empty if the user has none."""
    with get_session() as session:
        orm = session.get(ChatDocumentORM, user_id)
        if orm is None or not orm.chats:
            return {}
        return {chat_id: Chat.from_dict(chat_id, data) for chat_id, data in orm.chats.items()}


def save_chats(user_id: int, chats: ChatMap):
    """Replace a user's chat document.

    Raises:
        SQLAlchemyError: If the write fails. Nothing is stored in that case.
    """
    document = {chat_id: chat.to_dict() for chat_id, chat in chats.items()}

    with get_session() as session:
        orm = session.get(ChatDocumentORM, user_id)
        if orm is None:
            session.add(ChatDocumentORM(user_id=user_id, chats=document, updated_at=int(time.time())))
        else:
            orm.chats = document
            orm.updated_at = int(time.time())
