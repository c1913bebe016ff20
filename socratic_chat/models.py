"""
Data models for the Socratic chat.

A user's chats are stored as one document mapping chat_id -> chat. The
dict shape produced by Chat.to_dict() is what other code reads to render
history, so its keys are kept stable.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from llm.messages import Message

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def current_timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


@dataclass
class Chat:
    """One conversation.

    messages[0] is the starting prompt and is never shown to the user.
    links_shown[i] holds the bookmark ids shown with the (i + 2)th assistant
    reply. deleted is None for live chats and the deletion time otherwise.
    """
    chat_id: str
    messages: List[Message] = field(default_factory=list)
    summary: str = ""
    start_time: str = field(default_factory=current_timestamp)
    links_shown: List[List[int]] = field(default_factory=list)
    deleted: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted is not None

    def to_dict(self) -> dict:
        return {
            "messages": [dict(message) for message in self.messages],
            "summary": self.summary,
            "start_time": self.start_time,
            "links_shown": [list(ids) for ids in self.links_shown],
            "deleted": self.deleted if self.deleted is not None else False,
        }

    @classmethod
    def from_dict(cls, chat_id: str, data: dict) -> "Chat":
        deleted = data.get("deleted", False)
        return cls(
            chat_id=chat_id,
            messages=[dict(message) for message in data.get("messages", [])],
            summary=data.get("summary", "") or "",
            start_time=data.get("start_time") or data.get("start_date_time") or "",
            links_shown=[list(ids or []) for ids in data.get("links_shown", [])],
            deleted=str(deleted) if deleted else None,
        )


@dataclass
class SuggestedLink:
    """A bookmark offered alongside an assistant reply."""
    id: int
    url: str
    title: str

    def to_dict(self) -> dict:
        return {"id": self.id, "url": self.url, "title": self.title}


@dataclass
class ChatTurnResult:
    """Outcome of a chat action.

    On failure, error_code is set (E01..E06) and message holds the user
    facing error text; nothing was persisted.
    """
    success: bool
    message: str
    links: List[SuggestedLink] = field(default_factory=list)
    reasoning: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def error(cls, error_code: str, message: str) -> "ChatTurnResult":
        return cls(success=False, message=message, error_code=error_code)
