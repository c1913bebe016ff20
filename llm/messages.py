"""
Provider agnostic chat messages.

A conversation is an ordered list of {"role", "content"} dicts. The order is
the literal context sent to the model, and the same dicts are persisted as
part of a chat, so they are kept as plain JSON-friendly dicts.
"""

from enum import Enum
from typing import Dict, List


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


Message = Dict[str, str]


def make_message(role: Role, content: str) -> Message:
    return {"role": Role(role).value, "content": content}


def user_message(content: str) -> Message:
    return make_message(Role.USER, content)


def assistant_message(content: str) -> Message:
    return make_message(Role.ASSISTANT, content)


def is_valid_conversation(messages: List[Message]) -> bool:
    """Check every message has a known role and string content."""
    roles = {role.value for role in Role}
    for message in messages:
        if not isinstance(message, dict):
            return False
        if message.get("role") not in roles or not isinstance(message.get("content"), str):
            return False
    return True
