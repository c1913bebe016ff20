"""
Socratic chat turns and chat history.

A turn appends the user's text to the chat, asks the LLM for the next reply,
attaches suggested links and saves the chat. If the LLM fails, or the save
fails, the stored chat is left exactly as it was before the turn.
"""

import hashlib
import random
import re
import time
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from content_screening.bookmarks import get_bookmarks_by_ids
from llm.gateway import LLMGateway, is_error_result
from llm.messages import assistant_message, user_message
from socratic_chat.chat_store import ChatMap, load_chats, save_chats
from socratic_chat.link_suggestions import LinkSuggester
from socratic_chat.models import Chat, ChatTurnResult, SuggestedLink, current_timestamp
from util.config import ChatConfig
from util.logging_util import setup_logger
from util.text import truncate_words

logger = setup_logger(__name__)

CHAT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
TAG_PATTERN = re.compile(r"<(?:/?[a-zA-Z][^<>]*|!--.*?--)>", re.DOTALL)
SUMMARY_WORDS = 5

TURN_ERRORS = {
    "E01": "E01. Reply failed validation or is empty. Please try again.",
    "E02": "E02. Chat ID is empty. Please reload and try again.",
    "E03": "E03. Log in required. Please reload, sign in, and try again.",
    "E05": "E05. Response is empty after processing. Please reload and try again.",
    "E06": "E06. Failed to save this conversation turn. Please reload and try again.",
}

DELETE_ERRORS = {
    "E01": "E01. chatID failed validation or is empty. Please reload and try deleting again.",
    "E03": "E03. Log in required. Please reload, sign in, and try deleting again.",
    "E04": "E04. chatID not found for your user account. Cannot delete. Please try again.",
    "E05": "E05. chatID already deleted.",
    "E06": "E06. Failed to delete this conversation. Please reload and try again.",
}


def generate_chat_id(user_id: int) -> str:
    """A new opaque chat id derived from the time, the user and a random number."""
    seed = f"{time.time()}{user_id}{random.randint(0, 2 ** 31 - 1)}"
    return hashlib.md5(seed.encode()).hexdigest()


def sanitize_chat_id(chat_id) -> Optional[str]:
    """The chat id if it is purely alphanumeric, otherwise None."""
    if not isinstance(chat_id, str) or not CHAT_ID_PATTERN.match(chat_id):
        return None
    return chat_id


def sanitize_text(text) -> str:
    """Strip markup and surrounding whitespace from user or model text."""
    if not isinstance(text, str):
        return ""
    return TAG_PATTERN.sub("", text).strip()


def limit_text(text: str, limit: int) -> str:
    return truncate_words(text, limit, "...")


def new_chat(chat_id: str, config: ChatConfig) -> Chat:
    """A chat holding only the starting prompt and the canned first reply."""
    return Chat(
        chat_id=chat_id,
        messages=[
            user_message(config.starting_prompt),
            assistant_message(config.initial_reply),
        ],
    )


class ChatEngine:
    """Runs chat turns for authenticated users.

    Args:
        config: Chat settings (starting prompt, link and reasoning display).
        gateway: LLM gateway used for replies.
        link_suggester: Link lookup. Defaults to one honouring config.hide_links_in_reply.
    """

    def __init__(self, config: ChatConfig, gateway: LLMGateway, link_suggester: Optional[LinkSuggester] = None):
        self.config = config
        self.gateway = gateway
        self.link_suggester = link_suggester or LinkSuggester(hide_links=config.hide_links_in_reply)

    def handle_turn(self, user_id: Optional[int], chat_id: str, is_new_chat: bool, user_text: str) -> ChatTurnResult:
        """
        Process one user message.

        Args:
            user_id: Authenticated user id; falsy means not logged in.
            chat_id: The chat the message belongs to.
            is_new_chat: Whether the client started a new chat.
            user_text: What the user typed.

        Returns:
            A ChatTurnResult with the reply, suggested links and (if enabled)
            the model's reasoning, or an error code when nothing was saved.
        """
        reply = sanitize_text(user_text)
        if not reply:
            return ChatTurnResult.error("E01", TURN_ERRORS["E01"])

        chat_id = sanitize_chat_id((chat_id or "").strip())
        if not chat_id:
            return ChatTurnResult.error("E02", TURN_ERRORS["E02"])

        if not user_id:
            return ChatTurnResult.error("E03", TURN_ERRORS["E03"])

        chats = load_chats(user_id)
        if chat_id not in chats:
            if not is_new_chat and chats:
                logger.warning(f"Chat {chat_id} not found for user {user_id}, starting it fresh")
            chats[chat_id] = new_chat(chat_id, self.config)
        chat = chats[chat_id]

        prior_message_count = len(chat.messages)
        messages = chat.messages + [user_message(reply)]

        result = self.gateway.send(messages, json_mode=False)
        if is_error_result(result) or not isinstance(result, dict):
            logger.error(f"LLM error for chat {chat_id}: {result}")
            return ChatTurnResult.error("E04", str(result))

        response = sanitize_text(result.get("response") or "")
        reasoning = sanitize_text(result.get("reasoning") or "") or None
        if not response:
            return ChatTurnResult.error("E05", TURN_ERRORS["E05"])

        try:
            links = self.link_suggester.suggest(response)
        except SQLAlchemyError as e:
            logger.error(f"Link lookup failed for chat {chat_id}: {e}")
            links = []

        previous_summary = chat.summary
        if prior_message_count == 2:
            chat.summary = limit_text(reply, SUMMARY_WORDS)
        chat.messages = messages + [assistant_message(response)]
        chat.links_shown.append([link.id for link in links])

        try:
            save_chats(user_id, chats)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save chat {chat_id} for user {user_id}: {e}")
            chat.messages = chat.messages[:prior_message_count]
            chat.links_shown.pop()
            chat.summary = previous_summary
            return ChatTurnResult.error("E06", TURN_ERRORS["E06"])

        return ChatTurnResult(
            success=True,
            message=response,
            links=links,
            reasoning=reasoning if self.config.show_reasoning and reasoning else None,
        )


def delete_chat(user_id: Optional[int], chat_id) -> ChatTurnResult:
    """Soft delete a chat by stamping it with the deletion time."""
    chat_id = sanitize_chat_id(chat_id)
    if not chat_id:
        return ChatTurnResult.error("E01", DELETE_ERRORS["E01"])

    if not user_id:
        return ChatTurnResult.error("E03", DELETE_ERRORS["E03"])

    chats = load_chats(user_id)
    if chat_id not in chats:
        return ChatTurnResult.error("E04", DELETE_ERRORS["E04"])

    chat = chats[chat_id]
    if chat.is_deleted:
        return ChatTurnResult.error("E05", DELETE_ERRORS["E05"])

    chat.deleted = current_timestamp()
    try:
        save_chats(user_id, chats)
    except SQLAlchemyError as e:
        logger.error(f"Failed to delete chat {chat_id} for user {user_id}: {e}")
        chat.deleted = None
        return ChatTurnResult.error("E06", DELETE_ERRORS["E06"])

    logger.info(f"Deleted chat {chat_id} for user {user_id}")
    return ChatTurnResult(success=True, message="Chat deleted.")


def get_chats_for_user(user_id: int, is_admin: bool = False) -> ChatMap:
    """A user's chats. Deleted ones are only included for admins."""
    chats = load_chats(user_id)
    if is_admin:
        return chats
    return {chat_id: chat for chat_id, chat in chats.items() if not chat.is_deleted}


def can_user_view_chat(user_id: int, chat_id, is_admin: bool = False) -> bool:
    if is_admin:
        return True

    chat_id = sanitize_chat_id(chat_id)
    if not chat_id:
        return False

    chat = load_chats(user_id).get(chat_id)
    return chat is not None and not chat.is_deleted


def chat_id_to_load(user_id: int, requested_chat_id=None, new_chat_requested: bool = False,
                    is_admin: bool = False) -> str:
    """
    Which chat a user should see.

    A fresh id when the user has no chats or asked for a new one, otherwise
    the requested chat if it is a valid id, otherwise their most recent chat.
    """
    chats = get_chats_for_user(user_id, is_admin)
    if not chats or new_chat_requested:
        return generate_chat_id(user_id)

    requested = sanitize_chat_id(requested_chat_id)
    if requested:
        return requested

    return list(chats)[-1]


def links_shown_for_prompt(user_id: int, chat_id, prompt_index: int) -> List[SuggestedLink]:
    """
    The links shown with the message at prompt_index.

    Links accompany every assistant reply after the canned first one, so
    messages 3, 5, 7 ... map onto links_shown[0], [1], [2] ...
    """
    chat_id = sanitize_chat_id(chat_id)
    if not chat_id:
        return []

    if prompt_index < 3 or prompt_index % 2 == 0:
        return []

    chat = load_chats(user_id).get(chat_id)
    if chat is None:
        return []

    links_index = (prompt_index + 1) // 2 - 2
    if links_index >= len(chat.links_shown) or not chat.links_shown[links_index]:
        return []

    bookmarks = get_bookmarks_by_ids(chat.links_shown[links_index])
    return [SuggestedLink(id=b.id, url=b.url, title=b.title) for b in bookmarks]
