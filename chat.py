#!/usr/bin/env python3
"""
Entrypoint for taking one Socratic chat turn from the command line.

Usage:
    # Start a new chat for user 1
    uv run python chat.py --user-id 1 --new "Online privacy"

    # Continue an existing chat
    uv run python chat.py --user-id 1 --chat-id <chat_id> "I think it matters because..."

    # Soft delete a chat
    uv run python chat.py --user-id 1 --delete <chat_id>
"""
import argparse
import sys

from content_screening import db_engine as bookmarks_db
from content_screening.bookmarks import init_db as init_bookmarks_db
from llm.gateway import LLMGateway
from socratic_chat import db_engine as chats_db
from socratic_chat.chat_engine import ChatEngine, chat_id_to_load, delete_chat
from socratic_chat.chat_store import init_db
from util.config import ConfigurationError, load_config
from util.constants import DEFAULT_CONFIG_PATH


def main():
    parser = argparse.ArgumentParser(description="Take one turn in a Socratic chat")
    parser.add_argument("message", nargs="*", help="What the participant says")
    parser.add_argument("--user-id", type=int, required=True, help="Participant user id")
    parser.add_argument("--chat-id", help="Chat to continue (default: the most recent one)")
    parser.add_argument("--new", action="store_true", help="Start a new chat")
    parser.add_argument("--delete", metavar="CHAT_ID", help="Soft delete a chat and exit")
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to the YAML config (default: {DEFAULT_CONFIG_PATH})"
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    chats_db.configure(config.storage.chats_url)
    bookmarks_db.configure(config.storage.bookmarks_url)
    init_db()
    init_bookmarks_db()

    if args.delete:
        result = delete_chat(args.user_id, args.delete)
        print(result.message)
        sys.exit(0 if result.success else 1)

    message = " ".join(args.message)
    if not message:
        parser.print_help()
        sys.exit(1)

    try:
        engine = ChatEngine(config.chat, LLMGateway(config.llm))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    chat_id = chat_id_to_load(args.user_id, args.chat_id, new_chat_requested=args.new)
    is_new_chat = args.new or args.chat_id is None
    result = engine.handle_turn(args.user_id, chat_id, is_new_chat, message)

    if not result.success:
        print(result.message, file=sys.stderr)
        sys.exit(1)

    print(f"[chat {chat_id}]")
    if result.reasoning:
        print(f"(reasoning) {result.reasoning}\n")
    print(result.message)
    if result.links and config.chat.links_preamble:
        print(f"\n{config.chat.links_preamble}")
    for link in result.links:
        print(f"  - {link.title}: {link.url}")


if __name__ == "__main__":
    main()
