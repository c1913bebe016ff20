"""
Database binding for the chat store.
"""

from util.database import EngineRegistry

DB_NAME = "socratic_chats.db"

DEFAULT_DATABASE_URL = f"sqlite:///{DB_NAME}"

_registry = EngineRegistry(DEFAULT_DATABASE_URL)

configure = _registry.configure
get_engine = _registry.get_engine
set_engine = _registry.set_engine
reset_engine = _registry.reset_engine
get_session = _registry.get_session
