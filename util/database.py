"""
Engine and session handling shared by the bookmark store and the chat store.

Each store owns one EngineRegistry bound to its own database URL and exposes
the registry's methods at module level (see content_screening/db_engine.py).
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from util.logging_util import setup_logger

logger = setup_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class EngineRegistry:
    """Lazily created engine plus a session factory for one database."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def configure(self, database_url: str) -> None:
        """Point at a different database. Takes effect on the next get_engine()."""
        self.reset_engine()
        self.database_url = database_url

    def get_engine(self) -> Engine:
        """Get the SQLAlchemy engine, creating it if necessary."""
        if self._engine is None:
            engine = create_engine(self.database_url)
            if engine.dialect.name == "sqlite":
                event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            logger.debug(f"Created engine for {engine.url!r}")
            self.set_engine(engine)
        return self._engine

    def set_engine(self, engine: Engine) -> None:
        """Use an existing engine (tests pass an in-memory one)."""
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine)

    def reset_engine(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Session that commits on a clean exit and rolls back on any exception.

        Usage:
            with get_session() as session:
                session.add(obj)
        """
        if self._session_factory is None:
            self.get_engine()

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
