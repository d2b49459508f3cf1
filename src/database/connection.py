"""Database connection and session management."""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    """Build the PostgreSQL database URL from environment variables.

    DATABASE_URL wins when set; otherwise the URL is assembled from its parts.

    :returns: The database connection URL.
    :raises KeyError: If required environment variables are not set.
    """
    explicit_url = os.environ.get("DATABASE_URL")
    if explicit_url:
        return explicit_url

    host = os.environ["DATABASE_HOST"]
    port = os.environ.get("DATABASE_PORT", "5432")
    password = os.environ["APP_DB_PASSWORD"]

    return f"postgresql://app:{password}@{host}:{port}/newsletter_digest"


def create_db_engine(url: str | None = None, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for the database.

    :param url: Connection URL. Defaults to get_database_url().
    :param echo: If True, log all SQL statements.
    :returns: A configured SQLAlchemy engine.
    """
    return create_engine(url or get_database_url(), echo=echo, pool_pre_ping=True)


class Database:
    """Owns the engine and session factory for one process.

    Constructed once at startup and handed to whatever needs sessions, then
    disposed on shutdown.
    """

    def __init__(self, engine: Engine) -> None:
        """Initialise the database handle.

        :param engine: The SQLAlchemy engine to bind sessions to.
        """
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_env(cls, *, echo: bool = False) -> "Database":
        """Create a database handle from environment configuration.

        :param echo: If True, log all SQL statements.
        :returns: A new Database.
        """
        return cls(create_db_engine(echo=echo))

    @property
    def engine(self) -> Engine:
        """The underlying engine."""
        return self._engine

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Create a new database session with automatic cleanup.

        Commits on successful completion, rolls back on exception.

        :yields: A database session.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()

        except Exception:
            session.rollback()
            raise

        finally:
            session.close()

    def ping(self) -> None:
        """Run a trivial query to verify connectivity.

        :raises sqlalchemy.exc.OperationalError: If the database is unreachable.
        """
        with self._engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def dispose(self) -> None:
        """Close all pooled connections."""
        self._engine.dispose()
        logger.info("Database engine disposed")
