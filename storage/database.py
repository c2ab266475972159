"""
Storage - Database.

============================================================
RESPONSIBILITY
============================================================
Manages database connections and sessions.

- Opens an explicitly owned storage handle (no module globals)
- Provides session and transaction context managers
- Handles connection lifecycle
- Creates and drops the alert schema

============================================================
USAGE
============================================================
    db = open_database(DatabaseConfig(url="sqlite:///alerts.db"))
    db.create_all_tables()

    with db.transaction() as session:
        NameAlertRepository(session).create(chat_id, "ocer")

    db.close()

============================================================
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.exceptions import AlertingException, StorageError
from storage.models.base import Base


logger = logging.getLogger(__name__)


# =============================================================
# CONFIGURATION
# =============================================================


@dataclass
class DatabaseConfig:
    """Connection settings for the alert store."""

    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == "sqlite"

    @property
    def is_in_memory(self) -> bool:
        database = make_url(self.url).database
        return self.is_sqlite and database in (None, "", ":memory:")


# =============================================================
# STORAGE HANDLE
# =============================================================


class Database:
    """
    Storage handle shared by every alert component.

    Owns one engine and its session factory. Construct it with
    open_database() and release it with close().
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
        )
        self._closed = False

    @property
    def engine(self) -> Engine:
        """Get the underlying engine."""
        return self._engine

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _new_session(self) -> Session:
        if self._closed:
            raise StorageError("Database handle is closed")
        return self._session_factory()

    # =========================================================
    # SESSION MANAGEMENT
    # =========================================================

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Read-only session with automatic cleanup.

        Nothing is committed. Use transaction() for writes.
        """
        session = self._new_session()
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error, rolling back: {e}")
            session.rollback()
            raise StorageError(f"Query failed: {e}", cause=e) from e
        finally:
            session.close()

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """
        Explicit transaction boundary.

        Commits only if no exception occurs.
        Rolls back on ANY exception.

        Raises:
            StorageError: If the database rejects the transaction
        """
        session = self._new_session()
        try:
            yield session
            session.commit()
            logger.debug("Database transaction committed successfully")
        except SQLAlchemyError as e:
            logger.error(f"Database transaction failed, rolling back: {e}")
            session.rollback()
            raise StorageError(f"Transaction failed: {e}", cause=e) from e
        except AlertingException:
            session.rollback()
            raise
        except Exception as e:
            logger.error(f"Transaction failed with unexpected error: {e}")
            session.rollback()
            raise
        finally:
            session.close()

    # =========================================================
    # SCHEMA
    # =========================================================

    def verify_connection(self) -> bool:
        """
        Verify database connection is working.

        Raises:
            StorageError: If connection fails
        """
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            logger.info("Database connection verified successfully")
            return True
        except OperationalError as e:
            logger.error(f"Database connection failed: {e}")
            raise StorageError(f"Cannot connect to database: {e}", cause=e) from e

    def create_all_tables(self) -> None:
        """Create alert tables that do not exist yet."""
        import storage.models.alerts  # noqa: F401

        try:
            Base.metadata.create_all(bind=self._engine)
            logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create database tables: {e}")
            raise StorageError(f"Table creation failed: {e}", cause=e) from e

    def drop_all_tables(self) -> None:
        """Drop every alert table. Destroys all alerts."""
        import storage.models.alerts  # noqa: F401

        try:
            Base.metadata.drop_all(bind=self._engine)
            logger.warning("Database tables dropped")
        except SQLAlchemyError as e:
            raise StorageError(f"Table drop failed: {e}", cause=e) from e

    def table_names(self) -> list[str]:
        """Names of the tables this schema defines."""
        import storage.models.alerts  # noqa: F401

        return sorted(Base.metadata.tables)

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._closed:
            return
        self._engine.dispose()
        self._closed = True
        logger.info("Database handle closed")


# =============================================================
# LIFECYCLE
# =============================================================


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def open_database(config: DatabaseConfig) -> Database:
    """
    Open a storage handle.

    Args:
        config: Connection settings

    Returns:
        Database handle; caller owns it and must close() it
    """
    engine_kwargs = {"echo": config.echo}

    if config.is_in_memory:
        # One shared connection, otherwise each session sees an empty database
        engine_kwargs.update(
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    elif config.is_sqlite:
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update(
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=True,
        )

    logger.info(f"Opening database: {config.url.split('@')[-1]}")
    engine = create_engine(config.url, **engine_kwargs)

    if config.is_sqlite:
        _enable_sqlite_foreign_keys(engine)

    return Database(engine)


def close_database(database: Database) -> None:
    """Release a storage handle."""
    database.close()
