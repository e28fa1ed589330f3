"""Database engine, session management and schema creation."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, List

from sqlalchemy import Engine, create_engine, inspect
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings
from .exceptions import DatabaseConnectionError, SchemaError
from .logging_config import get_logger

LOGGER = get_logger(__name__)

# Raised by the driver or pool while a connection is being opened
CONNECTIVITY_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, DisconnectionError)


def is_connectivity_error(exc: BaseException) -> bool:
    """
    Whether an error raised on an established connection means the link was lost.

    SQLAlchemy sets ``connection_invalidated`` when the dialect recognises a
    disconnect, so a query that fails on a dropped link is told apart from
    one that fails on a missing table.
    """
    if isinstance(exc, (InterfaceError, PoolTimeoutError, DisconnectionError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def build_engine(settings: Settings) -> Engine:
    """
    Create an engine for the configured database.

    Creating the engine does not open a connection.
    """
    url = settings.database_url
    if settings.is_sqlite():
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory database
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})

    # MySQL/PostgreSQL with connection pooling
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,  # Verify connection before usage
    )


class Database:
    """Persistence collaborator used by the bootstrap and request handlers."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @contextmanager
    def connect(self):
        """
        Open a connection, classifying failures to reach the server.

        Raises:
            DatabaseConnectionError: The database could not be reached.
        """
        try:
            connection = self.engine.connect()
        except CONNECTIVITY_ERRORS as exc:
            raise DatabaseConnectionError(f"Unable to connect to the database: {exc}") from exc
        try:
            yield connection
        finally:
            connection.close()

    def ensure_schema(self) -> List[str]:
        """
        Create any missing tables.

        Returns:
            Names of the tables that were created.

        Raises:
            DatabaseConnectionError: The database could not be reached.
            SchemaError: Tables could not be created on a live connection.
        """
        # Import models to ensure they are registered with Base
        from . import models  # noqa: F401

        with self.connect() as connection:
            try:
                existing = set(inspect(connection).get_table_names())
                Base.metadata.create_all(bind=connection)
                connection.commit()
            except SQLAlchemyError as exc:
                if is_connectivity_error(exc):
                    raise DatabaseConnectionError(f"Lost connection to the database: {exc}") from exc
                raise SchemaError(f"Schema creation failed: {exc}") from exc

        created = sorted(set(Base.metadata.tables) - existing)
        if created:
            LOGGER.info("Created tables: %s", ", ".join(created))
        return created

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        The connection is checked out up front. Commits on success and rolls
        back on any exception.

        Raises:
            DatabaseConnectionError: No connection could be checked out, or
                the link was lost while the session was in use.
        """
        session = self.session_factory()
        try:
            session.connection()
        except CONNECTIVITY_ERRORS as exc:
            session.close()
            raise DatabaseConnectionError(f"Unable to connect to the database: {exc}") from exc

        try:
            yield session
            session.commit()
        except Exception as exc:
            session.rollback()
            if isinstance(exc, SQLAlchemyError) and is_connectivity_error(exc):
                raise DatabaseConnectionError(f"Lost connection to the database: {exc}") from exc
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = ["Base", "CONNECTIVITY_ERRORS", "Database", "build_engine", "is_connectivity_error"]
