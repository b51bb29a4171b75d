"""
==============================================================================
Database Connection Management Module
==============================================================================

Database connection management using SQLAlchemy.

This module implements:
- DatabaseManager: owns one engine and session factory
- Session factory with proper lifecycle management
- Connection pooling configuration

Lifecycle:
---------
The application constructs a DatabaseManager at startup, stores it on
``app.state`` and disposes it at shutdown. Nothing in the package keeps a
module-level engine, so tests and workers can run side by side against
different databases.

    ┌─────────────────┐
    │   Application   │ (owns lifecycle)
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │ DatabaseManager │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │     Engine      │ (Connection pool)
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Session      │ (Request-scoped)
    └─────────────────┘

SQLite Note:
-----------
SQLite is used for development and tests. 'check_same_thread' is disabled
so the threadpool can share connections, and a busy timeout makes competing
writers wait for the lock, never longer than the request deadline. In-memory
URLs use StaticPool so every session sees the same database.

PostgreSQL connections carry statement_timeout and lock_timeout equal to the
request deadline, so a slow statement is cancelled by the server rather than
left running after the client has been answered.

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from picklist.config import Settings, get_settings


# Module logger
logger = logging.getLogger(__name__)

# SQLAlchemy declarative base for all models
Base = declarative_base()


class DatabaseManager:
    """
    Database connection manager.

    The engine is created lazily on first access.

    Attributes:
        _database_url: Connection string this manager is bound to
        _engine: SQLAlchemy engine instance (lazy loaded)
        _session_factory: Session factory for creating sessions

    Example:
        >>> db_manager = DatabaseManager("sqlite://")
        >>> db_manager.create_tables()
        >>> with db_manager.session_scope() as session:
        ...     session.query(WorkItem).count()
        >>> db_manager.dispose()
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        settings: Optional[Settings] = None
    ) -> None:
        """
        Initialize the database manager.

        Args:
            database_url: Override for settings.database_url
            settings: Settings instance (cached settings if None)
        """
        self._settings = settings or get_settings()
        self._database_url = database_url or self._settings.database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

        logger.debug(f"DatabaseManager initialized for {self._database_url}")

    # =========================================================================
    # ENGINE MANAGEMENT
    # =========================================================================

    @property
    def database_url(self) -> str:
        """Connection string this manager is bound to."""
        return self._database_url

    @property
    def is_sqlite(self) -> bool:
        """Check whether the bound database is SQLite."""
        return self._database_url.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        """
        Get the SQLAlchemy engine (lazy initialization).

        Returns:
            SQLAlchemy Engine instance
        """
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        """
        Create the SQLAlchemy engine for the bound URL.

        - SQLite: check_same_thread off, busy timeout, StaticPool in memory
        - PostgreSQL/MySQL: pooled connections with pre-ping

        Returns:
            Configured SQLAlchemy Engine
        """
        database_url = self._database_url

        if self.is_sqlite:
            # A lock wait never outlasts the request deadline
            busy_timeout = min(
                self._settings.sqlite_busy_timeout_seconds,
                self._settings.request_timeout_seconds,
            )
            connect_args = {
                "check_same_thread": False,
                "timeout": busy_timeout,
            }
            engine_kwargs = {}
            if self._is_memory_url(database_url):
                engine_kwargs["poolclass"] = StaticPool

            engine = create_engine(
                database_url,
                connect_args=connect_args,
                echo=self._settings.debug,
                **engine_kwargs,
            )

            logger.info(f"Created SQLite engine: {database_url} (busy timeout {busy_timeout}s)")

        else:
            connect_args = {}
            if self._is_postgres_url(database_url):
                timeout_ms = int(self._settings.request_timeout_seconds * 1000)
                connect_args["options"] = (
                    f"-c statement_timeout={timeout_ms} "
                    f"-c lock_timeout={timeout_ms}"
                )

            engine = create_engine(
                database_url,
                connect_args=connect_args,
                pool_size=self._settings.pool_size,
                max_overflow=self._settings.max_overflow,
                pool_timeout=30,
                pool_recycle=1800,
                pool_pre_ping=True,
                echo=self._settings.debug,
            )

            logger.info(f"Created database engine with pooling: {engine.url!r}")

        return engine

    @staticmethod
    def _is_memory_url(database_url: str) -> bool:
        """True for 'sqlite://' and 'sqlite:///:memory:'."""
        return database_url in ("sqlite://", "sqlite:///:memory:")

    @staticmethod
    def _is_postgres_url(database_url: str) -> bool:
        """True for any PostgreSQL dialect/driver URL."""
        return database_url.startswith(("postgresql", "postgres"))

    # =========================================================================
    # SESSION MANAGEMENT
    # =========================================================================

    @property
    def session_factory(self) -> sessionmaker:
        """
        Get the session factory (lazy initialization).

        Returns:
            SQLAlchemy sessionmaker instance
        """
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def get_session(self) -> Session:
        """
        Get a new database session.

        The caller is responsible for closing the session.
        """
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Commits on success, rolls back on exception, always closes.

        Example:
            >>> with db_manager.session_scope() as session:
            ...     session.add(PickerPin(pin=1234, name="John"))
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # =========================================================================
    # TABLE MANAGEMENT
    # =========================================================================

    def create_tables(self) -> None:
        """
        Create all tables defined in the models.

        Only creates tables that don't already exist; in production the
        inventory system owns the schema and this is a no-op.
        """
        # Models must be imported so their tables are registered on Base
        from picklist.db import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created/verified")

    def drop_tables(self) -> None:
        """
        Drop all tables defined in the models.

        WARNING: This will delete all data! Use only for testing.
        """
        Base.metadata.drop_all(bind=self.engine)
        logger.warning("All database tables dropped")

    # =========================================================================
    # CONNECTION MANAGEMENT
    # =========================================================================

    def verify_connection(self) -> bool:
        """
        Verify database connection is working.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.debug("Database connection verified")
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False

    def dispose(self) -> None:
        """
        Dispose of the connection pool.

        Call this on application shutdown to clean up resources.
        """
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connection pool disposed")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"DatabaseManager(url={self._database_url!r})"
