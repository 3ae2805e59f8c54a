"""
==============================================================================
Database Connection Management Module
==============================================================================

Database connection management using SQLAlchemy.

This module implements:
- DatabaseManager: Engine and session factory for the Snapshot Store
- Session factory with proper lifecycle management
- Connection pooling configuration

SQLAlchemy Architecture:
-----------------------
    ┌─────────────────┐
    │ DatabaseManager │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │     Engine      │ (Connection pool)
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │  SessionLocal   │ (Session factory)
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Session      │ (Operation-scoped)
    └─────────────────┘

SQLite Note:
-----------
Snapshot reads and writes run in worker threads so they do not block the
event loop. We disable 'check_same_thread' to allow that, and an
in-memory URL (``sqlite://``) uses a StaticPool so every thread sees the
same database.

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

from app.config import get_settings


# Module logger
logger = logging.getLogger(__name__)

# SQLAlchemy declarative base for all models
Base = declarative_base()


class DatabaseManager:
    """
    Centralized database connection manager.

    The engine is only created when first accessed, allowing for
    configuration changes before database connection.

    Attributes:
        _database_url: SQLAlchemy connection string
        _engine: SQLAlchemy engine instance (lazy loaded)
        _session_factory: Session factory for creating sessions

    Example:
        >>> db_manager = DatabaseManager("sqlite://")
        >>> db_manager.create_tables()
        >>> with db_manager.session_scope() as session:
        ...     session.get(CatalogSnapshot, "root")
    """

    def __init__(self, database_url: Optional[str] = None, echo: bool = False) -> None:
        """
        Initialize the database manager.

        Args:
            database_url: Connection string (uses settings if None)
            echo: Log emitted SQL
        """
        self._database_url = database_url or get_settings().database_url
        self._echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

        logger.debug("DatabaseManager initialized")

    # =========================================================================
    # ENGINE MANAGEMENT
    # =========================================================================

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine (lazy initialization)."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        """
        Create the SQLAlchemy engine with appropriate configuration.

        - SQLite: Disables check_same_thread; StaticPool for in-memory URLs
        - PostgreSQL/MySQL: Uses connection pooling

        Returns:
            Configured SQLAlchemy Engine
        """
        database_url = self._database_url

        if database_url.startswith("sqlite"):
            kwargs = {}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool

            engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                echo=self._echo,
                **kwargs,
            )

            logger.info(f"Created SQLite engine: {database_url}")

        else:
            engine = create_engine(
                database_url,
                pool_size=5,
                max_overflow=10,
                pool_timeout=30,
                pool_recycle=1800,
                pool_pre_ping=True,
                echo=self._echo,
            )

            logger.info(f"Created database engine with pooling: {database_url}")

        return engine

    # =========================================================================
    # SESSION MANAGEMENT
    # =========================================================================

    @property
    def session_factory(self) -> sessionmaker:
        """Get the session factory (lazy initialization)."""
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
        """Create all tables defined in the models (idempotent)."""
        # Register models on Base.metadata
        from app.db import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created/verified")

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
        """Dispose of the connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database connection pool disposed")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"DatabaseManager(url={self._database_url!r})"

