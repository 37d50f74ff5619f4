"""
Database engine, sessions and transaction handling for the pet store.

PostgreSQL is the production backend: purchases rely on SELECT ... FOR UPDATE
row locks, and every statement is bounded by statement_timeout/lock_timeout.
SQLite (development and tests) has no row locks, so every transaction is
opened with BEGIN IMMEDIATE, which serializes writers instead.
"""

import functools
import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from petstore.errors import StorageError
from petstore.settings import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# lock_not_available, query_canceled, serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = frozenset({"55P03", "57014", "40001", "40P01"})


def build_engine(database_url: str, statement_timeout_ms: int = 5000) -> Engine:
    """
    Create an engine for the given URL.

    Args:
        database_url: SQLAlchemy database URL
        statement_timeout_ms: Upper bound for a single statement or lock wait

    Returns:
        Configured SQLAlchemy engine
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            connect_args={
                "timeout": statement_timeout_ms / 1000,
                "check_same_thread": False,
            },
        )
        _serialize_sqlite_transactions(engine)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        echo=False,
        connect_args={
            "options": (
                f"-c statement_timeout={statement_timeout_ms} "
                f"-c lock_timeout={statement_timeout_ms}"
            ),
        },
    )


def _serialize_sqlite_transactions(engine: Engine) -> None:
    """Take the database write lock at BEGIN so SQLite transactions never interleave."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself instead of pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@functools.lru_cache()
def get_engine() -> Engine:
    """
    Get SQLAlchemy engine (cached).

    This function lazily initializes the engine to avoid import-time side effects.
    The engine is created using DATABASE_URL from settings.
    """
    settings = get_settings()
    return build_engine(settings.DATABASE_URL, settings.STATEMENT_TIMEOUT_MS)


@functools.lru_cache()
def get_sessionmaker() -> sessionmaker:
    """
    Get SQLAlchemy sessionmaker (cached).

    This function lazily initializes the sessionmaker to avoid import-time side effects.
    """
    engine = get_engine()
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Dependency generator for FastAPI to get database session.

    Yields a database session and ensures it's closed after use.
    """
    SessionLocal = get_sessionmaker()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    # Register mappers on Base.metadata
    from petstore.persistence import models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def is_retryable(error: SQLAlchemyError) -> bool:
    """Whether a failed transaction may succeed if the caller tries again."""
    if isinstance(error, OperationalError):
        return True
    if isinstance(error, DBAPIError):
        return getattr(error.orig, "pgcode", None) in RETRYABLE_SQLSTATES
    return False


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a unit of work in one transaction.

    Commits when the block exits normally. Any exception rolls the whole
    transaction back; SQLAlchemy errors are re-raised as StorageError.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        retryable = is_retryable(e)
        logger.error(
            f"Transaction rolled back: {e.__class__.__name__}",
            extra={"retryable": retryable},
        )
        raise StorageError(f"database transaction failed: {e}", retryable=retryable) from e
    except BaseException:
        db.rollback()
        raise
