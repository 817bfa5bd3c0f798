import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from clinic.core import config

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# Internal lazy globals
_engine = None
_SessionLocal = None
_database_url = None


def get_engine() -> Engine:
    """Return a cached SQLAlchemy engine, creating it from DATABASE_URL on
    first call. This allows tests to set DATABASE_URL before the engine is
    constructed."""
    global _engine
    global _SessionLocal
    global _database_url
    database_url = config.get_database_url()
    # If engine not created yet or DATABASE_URL changed, (re)create engine
    if _engine is None or _database_url != database_url:
        url = make_url(database_url)
        if config.is_testing() and not url.drivername.startswith("sqlite"):
            raise RuntimeError(
                f"TESTING is set but DATABASE_URL uses '{url.drivername}'; "
                "tests must run against SQLite"
            )

        if _engine is not None:
            _engine.dispose()
            _SessionLocal = None

        if url.drivername.startswith("postgres"):
            _engine = create_engine(
                database_url,
                pool_size=10,
                max_overflow=20,
                pool_pre_ping=True,  # Detects and refreshes stale connections
                pool_recycle=3600,
                connect_args={
                    "application_name": "clinic_scheduling",  # Visible in pg_stat_activity
                    "connect_timeout": 10,
                },
                echo=False,  # Controlled by logging config
            )
        elif url.drivername.startswith("sqlite") and url.database in (None, "", ":memory:"):
            # Single shared in-memory database across the process so DDL
            # persists across connections.
            _engine = create_engine(
                database_url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            _engine = create_engine(database_url, echo=False)

        logger.debug(
            "SQLAlchemy engine created",
            extra={
                "context": {
                    "dialect": _engine.dialect.name,
                    "database": url.database,
                }
            },
        )
        _database_url = database_url
    return _engine


def get_sessionmaker() -> sessionmaker:
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return _SessionLocal


def SessionLocal() -> Session:
    """Calling SessionLocal() returns a new Session instance bound to the
    current engine."""
    return get_sessionmaker()()


def get_db() -> Iterator[Session]:
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all tables in database using the lazy engine."""
    # Models must be imported so Base.metadata is populated
    from clinic.db import base  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Run a unit of work in one transaction.

    Commits when the block exits normally. Any exception rolls back every
    write made inside the block and is re-raised unchanged.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            "Transaction rolled back after storage failure",
            extra={"context": {"error": str(e), "error_type": type(e).__name__}},
        )
        raise
    except Exception:
        session.rollback()
        raise
