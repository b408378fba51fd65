"""
Database connection and session management.

Supports both SQLite (local development) and PostgreSQL (hosted deployment).
The engine and session factory are created by the app factory and kept on
app.state, so every request resolves its session from the running app.
"""
import logging
import os

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import Settings

logger = logging.getLogger("jobtracker.database")

Base = declarative_base()


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def create_app_engine(settings: Settings):
    """
    Create a SQLAlchemy engine appropriate for the database backend.

    SQLite: WAL mode, busy_timeout, foreign keys on, check_same_thread=False
    PostgreSQL: connection pooling with pre-ping
    """
    url = settings.database_url

    if _is_sqlite(url):
        # Make sure the directory of a file-backed database exists
        path = url.split("///", 1)[-1]
        directory = os.path.dirname(path)
        if directory and path != ":memory:":
            os.makedirs(directory, exist_ok=True)

        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        logger.info("Created SQLite engine with WAL mode")
    else:
        engine = create_engine(
            url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
            pool_recycle=settings.db_pool_recycle,
        )
        logger.info("Created PostgreSQL engine with connection pooling")

    return engine


def create_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine):
    """Create all tables from model metadata."""
    # Import all models so Base.metadata knows about them
    from . import models  # noqa: F401
    from .auth import models as auth_models  # noqa: F401

    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database tables ready")


def _is_transient_error(exc: Exception) -> bool:
    return isinstance(exc, (OperationalError, DBAPIError))


def get_db(request: Request):
    """FastAPI dependency that yields a database session bound to the running app."""
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception as exc:
        db.rollback()
        if _is_transient_error(exc):
            logger.warning("Rolled back session due to database error: %s", exc)
        raise
    finally:
        db.close()
