import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.core.errors import AppError, PersistenceError
from app.db.tables import metadata

logger = logging.getLogger(__name__)

settings = get_settings()


def create_db_engine(url: str, echo: bool = False):
    """
    Build the engine for a database URL.

    PostgreSQL gets a connection pool (5 ready, 10 overflow).
    SQLite is used for local runs and tests; an in-memory URL shares a single
    connection so every session sees the same database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=echo  # Log SQL queries in debug mode
    )


engine = create_db_engine(settings.database_url, echo=settings.debug)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Context manager for database sessions. One block is one transaction.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT * FROM courses"))

    Domain errors raised inside the block roll back and propagate unchanged;
    driver errors roll back and surface as PersistenceError.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except AppError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Database error, transaction rolled back")
        raise PersistenceError(str(e)) from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_schema(bind=None) -> None:
    """Create any missing tables and indexes. Safe to call on every startup."""
    metadata.create_all(bind=bind or engine)


def test_db_connection() -> bool:
    """
    Test if the database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except AppError as e:
        logger.warning("Database connection failed: %s", e)
        return False


def execute_raw_sql(sql: str, params: dict = None) -> list:
    """
    Execute raw SQL and return results as list of dicts.
    """
    with get_db_session() as db:
        result = db.execute(text(sql), params or {})
        return [dict(row) for row in result.mappings().fetchall()]
