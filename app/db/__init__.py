"""
Database module - SQLAlchemy engine, sessions and table definitions.
"""
from app.db.database import get_db_session, init_schema, test_db_connection

__all__ = [
    "get_db_session",
    "init_schema",
    "test_db_connection",
]
