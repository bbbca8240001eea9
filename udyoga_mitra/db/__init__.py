"""
Database module - SQLAlchemy engine, sessions and table definitions.
"""
from udyoga_mitra.db.database import get_db_session, execute_raw_sql, ping_database
from udyoga_mitra.db.schema import init_db, SKILL_CATALOG

__all__ = [
    "get_db_session",
    "execute_raw_sql",
    "ping_database",
    "init_db",
    "SKILL_CATALOG"
]
