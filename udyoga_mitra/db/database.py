from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from contextlib import contextmanager

from udyoga_mitra.core.config import get_settings
from udyoga_mitra.utils.logging import get_logger

settings = get_settings()
logger = get_logger(__name__)


def _build_engine():
    url = settings.sqlalchemy_url
    if url.startswith("sqlite"):
        # SQLite: one file, shared across the test client's worker threads
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False
        )

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    # pool_size=5: maintain 5 connections ready
    # max_overflow=10: allow 10 extra connections under load
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=settings.debug  # Log SQL queries in debug mode
    )


engine = _build_engine()

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.
    Commits on success, rolls back everything on any exception.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT * FROM jobs"))
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ping_database() -> bool:
    """
    Check that the database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.error("Database connection failed", error=str(e))
        return False


def execute_raw_sql(sql: str, params: dict = None) -> list:
    """
    Execute raw SQL and return results as list of dicts.
    """
    with get_db_session() as db:
        result = db.execute(text(sql), params or {})
        columns = result.keys()
        return [dict(zip(columns, row)) for row in result.fetchall()]


def rows_as_dicts(result) -> list:
    """Convert an executed result inside an open session to a list of dicts."""
    columns = list(result.keys())
    return [dict(zip(columns, row)) for row in result.fetchall()]
