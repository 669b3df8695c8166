"""
Database configuration and connection management.

One engine per process, created at import time from settings and
disposed explicitly on shutdown. Sessions are handed out per request.
"""

import sqlite3
import time
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .logging_config import get_logger
from .models import Base

logger = get_logger(__name__)


def get_database_url() -> str:
    """
    Get database URL from settings.

    Returns:
        Database connection URL
    """
    db_url = settings.DATABASE_URL

    # Sanitize for logging
    if "@" in db_url:
        safe_url = db_url.split("://")[0] + "://...@" + db_url.split("@")[-1]
    else:
        safe_url = db_url

    logger.info("Using database", url=safe_url)
    return db_url


def get_engine_kwargs(db_url: str) -> dict:
    """
    Get database-specific engine arguments.

    SQLite manages its own pool, so queue pool sizing only applies
    to server databases.

    Args:
        db_url: Database connection URL

    Returns:
        Keyword arguments for create_engine
    """
    if db_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores foreign keys unless asked per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@event.listens_for(Engine, "before_cursor_execute")
def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Track query start time."""
    conn.info.setdefault("query_start_time", []).append(time.time())


@event.listens_for(Engine, "after_cursor_execute")
def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Log slow queries."""
    total_time_ms = (time.time() - conn.info["query_start_time"].pop()) * 1000

    if total_time_ms > settings.QUERY_LOG_THRESHOLD_MS:
        logger.warning(
            "Slow query detected",
            query_time_ms=round(total_time_ms, 2),
            statement=statement[:200],
        )


# Initialize database connection
db_url = get_database_url()
engine = create_engine(db_url, echo=False, **get_engine_kwargs(db_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """
    Initialize database tables.

    Creates all tables on application startup.
    Uses checkfirst=True to safely handle existing tables.
    """
    try:
        logger.info("Initializing database tables")
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database initialized", tables=sorted(Base.metadata.tables.keys()))
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise


def dispose_engine() -> None:
    """Close every pooled connection. Called once on shutdown."""
    logger.info("Disposing database engine")
    engine.dispose()


def get_db() -> Generator[Session, None, None]:
    """
    Get database session for dependency injection.

    Yields:
        SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping_db(db: Session) -> bool:
    """
    Check that the database answers a trivial query.

    Args:
        db: Database session

    Returns:
        True if the database is reachable, False otherwise
    """
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("Database ping failed", error=str(e))
        return False


def get_db_stats() -> dict:
    """
    Get database connection pool statistics.

    Returns:
        Dict with pool statistics
    """
    pool = engine.pool
    stats = {"pool_class": type(pool).__name__, "dialect": engine.dialect.name}

    # Only queue pools expose sizing counters
    if hasattr(pool, "checkedout"):
        stats.update(
            {
                "pool_size": pool.size(),
                "checked_out": pool.checkedout(),
                "overflow": pool.overflow(),
            }
        )
    return stats
