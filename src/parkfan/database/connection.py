"""
Park Fan Sync - Database Connection Management
Provides the SQLAlchemy engine with connection pooling and ORM session management.

The engine is built from DB_URL when set, otherwise from the DB_* settings
(MySQL via pymysql by default). SessionLocal from models.base is bound to the
engine the first time a session is requested.
"""

from contextlib import contextmanager
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import QueuePool
from sqlalchemy.engine import Engine, URL, make_url
from sqlalchemy.orm import Session
from typing import Generator

from ..models.base import Base, SessionLocal
from ..utils.config import (
    DB_URL, DB_DRIVER, DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD,
    DB_POOL_SIZE, DB_POOL_MAX_OVERFLOW, DB_POOL_RECYCLE, DB_POOL_PRE_PING,
    config
)
from ..utils.logger import logger, log_database_error


# Error text fragments emitted by the supported drivers on unique violations
_DUPLICATE_KEY_MARKERS = (
    'duplicate key',           # PostgreSQL
    'duplicate entry',         # MySQL
    'unique constraint failed',  # SQLite
)


class DatabaseConnection:
    """
    Manages database connections with connection pooling.

    Features:
    - Connection pooling (10 connections + 20 overflow)
    - Automatic connection recycling (every hour)
    - Health checks before connection use (pool_pre_ping)
    """

    def __init__(self):
        self._engine: Engine = None

    def _connection_url(self):
        if DB_URL:
            return make_url(DB_URL)

        query = {}
        if DB_DRIVER.startswith('mysql'):
            query = {
                "charset": "utf8mb4",
                "init_command": "SET time_zone='+00:00'",  # Force UTC for all connections
            }

        # URL.create() keeps the password out of logs
        return URL.create(
            drivername=DB_DRIVER,
            username=DB_USER,
            password=DB_PASSWORD,
            host=DB_HOST,
            port=DB_PORT,
            database=DB_NAME,
            query=query,
        )

    def get_engine(self) -> Engine:
        """
        Get or create the SQLAlchemy engine with connection pooling.

        Returns:
            SQLAlchemy Engine instance

        Raises:
            DatabaseConnectionError: If engine creation fails
        """
        if self._engine is None:
            try:
                connection_url = self._connection_url()

                engine_kwargs = {
                    "pool_pre_ping": DB_POOL_PRE_PING,
                    "echo": False,
                    "hide_parameters": True,
                }
                if connection_url.get_backend_name() != 'sqlite':
                    engine_kwargs.update(
                        poolclass=QueuePool,
                        pool_size=DB_POOL_SIZE,
                        max_overflow=DB_POOL_MAX_OVERFLOW,
                        pool_recycle=DB_POOL_RECYCLE,
                    )

                self._engine = create_engine(connection_url, **engine_kwargs)
                if connection_url.get_backend_name() == 'sqlite':
                    enable_sqlite_savepoints(self._engine)
                SessionLocal.configure(bind=self._engine)

                logger.info("Database connection pool initialized", extra={
                    "backend": connection_url.get_backend_name(),
                    "host": connection_url.host,
                    "database": connection_url.database,
                    "pool_size": DB_POOL_SIZE,
                    "environment": config.environment
                })

            except Exception as e:
                log_database_error(e, "Failed to create database engine")
                raise DatabaseConnectionError(f"Failed to create database engine: {e}") from e

        return self._engine

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.get_engine().connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            logger.info("Database connection test successful")
            return True
        except Exception as e:
            logger.error("Database connection test failed", extra={
                "error": str(e)
            })
            return False

    def close(self):
        """Close all connections in the pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection pool closed")


def enable_sqlite_savepoints(engine: Engine):
    """
    Let SQLAlchemy emit BEGIN on pysqlite connections.

    pysqlite defers BEGIN until the first DML statement, so a SAVEPOINT from
    Session.begin_nested() would otherwise open (and RELEASE would commit)
    the outer transaction.
    """
    @event.listens_for(engine, "connect")
    def _disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


class DatabaseConnectionError(Exception):
    """Raised when database connection fails."""
    pass


# Global database connection instance
db = DatabaseConnection()


def test_database_connection() -> bool:
    """Test database connectivity."""
    return db.test_connection()


def create_all(engine: Engine = None):
    """
    Create every table registered on the declarative base.

    There is no migrations layer; this is idempotent (existing tables are left alone).
    """
    engine = engine or db.get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database schema ensured", extra={"tables": len(Base.metadata.tables)})


def is_duplicate_key_error(error: Exception) -> bool:
    """
    Check whether an exception is a unique-constraint violation.

    Matches the error text of PostgreSQL, MySQL and SQLite drivers.
    """
    message = str(getattr(error, 'orig', None) or error).lower()
    return any(marker in message for marker in _DUPLICATE_KEY_MARKERS)


# === ORM Session Management ===

def create_db_session() -> Session:
    """
    Create a new ORM session (for scripts and cron jobs).

    The caller owns the session and must commit/rollback/close it.
    """
    db.get_engine()
    return SessionLocal()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for ORM database sessions.

    Sessions are automatically committed on success or rolled back on error.

    Yields:
        SQLAlchemy Session object

    Example:
        >>> with get_db_session() as session:
        ...     repo = EntityRepository(session, Park)
        ...     park_id, created = repo.upsert("abc", {"name": "Epcot"})
    """
    session = create_db_session()

    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        log_database_error(e, "ORM transaction failed, rolled back")
        raise
    finally:
        session.close()
