"""
SQLAlchemy ORM Base Configuration
Provides declarative base and session factory for ORM models.

The session factory is created unbound; database.connection binds it to the
configured engine on first use so that importing models never opens a
connection.
"""

import uuid

from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


def new_id() -> str:
    """Generate a surface identifier (UUID4 string)."""
    return str(uuid.uuid4())


# Session factory for cron jobs and scripts; bound lazily in database.connection
SessionLocal = sessionmaker(
    expire_on_commit=False,  # Allow access to objects after commit
    autoflush=True,
)


def create_session():
    """
    Factory for creating sessions outside request context (cron jobs, scripts).

    Usage:
        session = create_session()
        try:
            # Do work
            session.commit()
        except Exception as e:
            session.rollback()
            raise
        finally:
            session.close()
    """
    return SessionLocal()
