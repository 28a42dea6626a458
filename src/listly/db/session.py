"""Database session management for Listly."""
from contextlib import contextmanager
from typing import Generator
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.engine import Engine

from listly.config.settings import get_settings

settings = get_settings()


# Cascading deletes rely on SQLite enforcing foreign keys
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(
    settings.DB_URL,
    echo=settings.DB_ECHO,
)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_session() -> Session:
    """Get a new database session."""
    return SessionLocal()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


class TransactionManager:
    """Manages database transactions with error handling."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """
        Context manager for database transactions.

        Everything written inside the block is committed together when it
        exits cleanly and rolled back together when anything raises.

        Yields:
            Session: The database session

        Raises:
            Exception: Any exception that occurs during the transaction
        """
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
