"""
Database connection and session management.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from azure_catalog.config import settings

# Create sync engine; the sync runs as a single-threaded background job
sync_engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
)

# Create sync session factory
SyncSessionLocal = sessionmaker(
    sync_engine,
    autocommit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


@contextmanager
def get_sync_session() -> Iterator[Session]:
    """
    Get sync database session for background jobs.

    Usage:
        with get_sync_session() as db:
            ...
    """
    session = SyncSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine=None) -> None:
    """Initialize database tables."""
    # Models register themselves on Base.metadata when imported
    from azure_catalog.models import models  # noqa: F401

    Base.metadata.create_all(engine or sync_engine)
