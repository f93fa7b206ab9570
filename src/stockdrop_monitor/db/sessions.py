"""Database engine and session management."""
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from stockdrop_monitor.config import DatabaseConfig
from stockdrop_monitor.db.models import (  # noqa: F401  # pylint: disable=unused-import
    Favorite, NotificationLog, SQLModel, UserSetting)


def create_db_engine(config: DatabaseConfig) -> Engine:
    """Create the SQLModel engine for the configured database URL.

    In-memory SQLite (tests, local dry runs) gets a single shared connection.
    """
    if config.url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if config.url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(config.url, echo=config.echo, **kwargs)
    return create_engine(
        config.url,
        echo=config.echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


@contextmanager
def get_session(engine: Engine) -> Generator[Session, None, None]:
    """Yield a database session; commits on success, rolls back on error."""
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to call on startup (idempotent for existing tables)."""
    SQLModel.metadata.create_all(engine)
