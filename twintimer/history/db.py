"""SQLAlchemy engine and session helpers for the history file."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base


def create_history_engine(path: Path) -> Engine:
    """Engine bound to the SQLite file at *path*.

    Nothing touches the disk until the first connection, so creating
    the engine for a missing file is safe.
    """
    return create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
        echo=False,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create the history table if it does not exist yet."""
    Base.metadata.create_all(engine)


@contextmanager
def session_scope(factory: sessionmaker):
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
