from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase, declared_attr

from .config import settings
from .errors import StoreFailure

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        return cls.__name__.lower()


_engine: Engine | None = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore[no-untyped-def]
    # FK enforcement + WAL for the file database
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def init_engine(url: str | None = None) -> Engine:
    """Create the process-wide engine and bind the session factory to it."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    url = url or settings.DATABASE_URL
    is_sqlite = url.startswith("sqlite")
    _engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
    )
    if is_sqlite:
        event.listen(_engine, "connect", _set_sqlite_pragma)
    SessionLocal.configure(bind=_engine)
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        return init_engine()
    return _engine


def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None


def get_db():
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, action: str) -> Iterator[Session]:
    """Commit everything issued inside the block as one unit, or nothing.

    Store errors are rolled back and surfaced as ``StoreFailure``; any other
    exception is rolled back and re-raised unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("store.commit_failed", action=action, error=str(exc))
        raise StoreFailure(f"Could not {action}; no changes were saved") from exc
    except Exception:
        db.rollback()
        raise
