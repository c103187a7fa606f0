"""Engine ownership: a single lazily created engine shared by every request."""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..models import db as _db_models  # noqa: F401 - ensure models register with metadata
from .config import get_settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


def create_engine_for_url(database_url: str) -> Engine:
    connect_args: dict[str, Any] = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(database_url, echo=False, connect_args=connect_args)


def get_engine() -> Engine:
    """Return the shared engine, creating it and the tables on first use."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                engine = create_engine_for_url(get_settings().database_url)
                SQLModel.metadata.create_all(engine)
                logger.info("store.connected", extra={"dialect": engine.dialect.name})
                _engine = engine
    return _engine


def set_engine(new_engine: Optional[Engine]) -> None:
    global _engine
    with _engine_lock:
        _engine = new_engine


def init_db() -> None:
    SQLModel.metadata.create_all(get_engine())


def ping() -> None:
    with Session(get_engine()) as session:
        session.execute(text("SELECT 1"))


def get_session() -> Generator[Session, None, None]:
    with Session(get_engine()) as session:
        yield session
