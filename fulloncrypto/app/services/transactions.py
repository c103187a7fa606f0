from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..core.errors import ApiError, InternalError

logger = logging.getLogger(__name__)


@contextmanager
def store_operation(session: Session, operation: str) -> Iterator[None]:
    """Roll back on failure and turn store exceptions into ``InternalError``.

    Domain errors pass through untouched; store detail is only logged.
    """
    try:
        yield
    except ApiError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("%s.failed", operation)
        raise InternalError() from exc
