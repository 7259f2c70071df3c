"""
Shared helpers for the SQLAlchemy reference collaborator stores.

Used by p2p_modules/*/adapter.py to own the transaction boundary of each
port call and to translate database availability failures into the
kernel's ``NetworkError``.

Architecture: Modules layer. Imports only from p2p_kernel and SQLAlchemy.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from p2p_kernel.exceptions import NetworkError, NotFoundError
from p2p_kernel.logging_config import get_logger

logger = get_logger("modules.store")


@contextmanager
def store_transaction(session: Session, operation: str) -> Iterator[Session]:
    """
    Commit on success, roll back on any exception.

    ``OperationalError`` (connection lost, database unavailable) is
    re-raised as ``NetworkError``; every other exception propagates as is.
    """
    try:
        yield session
        session.commit()
    except OperationalError as exc:
        session.rollback()
        logger.warning(
            "store_operation_unavailable",
            extra={"operation": operation},
            exc_info=True,
        )
        raise NetworkError(operation, str(exc.orig or exc), cause=exc) from exc
    except Exception:
        session.rollback()
        raise


@contextmanager
def store_read(session: Session, operation: str) -> Iterator[Session]:
    """Read-only variant: no commit, availability failures become ``NetworkError``."""
    try:
        yield session
    except OperationalError as exc:
        logger.warning(
            "store_operation_unavailable",
            extra={"operation": operation},
            exc_info=True,
        )
        raise NetworkError(operation, str(exc.orig or exc), cause=exc) from exc


def parse_id(entity_type: str, value: str) -> UUID:
    """Parse an opaque string id; malformed ids cannot exist, so they are not found."""
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError(entity_type, value) from None
