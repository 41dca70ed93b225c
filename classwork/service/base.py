import contextlib
import logging
import typing as t

import sqlalchemy.exc

from classwork.errors import NotFound, StorageError
from classwork.model.id import ShortUUIDKey
from classwork.storage import Session, SessionTransaction

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def transaction(session: Session) -> t.Iterator[SessionTransaction]:
    """One operation, one transaction; an unreachable record store surfaces as StorageError"""
    try:
        with session.begin() as tx:
            yield tx
    except (sqlalchemy.exc.OperationalError, sqlalchemy.exc.InterfaceError) as e:
        logger.error("record store unavailable", extra={"error": str(e.orig) if e.orig else str(e)})
        raise StorageError("the record store is unavailable; try again") from e


KeyT = t.TypeVar("KeyT", bound=ShortUUIDKey)


def coerce_key(key_type: type[KeyT], value: KeyT | str, what: str) -> KeyT:
    """Parse an identifier from a caller; a malformed one names nothing that exists"""
    if isinstance(value, key_type):
        return value
    try:
        return key_type(value)
    except (TypeError, ValueError):
        raise NotFound(f"{what} not found") from None
