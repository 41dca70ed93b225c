from __future__ import annotations

import datetime

import sqlalchemy as sqla

from classwork.core import di
from classwork.model import TokenID, UserID

from . import Session
from .table import revoked_tokens


def is_revoked(
    token_id: TokenID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    stmt = sqla.select(revoked_tokens.token_id).where(revoked_tokens.token_id == token_id)
    return session.execute(stmt).scalar_one_or_none() is not None


def revoke(
    token_id: TokenID,
    *,
    user_id: UserID,
    expires_at: datetime.datetime,
    revoked_at: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """Record a token as revoked until it expires.

    Returns False if the token was already revoked.
    """
    if is_revoked(token_id, session=session):
        return False

    stmt = sqla.insert(revoked_tokens).values(
        token_id=token_id,
        user_id=user_id,
        expires_at=expires_at,
        revoked_at=revoked_at,
    )
    session.execute(stmt)
    session.flush()
    return True


def purge_expired(
    *,
    now: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> int:
    """Forget revocations of tokens that have expired anyway."""
    stmt = sqla.delete(revoked_tokens).where(revoked_tokens.expires_at <= now)
    result = session.execute(stmt)
    return result.rowcount  # pyright: ignore[reportAttributeAccessIssue]
