from __future__ import annotations

import datetime
import typing as t

import bcrypt
import pydantic as p
import sqlalchemy as sqla

from classwork.core import di
from classwork.lib import NotSet
from classwork.model import User, UserID, UserRole

from . import Session
from .table import users


def hash_password(password: p.Secret[str]) -> str:
    return bcrypt.hashpw(password.get_secret_value().encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(user: User, password: p.Secret[str]) -> bool:
    if user.password_hash is None:
        return False
    return bcrypt.checkpw(password.get_secret_value().encode("utf-8"), user.password_hash.encode("utf-8"))


def get(
    *,
    user_id: UserID | None = None,
    email: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> User | None:
    """Get a user by ID or email.

    Exactly one of user_id or email must be provided. Emails are compared
    case-insensitively.
    """
    if user_id is None and email is None:
        raise ValueError("Either user_id or email must be provided")
    if user_id is not None and email is not None:
        raise ValueError("Only one of user_id or email should be provided")

    if user_id is not None:
        stmt = sqla.select(users.__table__).where(users.user_id == user_id)
    else:
        assert email is not None
        stmt = sqla.select(users.__table__).where(users.email == email.strip().lower())

    row = session.execute(stmt).mappings().one_or_none()
    return User(**row) if row else None


def find(
    *,
    role: UserRole | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[User, ...]:
    """Find users, optionally only those with the given role."""
    stmt = sqla.select(users.__table__).order_by(users.created_at)
    if role is not None:
        stmt = stmt.where(users.role == role.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(User(**row) for row in rows)


def create(
    *,
    email: str,
    full_name: str,
    role: UserRole,
    password: p.Secret[str],
    created_at: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    """Create a new user.

    Password is hashed internally using bcrypt. A duplicate email raises
    sqlalchemy's IntegrityError.
    """
    user_id = UserID()
    stmt = sqla.insert(users).values(
        user_id=user_id,
        email=email.strip().lower(),
        full_name=full_name,
        role=role.value,
        password_hash=hash_password(password),
        created_at=created_at,
    )
    session.execute(stmt)
    session.flush()
    result = get(user_id=user_id, session=session)
    assert result is not None
    return result


def update(
    user_id: UserID,
    *,
    full_name: str | NotSet = NotSet(),
    password: p.Secret[str] | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    """Update a user's display name or password; role and email are fixed.

    Raises:
        KeyError: If user_id does not correspond to a user
    """
    values: dict[str, t.Any] = {}
    if not isinstance(full_name, NotSet):
        values["full_name"] = full_name
    if not isinstance(password, NotSet):
        values["password_hash"] = hash_password(password)

    if values:
        stmt = sqla.update(users).where(users.user_id == user_id).values(**values)
    else:
        # No-op update to verify user exists
        stmt = sqla.update(users).where(users.user_id == user_id).values(user_id=user_id)

    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"User {user_id} not found")

    session.flush()
    updated = get(user_id=user_id, session=session)
    assert updated is not None
    return updated
