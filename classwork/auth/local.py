"""Local identity service: bcrypt password hashes and signed session tokens."""

from __future__ import annotations

import logging

import pydantic as p
import sqlalchemy.exc

from classwork.core import di, TimestampProvider
from classwork.errors import AuthError, ValidationError
from classwork.model import User, UserRole
from classwork.service.base import transaction
from classwork.storage import Session
from classwork.storage import token as token_storage
from classwork.storage import user as user_storage

from . import jwt as jwt_auth
from .jwt import SessionToken

logger = logging.getLogger(__name__)

MinPasswordLength = 6

_email: p.TypeAdapter[str] = p.TypeAdapter(p.EmailStr)


def _secret(password: p.Secret[str] | str) -> p.Secret[str]:
    return password if isinstance(password, p.Secret) else p.Secret(password)


def sign_up(
    email: str,
    password: p.Secret[str] | str,
    full_name: str,
    role: UserRole,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> User:
    """Register a new user; the role can never change afterwards."""
    try:
        email = _email.validate_python(email)
    except p.ValidationError:
        raise ValidationError("email", "must be a valid email address") from None
    if not isinstance(full_name, str) or not full_name.strip():
        raise ValidationError("full_name", "must not be empty")
    secret = _secret(password)
    if len(secret.get_secret_value()) < MinPasswordLength:
        raise ValidationError("password", f"must be at least {MinPasswordLength} characters")

    try:
        with transaction(session):
            if user_storage.get(email=email, session=session) is not None:
                raise AuthError("email already registered")
            user = user_storage.create(
                email=email,
                full_name=full_name.strip(),
                role=role,
                password=secret,
                created_at=utcnow(),
                session=session,
            )
    except sqlalchemy.exc.IntegrityError:
        # registered concurrently
        raise AuthError("email already registered") from None

    logger.info("user signed up", extra={"user_id": user.user_id, "role": user.role.value})
    return user


def authenticate(
    email: str,
    password: p.Secret[str] | str,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    with transaction(session):
        user = user_storage.get(email=email, session=session)
    if user is None or not user_storage.check_password(user, _secret(password)):
        logger.info("sign-in rejected", extra={"email": email})
        raise AuthError("invalid email or password")
    return user


def sign_in(
    email: str,
    password: p.Secret[str] | str,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> SessionToken:
    user = authenticate(email, password, session=session)
    return issue_token(user, utcnow=utcnow)


def issue_token(user: User, *, utcnow: TimestampProvider = di.Provide["utcnow"]) -> SessionToken:
    token = jwt_auth.create_access_token(user.user_id, user.role, now=utcnow())
    logger.info("user signed in", extra={"user_id": user.user_id})
    return token


def sign_out(
    token: str,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
) -> None:
    """Revoke the token until it would have expired anyway."""
    data = jwt_auth.decode_token(token)
    if data is None:
        raise AuthError("invalid or expired token")

    now = utcnow()
    with transaction(session):
        token_storage.purge_expired(now=now, session=session)
        token_storage.revoke(
            data.token_id,
            user_id=data.user_id,
            expires_at=data.expires_at,
            revoked_at=now,
            session=session,
        )
    logger.info("user signed out", extra={"user_id": data.user_id, "token_id": data.token_id})


def current_user(
    token: str | None,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> User | None:
    """The user a token belongs to; None for bad, expired or revoked tokens."""
    if not token:
        return None
    data = jwt_auth.decode_token(token)
    if data is None:
        return None

    with transaction(session):
        if token_storage.is_revoked(data.token_id, session=session):
            return None
        user = user_storage.get(user_id=data.user_id, session=session)
    if user is None or user.role is not data.role:
        return None
    return user
