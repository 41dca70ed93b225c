"""JWT token management for session authentication."""

from __future__ import annotations

import datetime
import typing as t

import jwt
import pydantic as p

from classwork.core import di
from classwork.model import BaseModel, TokenID, UserID, UserRole


class TokenPayload(t.TypedDict):
    """JWT token payload structure."""

    sub: str  # user_id
    role: str  # user's role, fixed at sign-up
    jti: str  # token_id, recorded on sign-out
    exp: int  # expiration timestamp
    iat: int  # issued at timestamp


class TokenData(t.NamedTuple):
    """Decoded token data."""

    user_id: UserID
    role: UserRole
    token_id: TokenID
    expires_at: datetime.datetime
    issued_at: datetime.datetime


class SessionToken(BaseModel):
    access_token: str
    token_type: t.Literal["bearer"] = "bearer"
    expires_at: datetime.datetime


def _secret_value(secret: p.Secret[str] | str | None) -> str:
    if secret is None:
        raise RuntimeError("no JWT secret is configured (secrets.auth.jwt)")
    if isinstance(secret, p.Secret):
        return secret.get_secret_value()
    return secret


def create_access_token(
    user_id: UserID,
    role: UserRole,
    *,
    now: datetime.datetime,
    secret: p.Secret[str] | None = di.Provide["secrets.auth.jwt"],
    algorithm: str = di.Provide["config.web.classwork.auth.jwt_algorithm"],
    expire_minutes: int = di.Provide["config.web.classwork.auth.access_token_expire_minutes"],
) -> SessionToken:
    """Sign a new access token for the user.

    Every token carries a fresh `jti` so that a single session can be
    revoked without touching the user's other sessions.
    """
    expires_at = now + datetime.timedelta(minutes=expire_minutes)
    payload: TokenPayload = {
        "sub": str(user_id),
        "role": role.value,
        "jti": str(TokenID()),
        "exp": int(expires_at.timestamp()),
        "iat": int(now.timestamp()),
    }
    token = jwt.encode(dict(payload), _secret_value(secret), algorithm=algorithm)
    return SessionToken(access_token=token, expires_at=expires_at)


def decode_token(
    token: str,
    *,
    secret: p.Secret[str] | None = di.Provide["secrets.auth.jwt"],
    algorithm: str = di.Provide["config.web.classwork.auth.jwt_algorithm"],
) -> TokenData | None:
    """Decode and validate a token.

    Returns:
        TokenData if valid, None if invalid, malformed or expired
    """
    try:
        payload = jwt.decode(
            token,
            _secret_value(secret),
            algorithms=[algorithm],
            options={"require": ["sub", "role", "jti", "exp", "iat"]},
        )
    except jwt.InvalidTokenError:
        # includes ExpiredSignatureError
        return None

    try:
        return TokenData(
            user_id=UserID(payload["sub"]),
            role=UserRole(payload["role"]),
            token_id=TokenID(payload["jti"]),
            expires_at=datetime.datetime.fromtimestamp(payload["exp"], tz=datetime.UTC),
            issued_at=datetime.datetime.fromtimestamp(payload["iat"], tz=datetime.UTC),
        )
    except (TypeError, ValueError):
        return None
