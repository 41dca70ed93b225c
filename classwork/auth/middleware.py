"""Authentication dependencies for FastAPI routes."""

from __future__ import annotations

import typing as t

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from classwork.core import di
from classwork.model import User

from . import local as local_auth

# Security scheme for JWT bearer tokens
bearer_scheme = HTTPBearer(auto_error=False)


class AuthContext(t.NamedTuple):
    """Current authentication context."""

    user: User
    token: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@di.inject
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AuthContext:
    """Dependency to get the current authenticated user.

    Raises:
        HTTPException 401: If no token is provided, or it is invalid, expired or revoked
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user = local_auth.current_user(credentials.credentials, session=session)
    if user is None:
        raise _unauthorized("Invalid or expired token")

    return AuthContext(user=user, token=credentials.credentials)
