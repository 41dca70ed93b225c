"""Authentication utilities."""

__all__ = [
    "AuthContext",
    "SessionToken",
    "TokenData",
    "get_current_user",
]

from .jwt import SessionToken, TokenData
from .middleware import AuthContext, get_current_user
