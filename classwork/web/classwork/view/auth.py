"""View models for authentication endpoints."""

from __future__ import annotations

import datetime

from pydantic import EmailStr

from classwork.model import BaseModel, User, UserID, UserRole


class SignUpRequest(BaseModel):
    """Request body for sign-up."""

    email: EmailStr
    password: str
    full_name: str
    role: UserRole


class LoginRequest(BaseModel):
    """Request body for login."""

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Response containing access token."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime.datetime


class UserResponse(BaseModel):
    """Response containing user information."""

    user_id: UserID
    email: EmailStr
    full_name: str
    role: UserRole
    created_at: datetime.datetime

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            user_id=user.user_id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            created_at=user.created_at,
        )


class LoginResponse(BaseModel):
    """Response for successful login or sign-up."""

    user: UserResponse
    token: TokenResponse
