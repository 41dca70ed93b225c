"""Authentication routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classwork.auth import AuthContext, get_current_user
from classwork.auth import local as local_auth
from classwork.core import di

from ..view.auth import LoginRequest, LoginResponse, SignUpRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", operation_id="signup", status_code=status.HTTP_201_CREATED)
@di.inject
def signup(
    request: SignUpRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> LoginResponse:
    """Register a new teacher or student and sign them in."""
    user = local_auth.sign_up(
        email=request.email,
        password=request.password,
        full_name=request.full_name,
        role=request.role,
        session=session,
    )
    token = local_auth.issue_token(user)
    return LoginResponse(
        user=UserResponse.from_user(user),
        token=TokenResponse(access_token=token.access_token, expires_at=token.expires_at),
    )


@router.post("/login", operation_id="login")
@di.inject
def login(
    request: LoginRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> LoginResponse:
    """Authenticate a user and return access token."""
    user = local_auth.authenticate(request.email, request.password, session=session)
    token = local_auth.issue_token(user)
    return LoginResponse(
        user=UserResponse.from_user(user),
        token=TokenResponse(access_token=token.access_token, expires_at=token.expires_at),
    )


@router.post("/logout", operation_id="logout", status_code=status.HTTP_204_NO_CONTENT)
@di.inject
def logout(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> None:
    """Revoke the bearer token used for this request."""
    local_auth.sign_out(auth.token, session=session)


@router.get("/me", operation_id="get_current_user")
def get_me(
    auth: AuthContext = Depends(get_current_user),
) -> UserResponse:
    """Get the current authenticated user."""
    return UserResponse.from_user(auth.user)
