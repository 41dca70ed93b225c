"""Tests for the local identity service."""

from __future__ import annotations

import datetime
import typing as t

import jwt
import pytest
from sqlalchemy.orm import Session

from classwork.auth import jwt as jwt_auth
from classwork.auth import local as local_auth
from classwork.core import ClassworkContainer, TimestampProvider
from classwork.errors import AuthError, ValidationError
from classwork.model import User, UserRole
from classwork.storage import user as user_storage


def real_clock() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class TestSignUp(object):
    def test_sign_up_creates_user(self, db_session: Session, utcnow: TimestampProvider) -> None:
        user = local_auth.sign_up(
            "New.Teacher@Example.com", "secret-pw", " New Teacher ", UserRole.Teacher, session=db_session, utcnow=utcnow
        )

        assert user.email == "new.teacher@example.com"
        assert user.full_name == "New Teacher"
        assert user.role is UserRole.Teacher
        with db_session.begin():
            assert user_storage.get(email="new.teacher@example.com", session=db_session) is not None

    def test_duplicate_email(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        user_factory(email="taken@example.com")

        with pytest.raises(AuthError):
            local_auth.sign_up("TAKEN@example.com", "secret-pw", "Someone", UserRole.Student, session=db_session)

    @pytest.mark.parametrize(
        "email, password, full_name, field",
        [
            ("not-an-email", "secret-pw", "Name", "email"),
            ("a@example.com", "short", "Name", "password"),
            ("a@example.com", "secret-pw", "   ", "full_name"),
        ],
    )
    def test_invalid_input(
        self, email: str, password: str, full_name: str, field: str, db_session: Session
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            local_auth.sign_up(email, password, full_name, UserRole.Student, session=db_session)
        assert exc_info.value.field == field


class TestSignIn(object):
    def test_round_trip(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        user = user_factory(email="round@example.com", password="trip-password")

        token = local_auth.sign_in("round@example.com", "trip-password", session=db_session, utcnow=real_clock)
        assert token.token_type == "bearer"
        assert local_auth.current_user(token.access_token, session=db_session) == user

        local_auth.sign_out(token.access_token, session=db_session, utcnow=real_clock)
        assert local_auth.current_user(token.access_token, session=db_session) is None

    def test_sign_out_leaves_other_sessions(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        user = user_factory(email="two@example.com", password="two-sessions")
        laptop = local_auth.sign_in("two@example.com", "two-sessions", session=db_session, utcnow=real_clock)
        phone = local_auth.sign_in("two@example.com", "two-sessions", session=db_session, utcnow=real_clock)

        local_auth.sign_out(laptop.access_token, session=db_session, utcnow=real_clock)

        assert local_auth.current_user(phone.access_token, session=db_session) == user

    @pytest.mark.parametrize("email, password", [("who@example.com", "wrong-password"), ("nobody@example.com", "x")])
    def test_bad_credentials(
        self, email: str, password: str, db_session: Session, user_factory: t.Callable[..., User]
    ) -> None:
        user_factory(email="who@example.com", password="right-password")

        with pytest.raises(AuthError):
            local_auth.sign_in(email, password, session=db_session)

    def test_sign_out_rejects_garbage(self, db_session: Session) -> None:
        with pytest.raises(AuthError):
            local_auth.sign_out("not.a.token", session=db_session)


class TestCurrentUser(object):
    def test_missing_or_malformed_token(self, db_session: Session) -> None:
        assert local_auth.current_user(None, session=db_session) is None
        assert local_auth.current_user("", session=db_session) is None
        assert local_auth.current_user("not.a.token", session=db_session) is None

    def test_expired_token(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        user = user_factory()
        stale = jwt_auth.create_access_token(
            user.user_id, user.role, now=real_clock() - datetime.timedelta(days=2), expire_minutes=60
        )

        assert local_auth.current_user(stale.access_token, session=db_session) is None

    def test_token_signed_with_another_secret(
        self, container: ClassworkContainer, db_session: Session, user_factory: t.Callable[..., User]
    ) -> None:
        user = user_factory()
        now = real_clock()
        forged = jwt.encode(
            {
                "sub": str(user.user_id),
                "role": user.role.value,
                "jti": "tokn$" + user.user_id.key,
                "exp": int((now + datetime.timedelta(hours=1)).timestamp()),
                "iat": int(now.timestamp()),
            },
            "not-the-secret",
            algorithm="HS256",
        )

        assert local_auth.current_user(forged, session=db_session) is None

    def test_token_role_must_match_user(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        student = user_factory(role=UserRole.Student)
        token = jwt_auth.create_access_token(student.user_id, UserRole.Teacher, now=real_clock())

        assert local_auth.current_user(token.access_token, session=db_session) is None


class TestToken(object):
    def test_payload(self, user_factory: t.Callable[..., User]) -> None:
        user = user_factory(role=UserRole.Teacher)
        now = real_clock().replace(microsecond=0)

        token = jwt_auth.create_access_token(user.user_id, user.role, now=now, expire_minutes=30)
        data = jwt_auth.decode_token(token.access_token)

        assert data is not None
        assert data.user_id == user.user_id
        assert data.role is UserRole.Teacher
        assert data.issued_at == now
        assert data.expires_at == now + datetime.timedelta(minutes=30)
        assert token.expires_at == data.expires_at
