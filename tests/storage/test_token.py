"""Tests for classwork.storage.token module."""

from __future__ import annotations

import datetime
import typing as t

from sqlalchemy.orm import Session

from classwork.model import TokenID, User
from classwork.storage import token as token_storage

Now = datetime.datetime(2026, 3, 2, 9, 30, tzinfo=datetime.UTC)


class TestRevoke(object):
    def test_revoke_then_is_revoked(self, db_session: Session, user_factory: t.Callable[..., User]) -> None:
        user = user_factory()
        token_id = TokenID()

        with db_session.begin():
            assert not token_storage.is_revoked(token_id, session=db_session)
            first = token_storage.revoke(
                token_id,
                user_id=user.user_id,
                expires_at=Now + datetime.timedelta(hours=1),
                revoked_at=Now,
                session=db_session,
            )
            second = token_storage.revoke(
                token_id,
                user_id=user.user_id,
                expires_at=Now + datetime.timedelta(hours=1),
                revoked_at=Now,
                session=db_session,
            )
            assert token_storage.is_revoked(token_id, session=db_session)

        assert first is True
        assert second is False

    def test_purge_expired_keeps_live_revocations(
        self, db_session: Session, user_factory: t.Callable[..., User]
    ) -> None:
        user = user_factory()
        expired, live = TokenID(), TokenID()

        with db_session.begin():
            for token_id, expires_at in (
                (expired, Now - datetime.timedelta(minutes=1)),
                (live, Now + datetime.timedelta(minutes=1)),
            ):
                token_storage.revoke(
                    token_id, user_id=user.user_id, expires_at=expires_at, revoked_at=Now, session=db_session
                )
            purged = token_storage.purge_expired(now=Now, session=db_session)
            assert not token_storage.is_revoked(expired, session=db_session)
            assert token_storage.is_revoked(live, session=db_session)

        assert purged == 1
