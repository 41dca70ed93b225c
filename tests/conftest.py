"""Pytest fixtures for Classwork tests.

The container is booted once per session in the test environment, which
points the record store at an in-memory SQLite database whose schema is
created from the table metadata. Every test runs inside a transaction on a
single connection that is rolled back afterwards, so production code calling
`session.begin()` gets a savepoint instead.

Usage:
    def test_list(client: TestClient, user_factory, auth_headers):
        teacher = user_factory(role=UserRole.Teacher)
        response = client.get("/api/assignments", headers=auth_headers(teacher))
        assert response.status_code == 200
"""

from __future__ import annotations

import datetime
import os
import typing as t
from pathlib import Path

import pydantic as p
import pytest
from dependency_injector import providers
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import classwork
from classwork.core import ClassworkContainer, TimestampProvider
from classwork.model import Assignment, DeploymentEnvironment, Submission, User, UserID, UserRole
from classwork.storage import assignment as assignment_storage
from classwork.storage import submission as submission_storage
from classwork.storage import user as user_storage
from classwork.storage.object import LocalObjectStore
from classwork.storage.table import metadata

TestPassword = "password123"

# a fixed instant for tests that care about ordering and due dates
Now = datetime.datetime(2026, 3, 2, 9, 30, tzinfo=datetime.UTC)


@pytest.fixture(scope="session")
def container() -> t.Generator[ClassworkContainer]:
    """Boot the DI container for the test session."""
    ct = ClassworkContainer()
    root = Path(os.path.dirname(classwork.__file__)).parent

    ClassworkContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )
    metadata.create_all(ct.storage().persistent().engine())

    yield ct

    ct.shutdown_resources()


@pytest.fixture(scope="session")
def object_store(tmp_path_factory: pytest.TempPathFactory) -> LocalObjectStore:
    return LocalObjectStore(tmp_path_factory.mktemp("uploads"), url_prefix="/uploads")


@pytest.fixture(scope="session")
def app(container: ClassworkContainer, object_store: LocalObjectStore) -> FastAPI:
    """Create the FastAPI application, storing uploads in a temporary directory."""
    from classwork.core.config import ClassworkWebSettings
    from classwork.web.classwork.main import _create_app  # pyright: ignore[reportPrivateUsage]

    container.storage().object.override(providers.Object(object_store))

    return _create_app(
        config=ClassworkWebSettings(**container.config.web.classwork()),
        env=DeploymentEnvironment.Test,
        store=object_store,
    )


@pytest.fixture
def db_session(container: ClassworkContainer) -> t.Generator[Session]:
    """Provide a database session wrapped in a transaction.

    join_transaction_mode="create_savepoint" turns every `session.begin()`
    into a savepoint, and the outer transaction is rolled back at the end.
    """
    engine = container.storage().persistent().engine()

    connection = engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        autobegin=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(app: FastAPI, container: ClassworkContainer, db_session: Session) -> t.Generator[TestClient]:
    """Provide a TestClient whose requests share the test's transactional session."""
    container.storage().persistent().session.override(db_session)

    with TestClient(app) as test_client:
        yield test_client

    container.storage().persistent().session.reset_override()


@pytest.fixture
def utcnow() -> TimestampProvider:
    return lambda: Now


@pytest.fixture
def user_factory(db_session: Session) -> t.Callable[..., User]:
    """Factory fixture for creating users; each gets a unique email by default.

    Usage:
        def test_something(user_factory):
            teacher = user_factory(role=UserRole.Teacher, full_name="Ada Teacher")
    """

    def create_user(
        email: str | None = None,
        full_name: str = "Test User",
        role: UserRole = UserRole.Student,
        password: str = TestPassword,
        created_at: datetime.datetime = Now,
    ) -> User:
        if email is None:
            email = f"{role.value}-{UserID().key.lower()}@example.com"
        with db_session.begin():
            return user_storage.create(
                email=email,
                full_name=full_name,
                role=role,
                password=p.Secret(password),
                created_at=created_at,
                session=db_session,
            )

    return create_user


@pytest.fixture
def teacher(user_factory: t.Callable[..., User]) -> User:
    return user_factory(full_name="Grace Teacher", role=UserRole.Teacher)


@pytest.fixture
def student(user_factory: t.Callable[..., User]) -> User:
    return user_factory(full_name="Sam Student", role=UserRole.Student)


@pytest.fixture
def assignment_factory(db_session: Session, teacher: User) -> t.Callable[..., Assignment]:
    """Factory fixture for creating assignments, owned by `teacher` unless given."""

    def create_assignment(
        created_by: User | None = None,
        title: str = "Essay on photosynthesis",
        description: str = "Explain the light-dependent reactions.",
        due_date: datetime.datetime = Now + datetime.timedelta(days=7),
        max_points: int = 100,
        created_at: datetime.datetime = Now,
    ) -> Assignment:
        with db_session.begin():
            return assignment_storage.create(
                title=title,
                description=description,
                due_date=due_date,
                created_by=(created_by or teacher).user_id,
                max_points=max_points,
                created_at=created_at,
                session=db_session,
            )

    return create_assignment


@pytest.fixture
def submission_factory(db_session: Session, student: User) -> t.Callable[..., Submission]:
    """Factory fixture for creating submissions, by `student` unless given."""

    def create_submission(
        assignment: Assignment,
        by: User | None = None,
        content: str = "Chlorophyll absorbs light.",
        file_url: str | None = None,
        submitted_at: datetime.datetime = Now,
    ) -> Submission:
        with db_session.begin():
            return submission_storage.create(
                assignment_id=assignment.assignment_id,
                student_id=(by or student).user_id,
                content=content,
                file_url=file_url,
                submitted_at=submitted_at,
                session=db_session,
            )

    return create_submission


@pytest.fixture
def auth_headers(container: ClassworkContainer) -> t.Callable[[User], dict[str, str]]:
    """Bearer headers for a user, signed with the test environment's secret."""
    from classwork.auth import jwt as jwt_auth

    def headers(user: User) -> dict[str, str]:
        token = jwt_auth.create_access_token(user.user_id, user.role, now=datetime.datetime.now(datetime.UTC))
        return {"Authorization": f"Bearer {token.access_token}"}

    return headers
