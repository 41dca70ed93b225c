"""Tests for the access-control gate."""

from __future__ import annotations

import datetime

import pytest

from classwork.errors import AuthError, PermissionDenied
from classwork.model import User, UserID, UserRole
from classwork.service.access import authorize, is_permitted, Operation, Rules

Now = datetime.datetime(2026, 3, 2, 9, 30, tzinfo=datetime.UTC)


def make_user(role: UserRole) -> User:
    return User(
        user_id=UserID(),
        email=f"{role.value}@example.com",
        full_name=role.value.title(),
        role=role,
        created_at=Now,
    )


@pytest.fixture
def teacher() -> User:
    return make_user(UserRole.Teacher)


@pytest.fixture
def student() -> User:
    return make_user(UserRole.Student)


def test_every_operation_has_a_rule() -> None:
    assert set(Rules) == set(Operation)


@pytest.mark.parametrize("operation", list(Operation))
def test_anonymous_is_never_permitted(operation: Operation) -> None:
    assert not is_permitted(None, operation)
    with pytest.raises(AuthError):
        authorize(None, operation)


def test_only_teachers_create_assignments(teacher: User, student: User) -> None:
    assert is_permitted(teacher, Operation.CreateAssignment)
    assert not is_permitted(student, Operation.CreateAssignment)


def test_only_students_submit(teacher: User, student: User) -> None:
    for operation in (Operation.SubmitOrUpdate, Operation.GetSubmissionFor):
        assert is_permitted(student, operation)
        assert not is_permitted(teacher, operation)


def test_anyone_authenticated_reads_assignments(teacher: User, student: User) -> None:
    for operation in (Operation.ListAssignments, Operation.GetAssignment):
        assert is_permitted(teacher, operation)
        assert is_permitted(student, operation)


@pytest.mark.parametrize("operation", [Operation.GradeSubmission, Operation.ListSubmissions])
def test_owner_only_operations(operation: Operation, teacher: User, student: User) -> None:
    other_teacher = make_user(UserRole.Teacher)

    assert is_permitted(teacher, operation, owner_id=teacher.user_id)
    assert not is_permitted(teacher, operation, owner_id=other_teacher.user_id)
    assert not is_permitted(teacher, operation)
    assert not is_permitted(student, operation, owner_id=student.user_id)


def test_authorize_returns_caller(teacher: User) -> None:
    assert authorize(teacher, Operation.GradeSubmission, owner_id=teacher.user_id) is teacher


def test_authorize_role_only_ignores_ownership(teacher: User, student: User) -> None:
    assert authorize(teacher, Operation.GradeSubmission, role_only=True) is teacher
    with pytest.raises(PermissionDenied):
        authorize(student, Operation.GradeSubmission, role_only=True)


def test_authorize_denies_non_owner(teacher: User) -> None:
    with pytest.raises(PermissionDenied):
        authorize(teacher, Operation.ListSubmissions, owner_id=UserID())
