from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from classwork.core import di
from classwork.model import Assignment, AssignmentID, AssignmentWithTeacher, UserID

from . import Session
from .table import assignments, users


def _select(with_teacher: bool) -> sqla.Select[t.Any]:
    if with_teacher:
        return sqla.select(assignments.__table__, users.full_name.label("teacher_name")).join(
            users, users.user_id == assignments.created_by
        )
    return sqla.select(assignments.__table__)


@t.overload
def get(
    assignment_id: AssignmentID,
    *,
    with_teacher: t.Literal[False] = ...,
    session: Session = ...,
) -> Assignment | None: ...


@t.overload
def get(
    assignment_id: AssignmentID,
    *,
    with_teacher: t.Literal[True],
    session: Session = ...,
) -> AssignmentWithTeacher | None: ...


def get(
    assignment_id: AssignmentID,
    *,
    with_teacher: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> Assignment | AssignmentWithTeacher | None:
    """Get an assignment by ID."""
    stmt = _select(with_teacher).where(assignments.assignment_id == assignment_id)
    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None
    return AssignmentWithTeacher(**row) if with_teacher else Assignment(**row)


@t.overload
def find(
    *,
    created_by: UserID | None = ...,
    with_teacher: t.Literal[False] = ...,
    session: Session = ...,
) -> tuple[Assignment, ...]: ...


@t.overload
def find(
    *,
    created_by: UserID | None = ...,
    with_teacher: t.Literal[True],
    session: Session = ...,
) -> tuple[AssignmentWithTeacher, ...]: ...


def find(
    *,
    created_by: UserID | None = None,
    with_teacher: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Assignment, ...] | tuple[AssignmentWithTeacher, ...]:
    """Find assignments, newest first."""
    stmt = _select(with_teacher)
    if created_by is not None:
        stmt = stmt.where(assignments.created_by == created_by)
    stmt = stmt.order_by(assignments.created_at.desc(), assignments.assignment_id)
    rows = session.execute(stmt).mappings().all()
    if with_teacher:
        return tuple(AssignmentWithTeacher(**row) for row in rows)
    return tuple(Assignment(**row) for row in rows)


def create(
    *,
    title: str,
    description: str,
    due_date: datetime.datetime,
    created_by: UserID,
    max_points: int,
    created_at: datetime.datetime,
    session: Session = di.Provide["storage.persistent.session"],
) -> Assignment:
    """Create a new assignment."""
    assignment_id = AssignmentID()
    stmt = sqla.insert(assignments).values(
        assignment_id=assignment_id,
        title=title,
        description=description,
        due_date=due_date,
        created_by=created_by,
        max_points=max_points,
        created_at=created_at,
    )
    session.execute(stmt)
    session.flush()
    result = get(assignment_id, session=session)
    assert result is not None
    return result
