"""Assignment registry: teachers create assignments, everyone can read them."""

import datetime
import logging
import typing as t

import pydantic as p

from classwork.core import di, TimestampProvider
from classwork.errors import NotFound, ValidationError
from classwork.model import Assignment, AssignmentID, AssignmentWithTeacher, User, UTCDateTime
from classwork.storage import assignment as assignment_storage
from classwork.storage import Session

from .access import authorize, Operation
from .base import coerce_key, transaction

logger = logging.getLogger(__name__)

_timestamp: p.TypeAdapter[datetime.datetime] = p.TypeAdapter(UTCDateTime)


def required_text(field: str, value: t.Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "must not be empty")
    return value.strip()


def parse_due_date(value: t.Any) -> datetime.datetime:
    if value is None:
        raise ValidationError("due_date", "is required")
    try:
        return _timestamp.validate_python(value)
    except p.ValidationError:
        raise ValidationError("due_date", "must be a valid timestamp") from None


def check_max_points(value: t.Any, cap: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("max_points", "must be a whole number")
    if value <= 0:
        raise ValidationError("max_points", "must be greater than zero")
    if value > cap:
        raise ValidationError("max_points", f"must be at most {cap}")
    return value


def create_assignment(
    caller: User | None,
    title: str,
    description: str,
    due_date: datetime.datetime | str,
    max_points: int = 100,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    max_points_cap: int = di.Provide["config.ledger.max_points_cap"],
) -> Assignment:
    teacher = authorize(caller, Operation.CreateAssignment)

    title = required_text("title", title)
    description = required_text("description", description)
    due = parse_due_date(due_date)
    points = check_max_points(max_points, max_points_cap)

    with transaction(session):
        assignment = assignment_storage.create(
            title=title,
            description=description,
            due_date=due,
            created_by=teacher.user_id,
            max_points=points,
            created_at=utcnow(),
            session=session,
        )

    logger.info(
        "assignment created",
        extra={
            "assignment_id": assignment.assignment_id,
            "created_by": teacher.user_id,
            "max_points": points,
        },
    )
    return assignment


def list_assignments(
    caller: User | None,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[AssignmentWithTeacher, ...]:
    """Teachers see their own assignments, students see all of them; newest first."""
    viewer = authorize(caller, Operation.ListAssignments)
    created_by = viewer.user_id if viewer.is_teacher else None
    with transaction(session):
        return assignment_storage.find(created_by=created_by, with_teacher=True, session=session)


def get_assignment(
    caller: User | None,
    assignment_id: AssignmentID | str,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> AssignmentWithTeacher:
    authorize(caller, Operation.GetAssignment)
    key = coerce_key(AssignmentID, assignment_id, "assignment")
    with transaction(session):
        assignment = assignment_storage.get(key, with_teacher=True, session=session)
    if assignment is None:
        raise NotFound("assignment not found")
    return assignment
