"""View models for assignments."""

from __future__ import annotations

import datetime

import pydantic as p

from classwork.model import AssignmentID, AssignmentWithTeacher, BaseModel, UserID


class AssignmentCreateRequest(BaseModel):
    """Request to create a new assignment."""

    title: str
    description: str
    due_date: datetime.datetime
    max_points: p.StrictInt = 100


class AssignmentResponse(BaseModel):
    """Assignment details, as shown on the dashboard."""

    assignment_id: AssignmentID
    title: str
    description: str
    due_date: datetime.datetime
    created_by: UserID
    teacher_name: str
    max_points: int
    created_at: datetime.datetime
    is_overdue: bool

    @classmethod
    def from_assignment(cls, assignment: AssignmentWithTeacher, now: datetime.datetime) -> AssignmentResponse:
        return cls(
            assignment_id=assignment.assignment_id,
            title=assignment.title,
            description=assignment.description,
            due_date=assignment.due_date,
            created_by=assignment.created_by,
            teacher_name=assignment.teacher_name,
            max_points=assignment.max_points,
            created_at=assignment.created_at,
            is_overdue=assignment.is_overdue(now),
        )


class AssignmentListResponse(BaseModel):
    assignments: list[AssignmentResponse]
