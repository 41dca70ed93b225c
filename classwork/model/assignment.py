import typing as t

import annotated_types as ant

from .base import UTCDateTime, WithCreated
from .id import AssignmentID, UserID

MaxPoints = t.Annotated[int, ant.Gt(0)]


class Assignment(WithCreated):
    assignment_id: AssignmentID
    title: str
    description: str
    due_date: UTCDateTime
    created_by: UserID
    max_points: MaxPoints = 100

    def is_overdue(self, now: UTCDateTime) -> bool:
        return self.due_date < now


class AssignmentWithTeacher(Assignment):
    """An assignment as listed, attributed to its teacher"""

    teacher_name: str
