import enum
import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseModel, UTCDateTime
from .id import AssignmentID, SubmissionID, UserID


class SubmissionStatus(enum.Enum):
    Submitted = "submitted"
    Graded = "graded"


class Submission(BaseModel):
    submission_id: SubmissionID
    assignment_id: AssignmentID
    student_id: UserID

    content: str
    file_url: str | None = None
    submitted_at: UTCDateTime

    grade: int | None = None
    feedback: str | None = None
    status: SubmissionStatus = SubmissionStatus.Submitted

    @p.model_validator(mode="after")
    def check_graded(self) -> t.Self:
        if (self.status is SubmissionStatus.Graded) != (self.grade is not None):
            raise ValueError("status must be graded exactly when a grade is present")
        return self


class ContentUpdate(BaseModel):
    """A student's resubmission.

    A None file_url keeps whatever attachment the submission already has.
    """

    model_config = p.ConfigDict(frozen=True)

    kind: t.Literal["content"] = "content"
    content: str
    file_url: str | None = None
    submitted_at: UTCDateTime


class GradeUpdate(BaseModel):
    """A teacher's grade; always moves the submission to graded."""

    model_config = p.ConfigDict(frozen=True)

    kind: t.Literal["grade"] = "grade"
    grade: t.Annotated[int, p.Strict(), ant.Ge(0)]
    feedback: str | None = None

    @property
    def status(self) -> SubmissionStatus:
        return SubmissionStatus.Graded


class SubmissionWithStudent(Submission):
    """A submission as listed for grading, attributed to its student"""

    student_name: str


SubmissionUpdate = t.Annotated[ContentUpdate | GradeUpdate, p.Field(discriminator="kind")]
