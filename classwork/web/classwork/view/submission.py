"""View models for submissions and grading."""

from __future__ import annotations

import datetime

import pydantic as p

from classwork.model import AssignmentID, BaseModel, Submission, SubmissionID, SubmissionStatus, \
    SubmissionWithStudent, UserID


class SubmissionResponse(BaseModel):
    submission_id: SubmissionID
    assignment_id: AssignmentID
    student_id: UserID
    content: str
    file_url: str | None = None
    submitted_at: datetime.datetime
    grade: int | None = None
    feedback: str | None = None
    status: SubmissionStatus

    @classmethod
    def from_submission(cls, submission: Submission) -> SubmissionResponse:
        return cls(**submission.model_dump(include=set(cls.model_fields)))


class GradedSubmissionResponse(SubmissionResponse):
    """A submission on the teacher's grading page."""

    student_name: str

    @classmethod
    def from_listing(cls, submission: SubmissionWithStudent) -> GradedSubmissionResponse:
        return cls(**submission.model_dump(include=set(cls.model_fields)))


class SubmissionListResponse(BaseModel):
    submissions: list[GradedSubmissionResponse]
    total: int
    submitted: int
    graded: int


class GradeRequest(BaseModel):
    """Request body for grading a submission."""

    grade: p.StrictInt
    feedback: str | None = None
