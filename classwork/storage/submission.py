from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from classwork.core import di
from classwork.model import AssignmentID, ContentUpdate, GradeUpdate, Submission, SubmissionID, SubmissionStatus, \
    SubmissionUpdate, SubmissionWithStudent, UserID

from . import Session
from .table import submissions, users


def get(
    submission_id: SubmissionID | None = None,
    *,
    assignment_id: AssignmentID | None = None,
    student_id: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission | None:
    """Get a submission by ID, or by its (assignment, student) pair."""
    if submission_id is not None:
        if assignment_id is not None or student_id is not None:
            raise ValueError("Pass either submission_id or assignment_id with student_id")
        stmt = sqla.select(submissions.__table__).where(submissions.submission_id == submission_id)
    elif assignment_id is not None and student_id is not None:
        stmt = sqla.select(submissions.__table__).where(
            submissions.assignment_id == assignment_id,
            submissions.student_id == student_id,
        )
    else:
        raise ValueError("Either submission_id or both assignment_id and student_id must be provided")

    row = session.execute(stmt).mappings().one_or_none()
    return Submission(**row) if row else None


@t.overload
def find(
    *,
    assignment_id: AssignmentID | None = ...,
    student_id: UserID | None = ...,
    with_student: t.Literal[False] = ...,
    session: Session = ...,
) -> tuple[Submission, ...]: ...


@t.overload
def find(
    *,
    assignment_id: AssignmentID | None = ...,
    student_id: UserID | None = ...,
    with_student: t.Literal[True],
    session: Session = ...,
) -> tuple[SubmissionWithStudent, ...]: ...


def find(
    *,
    assignment_id: AssignmentID | None = None,
    student_id: UserID | None = None,
    with_student: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Submission, ...] | tuple[SubmissionWithStudent, ...]:
    """Find submissions, most recently submitted first."""
    if with_student:
        stmt = sqla.select(submissions.__table__, users.full_name.label("student_name")).join(
            users, users.user_id == submissions.student_id
        )
    else:
        stmt = sqla.select(submissions.__table__)
    if assignment_id is not None:
        stmt = stmt.where(submissions.assignment_id == assignment_id)
    if student_id is not None:
        stmt = stmt.where(submissions.student_id == student_id)
    stmt = stmt.order_by(submissions.submitted_at.desc(), submissions.submission_id)

    rows = session.execute(stmt).mappings().all()
    if with_student:
        return tuple(SubmissionWithStudent(**row) for row in rows)
    return tuple(Submission(**row) for row in rows)


def create(
    *,
    assignment_id: AssignmentID,
    student_id: UserID,
    content: str,
    submitted_at: datetime.datetime,
    file_url: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission:
    """Create a new submission in the submitted state.

    A second submission for the same (assignment, student) pair raises
    sqlalchemy's IntegrityError.
    """
    submission_id = SubmissionID()
    stmt = sqla.insert(submissions).values(
        submission_id=submission_id,
        assignment_id=assignment_id,
        student_id=student_id,
        content=content,
        file_url=file_url,
        submitted_at=submitted_at,
        status=SubmissionStatus.Submitted.value,
    )
    session.execute(stmt)
    session.flush()
    result = get(submission_id, session=session)
    assert result is not None
    return result


def update(
    submission_id: SubmissionID,
    change: SubmissionUpdate,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission:
    """Apply a content or grade change to a submission.

    A content change never touches the grade columns and keeps the existing
    file_url when none is given; a grade change writes grade, feedback and
    status together.

    Raises:
        KeyError: If submission_id does not correspond to a submission
    """
    values: dict[str, t.Any]
    match change:
        case ContentUpdate():
            values = {"content": change.content, "submitted_at": change.submitted_at}
            if change.file_url is not None:
                values["file_url"] = change.file_url
        case GradeUpdate():
            values = {"grade": change.grade, "feedback": change.feedback, "status": change.status.value}

    stmt = sqla.update(submissions).where(submissions.submission_id == submission_id).values(**values)
    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Submission {submission_id} not found")

    session.flush()
    updated = get(submission_id, session=session)
    assert updated is not None
    return updated
