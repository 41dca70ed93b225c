"""Submission ledger: one submission per student per assignment.

Students write the content of their own submission; the teacher who owns the
assignment writes its grade. Each write goes through a tagged update so that
neither side can touch the other's columns.
"""

import logging
import typing as t

import sqlalchemy.exc

from classwork.core import di, TimestampProvider
from classwork.errors import NotFound, ValidationError
from classwork.model import AssignmentID, ContentUpdate, GradeUpdate, Submission, SubmissionID, \
    SubmissionStatus, SubmissionWithStudent, User
from classwork.storage import assignment as assignment_storage
from classwork.storage import Session
from classwork.storage import submission as submission_storage

from .access import authorize, Operation
from .base import coerce_key, transaction

logger = logging.getLogger(__name__)


class Tally(t.NamedTuple):
    submitted: int
    graded: int


def tally(submissions: t.Iterable[Submission]) -> Tally:
    """Counts of submissions awaiting a grade and already graded"""
    submitted = graded = 0
    for s in submissions:
        if s.status is SubmissionStatus.Graded:
            graded += 1
        else:
            submitted += 1
    return Tally(submitted=submitted, graded=graded)


def check_content(content: t.Any) -> str:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("content", "must not be empty")
    return content


def submit_or_update(
    caller: User | None,
    assignment_id: AssignmentID | str,
    content: str,
    file_url: str | None = None,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    reject_late: bool = di.Provide["config.ledger.reject_late_submissions"],
) -> Submission:
    """Create the caller's submission, or overwrite its content.

    A resubmission replaces content and submitted_at, and file_url only when a
    new one is given; any grade already given is kept.
    """
    student = authorize(caller, Operation.SubmitOrUpdate)
    content = check_content(content)
    key = coerce_key(AssignmentID, assignment_id, "assignment")
    now = utcnow()

    with transaction(session):
        assignment = assignment_storage.get(key, session=session)
        if assignment is None:
            raise NotFound("assignment not found")
        if reject_late and assignment.is_overdue(now):
            raise ValidationError("due_date", "the due date has passed")

        existing = submission_storage.get(assignment_id=key, student_id=student.user_id, session=session)
        if existing is None:
            try:
                with session.begin_nested():
                    created = submission_storage.create(
                        assignment_id=key,
                        student_id=student.user_id,
                        content=content,
                        file_url=file_url,
                        submitted_at=now,
                        session=session,
                    )
            except sqlalchemy.exc.IntegrityError:
                # a concurrent first submission won the insert; fall through to an update
                existing = submission_storage.get(assignment_id=key, student_id=student.user_id, session=session)
                if existing is None:
                    raise
                logger.debug("lost submission insert race", extra={"submission_id": existing.submission_id})
            else:
                logger.info(
                    "submission created",
                    extra={
                        "submission_id": created.submission_id,
                        "assignment_id": key,
                        "student_id": student.user_id,
                        "has_file": file_url is not None,
                    },
                )
                return created

        change = ContentUpdate(content=content, file_url=file_url, submitted_at=now)
        updated = submission_storage.update(existing.submission_id, change, session=session)

    logger.info(
        "submission updated",
        extra={
            "submission_id": updated.submission_id,
            "assignment_id": key,
            "student_id": student.user_id,
            "has_file": file_url is not None,
            "status": updated.status.value,
        },
    )
    return updated


def grade_submission(
    caller: User | None,
    submission_id: SubmissionID | str,
    grade: int,
    feedback: str | None = None,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission:
    """Set grade and feedback together and mark the submission graded.

    Grading again with the same values leaves the submission as it was. An
    unknown submission id is a PermissionDenied, never a NotFound, so a teacher
    cannot learn of work on assignments they do not own.
    """
    teacher = authorize(caller, Operation.GradeSubmission, role_only=True)
    if isinstance(grade, bool) or not isinstance(grade, int):
        raise ValidationError("grade", "must be a whole number")
    if feedback is not None and not feedback.strip():
        feedback = None
    try:
        key: SubmissionID | None = coerce_key(SubmissionID, submission_id, "submission")
    except NotFound:
        key = None

    with transaction(session):
        submission = submission_storage.get(key, session=session) if key is not None else None
        assignment = assignment_storage.get(submission.assignment_id, session=session) if submission else None

        # a submission the caller cannot see is refused the same as one they do not own
        authorize(teacher, Operation.GradeSubmission, owner_id=assignment.created_by if assignment else None)
        assert key is not None and assignment is not None
        if not 0 <= grade <= assignment.max_points:
            raise ValidationError("grade", f"must be between 0 and {assignment.max_points}")

        graded = submission_storage.update(key, GradeUpdate(grade=grade, feedback=feedback), session=session)

    logger.info(
        "submission graded",
        extra={
            "submission_id": key,
            "assignment_id": assignment.assignment_id,
            "grade": grade,
            "max_points": assignment.max_points,
        },
    )
    return graded


def list_submissions_for_assignment(
    caller: User | None,
    assignment_id: AssignmentID | str,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[SubmissionWithStudent, ...]:
    """All submissions for an assignment the caller owns, most recent first."""
    teacher = authorize(caller, Operation.ListSubmissions, role_only=True)
    key = coerce_key(AssignmentID, assignment_id, "assignment")

    with transaction(session):
        assignment = assignment_storage.get(key, session=session)
        if assignment is None:
            raise NotFound("assignment not found")
        authorize(teacher, Operation.ListSubmissions, owner_id=assignment.created_by)
        return submission_storage.find(assignment_id=key, with_student=True, session=session)


def get_submission_for(
    caller: User | None,
    assignment_id: AssignmentID | str,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission:
    """The caller's own submission for an assignment; never anyone else's."""
    student = authorize(caller, Operation.GetSubmissionFor)
    key = coerce_key(AssignmentID, assignment_id, "submission")

    with transaction(session):
        submission = submission_storage.get(assignment_id=key, student_id=student.user_id, session=session)
    if submission is None:
        raise NotFound("submission not found")
    return submission
