"""Tests for the submission ledger."""

from __future__ import annotations

import datetime
import typing as t

import pytest
from sqlalchemy.orm import Session

from classwork.core import TimestampProvider
from classwork.errors import AuthError, NotFound, PermissionDenied, ValidationError
from classwork.model import Assignment, AssignmentID, Submission, SubmissionID, SubmissionStatus, User, UserRole
from classwork.service import assignment as assignment_service
from classwork.service import submission as submission_service
from classwork.storage import submission as submission_storage

Now = datetime.datetime(2026, 3, 2, 9, 30, tzinfo=datetime.UTC)


def clock(at: datetime.datetime) -> TimestampProvider:
    return lambda: at


class TestSubmitOrUpdate(object):
    def test_first_submission_is_created(
        self,
        db_session: Session,
        student: User,
        assignment_factory: t.Callable[..., Assignment],
        utcnow: TimestampProvider,
    ) -> None:
        assignment = assignment_factory()

        submission = submission_service.submit_or_update(
            student, assignment.assignment_id, "My answer", session=db_session, utcnow=utcnow
        )

        assert submission.student_id == student.user_id
        assert submission.assignment_id == assignment.assignment_id
        assert submission.status is SubmissionStatus.Submitted
        assert submission.submitted_at == Now
        assert submission.grade is None

    def test_resubmission_updates_the_same_record(
        self,
        db_session: Session,
        student: User,
        assignment_factory: t.Callable[..., Assignment],
    ) -> None:
        assignment = assignment_factory()
        later = Now + datetime.timedelta(hours=3)

        first = submission_service.submit_or_update(
            student, assignment.assignment_id, "Draft", "/uploads/draft.pdf", session=db_session, utcnow=clock(Now)
        )
        second = submission_service.submit_or_update(
            student, assignment.assignment_id, "Final", session=db_session, utcnow=clock(later)
        )

        assert second.submission_id == first.submission_id
        assert second.content == "Final"
        assert second.submitted_at == later
        # no new file given, so the old one stays attached
        assert second.file_url == "/uploads/draft.pdf"
        with db_session.begin():
            assert len(submission_storage.find(assignment_id=assignment.assignment_id, session=db_session)) == 1

    def test_resubmission_replaces_file_when_given(
        self,
        db_session: Session,
        student: User,
        assignment_factory: t.Callable[..., Assignment],
        utcnow: TimestampProvider,
    ) -> None:
        assignment = assignment_factory()
        submission_service.submit_or_update(
            student, assignment.assignment_id, "Draft", "/uploads/a.pdf", session=db_session, utcnow=utcnow
        )
        updated = submission_service.submit_or_update(
            student, assignment.assignment_id, "Draft", "/uploads/b.pdf", session=db_session, utcnow=utcnow
        )
        assert updated.file_url == "/uploads/b.pdf"

    def test_resubmission_keeps_grade(
        self,
        db_session: Session,
        teacher: User,
        student: User,
        assignment_factory: t.Callable[..., Assignment],
        utcnow: TimestampProvider,
    ) -> None:
        assignment = assignment_factory()
        submission = submission_service.submit_or_update(
            student, assignment.assignment_id, "Draft", session=db_session, utcnow=utcnow
        )
        submission_service.grade_submission(teacher, submission.submission_id, 70, "Good", session=db_session)

        resubmitted = submission_service.submit_or_update(
            student, assignment.assignment_id, "Improved", session=db_session, utcnow=utcnow
        )

        assert resubmitted.content == "Improved"
        assert resubmitted.grade == 70
        assert resubmitted.feedback == "Good"
        assert resubmitted.status is SubmissionStatus.Graded

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_blank_content_is_rejected(
        self,
        content: str,
        db_session: Session,
        student: User,
        assignment_factory: t.Callable[..., Assignment],
        utcnow: TimestampProvider,
    ) -> None:
        assignment = assignment_factory()
        with pytest.raises(ValidationError) as exc_info:
            submission_service.submit_or_update(
                student, assignment.assignment_id, content, session=db_session, utcnow=utcnow
            )
        assert exc_info.value.field == "content"

    def test_unknown_assignment_is_not_found(
        self, db_session: Session, student: User, utcnow: TimestampProvider
    ) -> None:
        with pytest.raises(NotFound):
            submission_service.submit_or_update(
                student, AssignmentID(), "My answer", session=db_session, utcnow=utcnow
            )

    def test_teachers_cannot_submit(
        self,
        db_session: Session,
        teacher: User,
        assignment_factory: t.Callable[..., Assignment],
        utcnow: TimestampProvider,
    ) -> None:
        assignment = assignment_factory()
        with pytest.raises(PermissionDenied):
            submission_service.submit_or_update(
                teacher, assignment.assignment_id, "My answer", session=db_session, utcnow=utcnow
            )

    def test_anonymous_cannot_submit(
        self, db_session: Session, assignment_factory: t.Callable[..., Assignment], utcnow: TimestampProvider
    ) -> None:
        assignment = assignment_factory()
        with pytest.raises(AuthError):
            submission_service.submit_or_update(
                None, assignment.assignment_id, "My answer", session=db_session, utcnow=utcnow
            )

    def test_late_submission_is_accepted_by_default(
        self, db_session: Session, student: User, assignment_factory: t.Callable[..., Assignment]
    ) -> None:
        assignment = assignment_factory(due_date=Now - datetime.timedelta(days=1))

        submission = submission_service.submit_or_update(
            student, assignment.assignment_id, "Sorry it's late", session=db_session, utcnow=clock(Now)
        )

        assert submission.status is SubmissionStatus.Submitted

    def test_late_submission_rejected_when_configured(
        self, db_session: Session, student: User, assignment_factory: t.Callable[..., Assignment]
    ) -> None:
        assignment = assignment_factory(due_date=Now - datetime.timedelta(days=1))

        with pytest.raises(ValidationError) as exc_info:
            submission_service.submit_or_update(
                student,
                assignment.assignment_id,
                "Sorry it's late",
                session=db_session,
                utcnow=clock(Now),
                reject_late=True,
            )
        assert exc_info.value.field == "due_date"

    def test_lost_insert_race_falls_back_to_update(
        self,
        monkeypatch: pytest.MonkeyPatch,
        db_session: Session,
        student: User,
        assignment_factory: t.Callable[..., Assignment],
        submission_factory: t.Callable[..., Submission],
        utcnow: TimestampProvider,
    ) -> None:
        assignment = assignment_factory()
        raced = submission_factory(assignment, content="written elsewhere")

        # the first lookup misses the row, as if it had been inserted just after
        real_get = submission_storage.get
        lookups: list[dict[str, t.Any]] = []

        def stale_get(*args: t.Any, **kwargs: t.Any) -> Submission | None:
            lookups.append(kwargs)
            return None if len(lookups) == 1 else real_get(*args, **kwargs)

        monkeypatch.setattr(submission_storage, "get", stale_get)

        submission = submission_service.submit_or_update(
            student, assignment.assignment_id, "written here", session=db_session, utcnow=utcnow
        )

        assert submission.submission_id == raced.submission_id
        assert submission.content == "written here"


class TestGradeSubmission(object):
    @pytest.fixture
    def submission(
        self, assignment_factory: t.Callable[..., Assignment], submission_factory: t.Callable[..., Submission]
    ) -> Submission:
        return submission_factory(assignment_factory(max_points=10))

    @pytest.mark.parametrize("grade", [0, 7, 10])
    def test_grade_within_range(
        self, grade: int, db_session: Session, teacher: User, submission: Submission
    ) -> None:
        graded = submission_service.grade_submission(
            teacher, submission.submission_id, grade, "Well argued", session=db_session
        )

        assert graded.grade == grade
        assert graded.feedback == "Well argued"
        assert graded.status is SubmissionStatus.Graded
        assert graded.content == submission.content
        assert graded.submitted_at == submission.submitted_at

    @pytest.mark.parametrize("grade", [-1, 11, 100])
    def test_grade_out_of_range(self, grade: int, db_session: Session, teacher: User, submission: Submission) -> None:
        with pytest.raises(ValidationError) as exc_info:
            submission_service.grade_submission(teacher, submission.submission_id, grade, session=db_session)
        assert exc_info.value.field == "grade"

        with db_session.begin():
            unchanged = submission_storage.get(submission.submission_id, session=db_session)
        assert unchanged is not None
        assert unchanged.status is SubmissionStatus.Submitted

    @pytest.mark.parametrize("grade", [True, 7.5, "7", None])
    def test_grade_must_be_an_integer(
        self, grade: t.Any, db_session: Session, teacher: User, submission: Submission
    ) -> None:
        with pytest.raises(ValidationError):
            submission_service.grade_submission(teacher, submission.submission_id, grade, session=db_session)

    def test_grading_is_idempotent(self, db_session: Session, teacher: User, submission: Submission) -> None:
        once = submission_service.grade_submission(teacher, submission.submission_id, 8, "Nice", session=db_session)
        twice = submission_service.grade_submission(teacher, submission.submission_id, 8, "Nice", session=db_session)

        assert once == twice

    def test_regrading_replaces_grade(self, db_session: Session, teacher: User, submission: Submission) -> None:
        submission_service.grade_submission(teacher, submission.submission_id, 8, "Nice", session=db_session)
        regraded = submission_service.grade_submission(teacher, submission.submission_id, 9, session=db_session)

        assert regraded.grade == 9
        assert regraded.feedback is None

    def test_blank_feedback_is_dropped(self, db_session: Session, teacher: User, submission: Submission) -> None:
        graded = submission_service.grade_submission(teacher, submission.submission_id, 5, "  ", session=db_session)
        assert graded.feedback is None

    def test_other_teacher_is_denied(
        self, db_session: Session, user_factory: t.Callable[..., User], submission: Submission
    ) -> None:
        other = user_factory(role=UserRole.Teacher)
        with pytest.raises(PermissionDenied):
            submission_service.grade_submission(other, submission.submission_id, 5, session=db_session)

    def test_student_is_denied(self, db_session: Session, student: User, submission: Submission) -> None:
        with pytest.raises(PermissionDenied):
            submission_service.grade_submission(student, submission.submission_id, 5, session=db_session)

    @pytest.mark.parametrize("submission_id", [SubmissionID(), "subm$missing", "not-an-id"])
    def test_unknown_submission_is_denied_like_anothers(
        self, submission_id: str, db_session: Session, teacher: User
    ) -> None:
        with pytest.raises(PermissionDenied):
            submission_service.grade_submission(teacher, submission_id, 5, session=db_session)


class TestListSubmissions(object):
    def test_owner_sees_submissions_newest_first_with_names(
        self,
        db_session: Session,
        teacher: User,
        user_factory: t.Callable[..., User],
        assignment_factory: t.Callable[..., Assignment],
        submission_factory: t.Callable[..., Submission],
    ) -> None:
        assignment = assignment_factory()
        ann = user_factory(full_name="Ann")
        bob = user_factory(full_name="Bob")
        first = submission_factory(assignment, by=ann, submitted_at=Now - datetime.timedelta(hours=1))
        second = submission_factory(assignment, by=bob, submitted_at=Now)
        submission_service.grade_submission(teacher, first.submission_id, 50, session=db_session)

        listed = submission_service.list_submissions_for_assignment(
            teacher, assignment.assignment_id, session=db_session
        )

        assert [s.submission_id for s in listed] == [second.submission_id, first.submission_id]
        assert [s.student_name for s in listed] == ["Bob", "Ann"]
        assert submission_service.tally(listed) == submission_service.Tally(submitted=1, graded=1)

    def test_other_teacher_is_denied(
        self,
        db_session: Session,
        user_factory: t.Callable[..., User],
        assignment_factory: t.Callable[..., Assignment],
    ) -> None:
        assignment = assignment_factory()
        other = user_factory(role=UserRole.Teacher)
        with pytest.raises(PermissionDenied):
            submission_service.list_submissions_for_assignment(other, assignment.assignment_id, session=db_session)

    def test_student_is_denied(
        self, db_session: Session, student: User, assignment_factory: t.Callable[..., Assignment]
    ) -> None:
        assignment = assignment_factory()
        with pytest.raises(PermissionDenied):
            submission_service.list_submissions_for_assignment(student, assignment.assignment_id, session=db_session)

    def test_unknown_assignment_is_not_found(self, db_session: Session, teacher: User) -> None:
        with pytest.raises(NotFound):
            submission_service.list_submissions_for_assignment(teacher, AssignmentID(), session=db_session)


class TestGetSubmissionFor(object):
    def test_student_gets_own_submission(
        self,
        db_session: Session,
        student: User,
        assignment_factory: t.Callable[..., Assignment],
        submission_factory: t.Callable[..., Submission],
    ) -> None:
        assignment = assignment_factory()
        submission = submission_factory(assignment)

        fetched = submission_service.get_submission_for(student, assignment.assignment_id, session=db_session)

        assert fetched.submission_id == submission.submission_id

    def test_never_returns_another_students_work(
        self,
        db_session: Session,
        user_factory: t.Callable[..., User],
        assignment_factory: t.Callable[..., Assignment],
        submission_factory: t.Callable[..., Submission],
    ) -> None:
        assignment = assignment_factory()
        submission_factory(assignment)
        classmate = user_factory(role=UserRole.Student)

        with pytest.raises(NotFound):
            submission_service.get_submission_for(classmate, assignment.assignment_id, session=db_session)

    def test_teacher_is_denied(
        self, db_session: Session, teacher: User, assignment_factory: t.Callable[..., Assignment]
    ) -> None:
        assignment = assignment_factory()
        with pytest.raises(PermissionDenied):
            submission_service.get_submission_for(teacher, assignment.assignment_id, session=db_session)


class TestGradingRoundTrip(object):
    def test_student_sees_grade_and_feedback(
        self, db_session: Session, teacher: User, student: User, utcnow: TimestampProvider
    ) -> None:
        due = Now + datetime.timedelta(days=7)
        assignment = assignment_service.create_assignment(
            teacher, "Essay", "Write 500 words.", due, 100, session=db_session, utcnow=utcnow
        )
        submitted = submission_service.submit_or_update(
            student, assignment.assignment_id, "essay text", session=db_session, utcnow=utcnow
        )

        submission_service.grade_submission(teacher, submitted.submission_id, 85, "Good work", session=db_session)
        fetched = submission_service.get_submission_for(student, assignment.assignment_id, session=db_session)

        assert fetched.submission_id == submitted.submission_id
        assert fetched.status is SubmissionStatus.Graded
        assert fetched.grade == 85
        assert fetched.feedback == "Good work"
        assert fetched.content == "essay text"
        assert fetched.submitted_at == submitted.submitted_at
