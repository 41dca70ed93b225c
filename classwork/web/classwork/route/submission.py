"""Submission routes: a student's own submission, and the teacher's grading page."""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from classwork.auth import AuthContext, get_current_user
from classwork.core import di
from classwork.service import attachment as attachment_service
from classwork.service import submission as submission_service
from classwork.service.attachment import Attachment

from ..view.submission import GradedSubmissionResponse, GradeRequest, SubmissionListResponse, SubmissionResponse

router = APIRouter(prefix="/api", tags=["submissions"])


@router.put("/assignments/{assignment_id}/submission", operation_id="submit_assignment")
@di.inject
async def submit_assignment(
    assignment_id: str,
    content: str = Form(""),
    file: UploadFile | None = File(None),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionResponse:
    """Submit work for an assignment, or replace the previous submission.

    The optional file is stored before the submission is written.
    """
    attachment: Attachment | None = None
    if file is not None and file.filename:
        attachment = Attachment(
            filename=file.filename,
            data=await file.read(),
            content_type=file.content_type,
        )

    submission = await attachment_service.submit_with_attachment(
        auth.user, assignment_id, content, attachment, session=session
    )
    return SubmissionResponse.from_submission(submission)


@router.get("/assignments/{assignment_id}/submission", operation_id="get_my_submission")
@di.inject
def get_my_submission(
    assignment_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionResponse:
    """The caller's own submission for an assignment."""
    submission = submission_service.get_submission_for(auth.user, assignment_id, session=session)
    return SubmissionResponse.from_submission(submission)


@router.get("/assignments/{assignment_id}/submissions", operation_id="list_submissions")
@di.inject
def list_submissions(
    assignment_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionListResponse:
    """All submissions for an assignment, for the teacher who created it."""
    submissions = submission_service.list_submissions_for_assignment(auth.user, assignment_id, session=session)
    counts = submission_service.tally(submissions)
    return SubmissionListResponse(
        submissions=[GradedSubmissionResponse.from_listing(s) for s in submissions],
        total=len(submissions),
        submitted=counts.submitted,
        graded=counts.graded,
    )


@router.post("/submissions/{submission_id}/grade", operation_id="grade_submission")
@di.inject
def grade_submission(
    submission_id: str,
    request: GradeRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionResponse:
    submission = submission_service.grade_submission(
        auth.user, submission_id, request.grade, request.feedback, session=session
    )
    return SubmissionResponse.from_submission(submission)
