"""Assignment routes: the dashboard listing and the teacher's create form."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from classwork.auth import AuthContext, get_current_user
from classwork.core import di, TimestampProvider
from classwork.model import AssignmentWithTeacher
from classwork.service import assignment as assignment_service

from ..view.assignment import AssignmentCreateRequest, AssignmentListResponse, AssignmentResponse

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


@router.post("", operation_id="create_assignment", status_code=status.HTTP_201_CREATED)
@di.inject
def create_assignment(
    request: AssignmentCreateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> AssignmentResponse:
    """Create a new assignment.

    Only teachers can create assignments.
    """
    assignment = assignment_service.create_assignment(
        auth.user,
        request.title,
        request.description,
        request.due_date,
        request.max_points,
        session=session,
        utcnow=utcnow,
    )
    created = AssignmentWithTeacher(**assignment.model_dump(), teacher_name=auth.user.full_name)
    return AssignmentResponse.from_assignment(created, utcnow())


@router.get("", operation_id="list_assignments")
@di.inject
def list_assignments(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> AssignmentListResponse:
    """Teachers see their own assignments, students see every assignment."""
    now = utcnow()
    assignments = assignment_service.list_assignments(auth.user, session=session)
    return AssignmentListResponse(assignments=[AssignmentResponse.from_assignment(a, now) for a in assignments])


@router.get("/{assignment_id}", operation_id="get_assignment")
@di.inject
def get_assignment(
    assignment_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> AssignmentResponse:
    assignment = assignment_service.get_assignment(auth.user, assignment_id, session=session)
    return AssignmentResponse.from_assignment(assignment, utcnow())
