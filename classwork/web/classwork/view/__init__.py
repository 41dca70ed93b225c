"""View models for the Classwork JSON API."""

__all__ = [
    # Auth views
    "LoginRequest",
    "LoginResponse",
    "SignUpRequest",
    "TokenResponse",
    "UserResponse",
    # Assignment views
    "AssignmentCreateRequest",
    "AssignmentListResponse",
    "AssignmentResponse",
    # Submission views
    "GradeRequest",
    "GradedSubmissionResponse",
    "SubmissionListResponse",
    "SubmissionResponse",
]

from .assignment import AssignmentCreateRequest, AssignmentListResponse, AssignmentResponse
from .auth import LoginRequest, LoginResponse, SignUpRequest, TokenResponse, UserResponse
from .submission import GradedSubmissionResponse, GradeRequest, SubmissionListResponse, SubmissionResponse
