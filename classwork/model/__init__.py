__all__ = [
    # Base
    "BaseModel",
    "UTCDateTime",
    "WithCreated",
    "as_utc",
    # Enums
    "DeploymentEnvironment",
    # ID Types
    "AssignmentID",
    "SubmissionID",
    "TokenID",
    "UserID",
    # Users
    "User",
    "UserRole",
    # Assignments
    "Assignment",
    "AssignmentWithTeacher",
    "MaxPoints",
    # Submissions
    "ContentUpdate",
    "GradeUpdate",
    "Submission",
    "SubmissionStatus",
    "SubmissionWithStudent",
    "SubmissionUpdate",
]

from .assignment import Assignment, AssignmentWithTeacher, MaxPoints
from .base import as_utc, BaseModel, UTCDateTime, WithCreated
from .enum import DeploymentEnvironment
from .id import AssignmentID, SubmissionID, TokenID, UserID
from .submission import ContentUpdate, GradeUpdate, Submission, SubmissionStatus, SubmissionUpdate, \
    SubmissionWithStudent
from .user import User, UserRole
