"""Who may do what.

Every registry and ledger operation passes through `authorize` before it
touches a record. Operations that depend on owning an assignment are checked
twice: once on role alone, before the record is read, and again with the
record's owner.
"""

import enum
import logging
import typing as t

from classwork.errors import AuthError, PermissionDenied
from classwork.model import User, UserID, UserRole

logger = logging.getLogger(__name__)


class Operation(enum.Enum):
    CreateAssignment = "create_assignment"
    ListAssignments = "list_assignments"
    GetAssignment = "get_assignment"
    SubmitOrUpdate = "submit_or_update"
    GetSubmissionFor = "get_submission_for"
    ListSubmissions = "list_submissions_for_assignment"
    GradeSubmission = "grade_submission"


class Rule(t.NamedTuple):
    roles: frozenset[UserRole]
    owner_only: bool = False


Anyone = frozenset(UserRole)
Teachers = frozenset({UserRole.Teacher})
Students = frozenset({UserRole.Student})

Rules: t.Final[t.Mapping[Operation, Rule]] = {
    Operation.CreateAssignment: Rule(Teachers),
    Operation.ListSubmissions: Rule(Teachers, owner_only=True),
    Operation.GradeSubmission: Rule(Teachers, owner_only=True),
    Operation.SubmitOrUpdate: Rule(Students),
    Operation.GetSubmissionFor: Rule(Students),
    Operation.ListAssignments: Rule(Anyone),
    Operation.GetAssignment: Rule(Anyone),
}


def is_permitted(caller: User | None, operation: Operation, owner_id: UserID | None = None) -> bool:
    """Whether caller may perform operation on a record owned by owner_id.

    Owner-only operations are never permitted without an owner_id.
    """
    if caller is None:
        return False
    rule = Rules[operation]
    if caller.role not in rule.roles:
        return False
    if rule.owner_only:
        return owner_id is not None and owner_id == caller.user_id
    return True


def authorize(
    caller: User | None, operation: Operation, owner_id: UserID | None = None, *, role_only: bool = False
) -> User:
    """Raise unless caller may perform operation; returns the caller.

    With `role_only`, ownership is not considered yet. Anonymous callers are
    rejected with AuthError before any role check.
    """
    if caller is None:
        raise AuthError("authentication required")

    rule = Rules[operation]
    if role_only:
        permitted = caller.role in rule.roles
    else:
        permitted = is_permitted(caller, operation, owner_id)

    if not permitted:
        logger.info(
            "operation denied",
            extra={
                "operation": operation.value,
                "user_id": caller.user_id,
                "role": caller.role.value,
            },
        )
        raise PermissionDenied("you are not permitted to do that")
    return caller
