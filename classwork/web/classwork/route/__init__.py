"""Route aggregation for the Classwork web application."""

from fastapi import APIRouter

from . import assignment, auth, submission

router = APIRouter()
router.include_router(auth.router)
router.include_router(assignment.router)
router.include_router(submission.router)
