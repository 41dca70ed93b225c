"""Initial schema for Classwork

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""

import typing as t

from alembic import op
from sqlalchemy.schema import CheckConstraint, Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import DateTime, Integer, String, Text

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        Column("user_id", String(22), primary_key=True),
        Column("email", String(320), nullable=False),
        Column("full_name", String, nullable=False),
        Column("role", String(16), nullable=False),
        Column("password_hash", String, nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("role IN ('teacher', 'student')", name="ck_users_role"),
    )

    # Assignments
    op.create_table(
        "assignments",
        Column("assignment_id", String(22), primary_key=True),
        Column("title", String, nullable=False),
        Column("description", Text, nullable=False),
        Column("due_date", DateTime(timezone=True), nullable=False),
        Column("created_by", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("max_points", Integer, nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        CheckConstraint("max_points > 0", name="ck_assignments_max_points"),
    )
    op.create_index("ix_assignments_created_by", "assignments", ["created_by"])
    op.create_index("ix_assignments_created_at", "assignments", ["created_at"])

    # Submissions: one per student per assignment
    op.create_table(
        "submissions",
        Column("submission_id", String(22), primary_key=True),
        Column("assignment_id", String(22), ForeignKey("assignments.assignment_id"), nullable=False),
        Column("student_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("content", Text, nullable=False),
        Column("submitted_at", DateTime(timezone=True), nullable=False),
        Column("file_url", String, nullable=True),
        Column("grade", Integer, nullable=True),
        Column("feedback", Text, nullable=True),
        Column("status", String(16), nullable=False, server_default="submitted"),
        UniqueConstraint("assignment_id", "student_id", name="uq_submissions_assignment_student"),
        CheckConstraint("grade IS NULL OR grade >= 0", name="ck_submissions_grade"),
        CheckConstraint(
            "(status = 'graded' AND grade IS NOT NULL) OR (status = 'submitted' AND grade IS NULL)",
            name="ck_submissions_status",
        ),
    )
    op.create_index("ix_submissions_student_id", "submissions", ["student_id"])

    # Revoked session tokens, kept until they would have expired
    op.create_table(
        "revoked_tokens",
        Column("token_id", String(22), primary_key=True),
        Column("user_id", String(22), ForeignKey("users.user_id"), nullable=False),
        Column("expires_at", DateTime(timezone=True), nullable=False),
        Column("revoked_at", DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_revoked_tokens_expires_at", "revoked_tokens", ["expires_at"])


def downgrade() -> None:
    op.drop_table("revoked_tokens")
    op.drop_table("submissions")
    op.drop_table("assignments")
    op.drop_table("users")
