import datetime

from sqlalchemy import CheckConstraint, ForeignKey, MetaData, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import DateTime, String, Text

from classwork.model import AssignmentID, SubmissionID, TokenID, UserID

from .type import ShortUUIDKeyType

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        UserID: ShortUUIDKeyType(UserID),
        AssignmentID: ShortUUIDKeyType(AssignmentID),
        SubmissionID: ShortUUIDKeyType(SubmissionID),
        TokenID: ShortUUIDKeyType(TokenID),
        datetime.datetime: DateTime(timezone=True),
    }


class users(base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('teacher', 'student')", name="role"),)

    user_id: Mapped[UserID] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True)
    full_name: Mapped[str]
    role: Mapped[str] = mapped_column(String(16))
    password_hash: Mapped[str]
    created_at: Mapped[datetime.datetime]


class assignments(base):
    __tablename__ = "assignments"
    __table_args__ = (CheckConstraint("max_points > 0", name="max_points"),)

    assignment_id: Mapped[AssignmentID] = mapped_column(primary_key=True)
    title: Mapped[str]
    description: Mapped[str] = mapped_column(Text)
    due_date: Mapped[datetime.datetime]
    created_by: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"), index=True)
    max_points: Mapped[int]
    created_at: Mapped[datetime.datetime] = mapped_column(index=True)


class submissions(base):
    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submissions_assignment_student"),
        CheckConstraint("grade IS NULL OR grade >= 0", name="grade"),
        CheckConstraint(
            "(status = 'graded' AND grade IS NOT NULL) OR (status = 'submitted' AND grade IS NULL)",
            name="status",
        ),
    )

    submission_id: Mapped[SubmissionID] = mapped_column(primary_key=True)
    assignment_id: Mapped[AssignmentID] = mapped_column(ForeignKey("assignments.assignment_id"))
    student_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"), index=True)
    content: Mapped[str] = mapped_column(Text)
    submitted_at: Mapped[datetime.datetime]
    file_url: Mapped[str | None] = mapped_column(default=None)
    grade: Mapped[int | None] = mapped_column(default=None)
    feedback: Mapped[str | None] = mapped_column(Text, default=None)
    status: Mapped[str] = mapped_column(String(16), default="submitted")


class revoked_tokens(base):
    __tablename__ = "revoked_tokens"

    token_id: Mapped[TokenID] = mapped_column(primary_key=True)
    user_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"))
    expires_at: Mapped[datetime.datetime] = mapped_column(index=True)
    revoked_at: Mapped[datetime.datetime]
