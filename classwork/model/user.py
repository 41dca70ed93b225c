import enum

import pydantic as p
from pydantic import EmailStr

from .base import WithCreated
from .id import UserID


class UserRole(enum.Enum):
    Teacher = "teacher"
    Student = "student"


class User(WithCreated):
    user_id: UserID
    email: EmailStr
    full_name: str
    role: UserRole
    password_hash: str | None = p.Field(default=None, exclude=True, repr=False)

    @property
    def is_teacher(self) -> bool:
        return self.role is UserRole.Teacher

    @property
    def is_student(self) -> bool:
        return self.role is UserRole.Student
