# /classroom-ai-backend/app/models/user_model.py

from pydantic import Field
from typing import Optional
from enum import Enum

from .base_model import CamelModel
from .classroom_model import Classroom, ClassroomPublic


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"


class User(CamelModel):
    id: str
    role: UserRole
    name: Optional[str] = None
    class_code: Optional[str] = Field(default=None, description="Links the user to a classroom configuration.")


class StudentLogin(CamelModel):
    student_id: str
    class_code: str


class TeacherLogin(CamelModel):
    teacher_name: str


class LastUserSnapshot(CamelModel):
    """Stored under the last-user key so a relaunch can restore the login."""
    user: User
    class_code: Optional[str] = None


class TeacherLoginResponse(CamelModel):
    user: User
    classroom: Classroom


class StudentLoginResponse(CamelModel):
    user: User
    classroom: ClassroomPublic
