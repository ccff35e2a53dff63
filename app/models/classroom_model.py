# /classroom-ai-backend/app/models/classroom_model.py

from pydantic import Field
from typing import Optional

from .base_model import CamelModel


class Classroom(CamelModel):
    """
    The shared configuration scope students chat under. Identity is `code`,
    which never changes after creation. The whole record is replaced on edit.
    """
    code: str = Field(..., min_length=1, description="6-character class code, stored uppercase.")
    teacher_name: str = Field(..., description="Display name of the owning teacher.")
    api_key: str = Field(default="", description="Shared AI credential. Empty until the teacher sets it.")
    system_instruction: str = Field(..., description="Instruction text sent with every student request.")
    created_at: int = Field(..., description="Creation time in epoch milliseconds.")


class ClassroomSettingsUpdate(CamelModel):
    """
    Request body for a teacher editing their classroom. Unset fields keep
    their stored value.
    """
    api_key: Optional[str] = None
    system_instruction: Optional[str] = None


class ClassroomPublic(CamelModel):
    """What a student client sees: everything except the credential itself."""
    code: str
    teacher_name: str
    system_instruction: str
    has_api_key: bool
    created_at: int

    @classmethod
    def from_classroom(cls, classroom: Classroom) -> "ClassroomPublic":
        return cls(
            code=classroom.code,
            teacher_name=classroom.teacher_name,
            system_instruction=classroom.system_instruction,
            has_api_key=bool(classroom.api_key),
            created_at=classroom.created_at,
        )
