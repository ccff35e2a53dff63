# /classroom-ai-backend/app/models/dashboard_model.py

# --- Core Imports ---
from pydantic import Field
from typing import List, Optional

from .base_model import CamelModel


class StudentActivity(CamelModel):
    """One row of the teacher's "Student Logs" view."""
    user_id: str
    session_count: int
    message_count: int
    last_active: Optional[int] = Field(default=None, description="Newest message or session timestamp (epoch ms).")


class ClassroomSummary(CamelModel):
    """
    Defines the data contract for the classroom overview the teacher sees on
    the dashboard's "Quick Info Cards", plus the per-student breakdown.
    """
    code: str
    student_count: int = Field(..., description="Distinct users with at least one stored session.", examples=[12])
    session_count: int = Field(..., examples=[40])
    message_count: int = Field(..., examples=[318])
    students: List[StudentActivity] = Field(default_factory=list)
