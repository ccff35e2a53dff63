# /classroom-ai-backend/app/services/dashboard_service.py

# --- Core Imports ---
import logging
import pandas as pd

from ..models.dashboard_model import ClassroomSummary, StudentActivity
from .storage_service import StorageService
from . import session_service

logger = logging.getLogger(__name__)


def get_classroom_summary(db: StorageService, class_code: str) -> ClassroomSummary:
    """
    Calculates the teacher's overview of a classroom: headline counts and the
    per-student activity rows behind the "Student Logs" view, most recently
    active student first.
    """
    sessions = session_service.list_by_classroom(db, class_code)
    if not sessions:
        return ClassroomSummary(code=class_code, student_count=0, session_count=0, message_count=0)

    frame = pd.DataFrame(
        [
            {
                "user_id": s.user_id,
                "messages": len(s.messages),
                # A session with no messages counts as active when it was created.
                "last_active": max([s.created_at, *(m.timestamp for m in s.messages)]),
            }
            for s in sessions
        ]
    )
    per_student = (
        frame.groupby("user_id", sort=False)
        .agg(session_count=("messages", "size"), message_count=("messages", "sum"), last_active=("last_active", "max"))
        .reset_index()
        .sort_values("last_active", ascending=False, kind="stable")
    )

    students = [
        StudentActivity(
            user_id=row.user_id,
            session_count=int(row.session_count),
            message_count=int(row.message_count),
            last_active=int(row.last_active),
        )
        for row in per_student.itertuples(index=False)
    ]
    return ClassroomSummary(
        code=class_code,
        student_count=len(students),
        session_count=len(sessions),
        message_count=int(frame["messages"].sum()),
        students=students,
    )
