# /classroom-ai-backend/app/services/auth_service.py

"""
Login flows and the last-logged-in-user snapshot.

There is no real authentication here. A student joins with an id and a class
code; a teacher "logs in" with a display name, which either finds their
classroom (case-insensitive name match) or creates one. The snapshot lets a
relaunched client restore its login without going through the form again.
"""

import logging
from typing import Optional, Tuple

from ..models.classroom_model import Classroom
from ..models.user_model import User, UserRole, LastUserSnapshot
from . import classroom_service
from .storage_service import StorageService, STORAGE_KEYS
from .faults import ConfigFault
from .result import Result, run_mutation

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Invalid Class Code. Please ask your teacher for the correct code."

Login = Tuple[User, Classroom]


def remember_user(db: StorageService, user: User, class_code: Optional[str]) -> None:
    db.save_record(STORAGE_KEYS["LAST_USER"], LastUserSnapshot(user=user, class_code=class_code))


def _login_student(db: StorageService, student_id: str, class_code: str) -> Login:
    student_id = (student_id or "").strip()
    if not student_id:
        raise ConfigFault("Please enter your Student ID.")
    code = classroom_service.normalize_code(class_code)
    if not code:
        raise ConfigFault("Please enter a Class Code.")
    classroom = classroom_service.find_by_code(db, code)
    if classroom is None:
        raise ConfigFault(INVALID_CODE_MESSAGE)

    user = User(id=student_id, role=UserRole.STUDENT, name=f"Student {student_id}", class_code=classroom.code)
    remember_user(db, user, classroom.code)
    logger.info("Student %s joined classroom %s", student_id, classroom.code)
    return user, classroom


def _login_teacher(db: StorageService, teacher_name: str) -> Login:
    name = (teacher_name or "").strip()
    if not name:
        raise ConfigFault("Please enter your name.")
    classroom = classroom_service.get_or_create_for_teacher(db, name)

    user = User(id=f"teacher-{classroom.code}", role=UserRole.TEACHER, name=name, class_code=classroom.code)
    remember_user(db, user, classroom.code)
    return user, classroom


def login_student(db: StorageService, student_id: str, class_code: str) -> Result[Login]:
    return run_mutation(_login_student, db, student_id, class_code)


def login_teacher(db: StorageService, teacher_name: str) -> Result[Login]:
    return run_mutation(_login_teacher, db, teacher_name)


def restore_last_user(db: StorageService) -> Optional[Login]:
    """
    The stored login, with its classroom re-read from the store. A snapshot
    whose classroom no longer resolves is ignored.
    """
    snapshot = db.load_record(STORAGE_KEYS["LAST_USER"], LastUserSnapshot)
    if snapshot is None:
        return None
    code = snapshot.class_code or snapshot.user.class_code
    classroom = classroom_service.find_by_code(db, code) if code else None
    if classroom is None:
        logger.info("Ignoring last-user snapshot for %s: classroom %s not found", snapshot.user.id, code)
        return None
    return snapshot.user, classroom


def logout(db: StorageService) -> Result[None]:
    return run_mutation(db.delete_key, STORAGE_KEYS["LAST_USER"])
