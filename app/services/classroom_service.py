# /classroom-ai-backend/app/services/classroom_service.py

"""
The Classroom Registry: code generation, lookup-by-code and upsert-by-code over
the classroom collection.

`upsert` is the only mutation path and there is no delete. Lookups are exact
and case-sensitive against the stored (uppercase) code; callers normalize
user-entered codes with `normalize_code` first.
"""

import secrets
import string
import logging
from typing import List, Optional

from ..models.classroom_model import Classroom, ClassroomSettingsUpdate
from .storage_service import StorageService, STORAGE_KEYS
from .faults import ConfigFault
from .clock import now_ms

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
MAX_CODE_ATTEMPTS = 20

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a helpful and polite teaching assistant. "
    "Answer questions clearly and concisely suitable for students."
)


# --- Codes ---

def generate_code() -> str:
    """A random 6-character uppercase alphanumeric code."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(raw: Optional[str]) -> str:
    return (raw or "").strip().upper()


def _generate_unused_code(existing: List[Classroom]) -> str:
    taken = {c.code for c in existing}
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_code()
        if code not in taken:
            return code
        logger.info("Generated class code %s is already taken, retrying.", code)
    raise ConfigFault("Could not find a free class code. Please try again.")


# --- Reads ---

def list_all(db: StorageService) -> List[Classroom]:
    return db.load_collection(STORAGE_KEYS["CLASSROOMS"], Classroom)


def find_by_code(db: StorageService, code: str) -> Optional[Classroom]:
    """Exact match on the stored code. No case folding happens here."""
    return next((c for c in list_all(db) if c.code == code), None)


def find_for_teacher(db: StorageService, teacher_name: str) -> Optional[Classroom]:
    """
    Case-insensitive scan by teacher display name. Two teachers who pick the
    same name therefore share one classroom and its credential.
    """
    wanted = teacher_name.strip().lower()
    return next((c for c in list_all(db) if c.teacher_name.strip().lower() == wanted), None)


# --- Writes ---

def upsert(db: StorageService, classroom: Classroom) -> Classroom:
    """Replaces the record with the same code, or appends a new one."""
    classrooms = list_all(db)
    index = next((i for i, c in enumerate(classrooms) if c.code == classroom.code), None)
    if index is None:
        classrooms.append(classroom)
    else:
        classrooms[index] = classroom
    db.save_collection(STORAGE_KEYS["CLASSROOMS"], classrooms)
    return classroom


def create_for_teacher(db: StorageService, teacher_name: str) -> Classroom:
    """Always creates a new classroom; reuse by name is the caller's job."""
    classroom = Classroom(
        code=_generate_unused_code(list_all(db)),
        teacher_name=teacher_name,
        api_key="",
        system_instruction=DEFAULT_SYSTEM_INSTRUCTION,
        created_at=now_ms(),
    )
    upsert(db, classroom)
    logger.info("Created classroom %s for teacher %r", classroom.code, teacher_name)
    return classroom


def get_or_create_for_teacher(db: StorageService, teacher_name: str) -> Classroom:
    """The lookup-then-create pattern used by teacher login."""
    name = teacher_name.strip()
    existing = find_for_teacher(db, name)
    if existing:
        return existing
    return create_for_teacher(db, name)


def update_settings(db: StorageService, code: str, update: ClassroomSettingsUpdate) -> Classroom:
    """
    Teacher edit of the credential and/or instruction. Builds a full
    replacement record; code, teacher name and creation time are kept.
    """
    current = find_by_code(db, code)
    if current is None:
        raise ConfigFault(f"Classroom with code {code} not found.")
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ConfigFault("No update data provided.")
    updated = current.model_copy(update=changes)
    upsert(db, updated)
    logger.info("Updated settings of classroom %s (%s)", code, ", ".join(sorted(changes)))
    return updated
