# /classroom-ai-backend/app/services/session_service.py

"""
The Session Ledger: CRUD over the session collection, keyed by session id,
with a per-user retention cap applied on every save.

All writes are whole-collection read-modify-write cycles through the storage
facade. Nothing here is safe against a second process writing the same store
at the same time; the last write wins.
"""

import logging
from typing import List, Optional

from ..models.session_model import ChatSession, Message, ModelType
from .storage_service import StorageService, STORAGE_KEYS
from .faults import ConfigFault
from .clock import id_generator

logger = logging.getLogger(__name__)

RETENTION_CAP = 20
DEFAULT_TITLE = "New Chat"


def _load_all(db: StorageService) -> List[ChatSession]:
    return db.load_collection(STORAGE_KEYS["SESSIONS"], ChatSession)


def _newest_first(sessions: List[ChatSession]) -> List[ChatSession]:
    # sorted() is stable, so equal createdAt values keep their stored order.
    return sorted(sessions, key=lambda s: s.created_at, reverse=True)


# --- Reads ---

def list_by_user(db: StorageService, user_id: str) -> List[ChatSession]:
    return _newest_first([s for s in _load_all(db) if s.user_id == user_id])


def list_by_classroom(db: StorageService, class_code: str) -> List[ChatSession]:
    """Every session created under a classroom, for the teacher's review."""
    return _newest_first([s for s in _load_all(db) if s.class_code == class_code])


def get(db: StorageService, session_id: str) -> Optional[ChatSession]:
    return next((s for s in _load_all(db) if s.id == session_id), None)


# --- Writes ---

def save(db: StorageService, session: ChatSession) -> ChatSession:
    """
    Upserts `session` by id, then evicts the owner's oldest sessions beyond
    RETENTION_CAP. Other users' sessions are never touched. One write.
    """
    all_sessions = [s for s in _load_all(db) if s.id != session.id]
    all_sessions.append(session)

    user_sessions = _newest_first([s for s in all_sessions if s.user_id == session.user_id])
    if len(user_sessions) > RETENTION_CAP:
        keep_ids = {s.id for s in user_sessions[:RETENTION_CAP]}
        evicted = [s.id for s in user_sessions[RETENTION_CAP:]]
        all_sessions = [
            s for s in all_sessions
            if s.user_id != session.user_id or s.id in keep_ids
        ]
        logger.info("Evicted sessions %s of user %s (retention cap %d)", evicted, session.user_id, RETENTION_CAP)

    db.save_collection(STORAGE_KEYS["SESSIONS"], all_sessions)
    logger.debug("Saved session %s for user %s", session.id, session.user_id)
    return session


def create(
    db: StorageService,
    user_id: str,
    model_id: str = ModelType.GEMINI_FLASH.value,
    class_code: Optional[str] = None,
) -> ChatSession:
    """Builds an empty session with a time-derived id and persists it."""
    created_at = id_generator.next_value()
    session = ChatSession(
        id=str(created_at),
        user_id=user_id,
        class_code=class_code,
        title=DEFAULT_TITLE,
        messages=[],
        created_at=created_at,
        model_id=model_id,
    )
    return save(db, session)


def delete(db: StorageService, session_id: str) -> None:
    """Removes the session if present. An unknown id is a no-op."""
    all_sessions = _load_all(db)
    remaining = [s for s in all_sessions if s.id != session_id]
    if len(remaining) == len(all_sessions):
        logger.debug("Delete of unknown session %s ignored", session_id)
        return
    db.save_collection(STORAGE_KEYS["SESSIONS"], remaining)
    logger.info("Deleted session %s", session_id)


def annotate_message(db: StorageService, session_id: str, message_id: str, feedback: str) -> ChatSession:
    """Sets reviewer feedback on one message, as a full replace of the session."""
    session = get(db, session_id)
    if session is None:
        raise ConfigFault(f"Chat session with ID {session_id} not found.")
    if not any(m.id == message_id for m in session.messages):
        raise ConfigFault(f"Message with ID {message_id} not found in session {session_id}.")

    messages: List[Message] = [
        m.model_copy(update={"feedback": feedback}) if m.id == message_id else m
        for m in session.messages
    ]
    return save(db, session.model_copy(update={"messages": messages}))
