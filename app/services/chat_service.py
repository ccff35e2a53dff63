# /classroom-ai-backend/app/services/chat_service.py

"""
Chat orchestration: the "student sends a message" flow and the other
session mutations the UI triggers.

Failures of the AI collaborator never escape this module. They are turned
into a model-role message carrying the error text and persisted like any
other message, so the transcript explains itself. Storage and config faults
are returned as a failed `Result` for the router to surface.
"""

import logging
from typing import Optional

from ..models.classroom_model import Classroom
from ..models.session_model import ChatSession, Message, ModelType
from . import session_service, classroom_service, gemini_service
from .storage_service import StorageService
from .faults import AI_FAULTS, ClassroomFault, ConfigFault
from .result import Result, run_mutation
from .clock import id_generator, now_ms

logger = logging.getLogger(__name__)

TITLE_LENGTH = 30
IMAGE_REPLY_TEXT = "Here is the image you requested:"
MISSING_KEY_TEXT = (
    "⚠️ SYSTEM ERROR: The Teacher has not configured the API Key yet. "
    "Please ask your teacher to enter the API Key in the 'API Configuration' tab of the dashboard."
)


# --- Helper Functions ---

def _generate_title(first_message: str) -> str:
    return first_message[:TITLE_LENGTH] + ("..." if len(first_message) > TITLE_LENGTH else "")


def _new_message(role: str, text: str, attachment: Optional[str] = None) -> Message:
    return Message(
        id=id_generator.next_id(),
        role=role,
        text=text,
        timestamp=now_ms(),
        attachment=attachment,
    )


def _append(session: ChatSession, message: Message, **changes) -> ChatSession:
    return session.model_copy(update={"messages": [*session.messages, message], **changes})


def _resolve_classroom(db: StorageService, session: ChatSession, classroom: Optional[Classroom]) -> Classroom:
    if classroom is not None:
        return classroom
    found = classroom_service.find_by_code(db, session.class_code) if session.class_code else None
    if found is None:
        raise ConfigFault("Classroom configuration could not be loaded.")
    return found


async def _reply_for(session: ChatSession, text: str, model_id: str, classroom: Classroom) -> Message:
    """Asks the AI collaborator for the next model message. Never raises AI faults."""
    try:
        if model_id == ModelType.GEMINI_IMAGE.value:
            image = await gemini_service.generate_image(text, classroom.api_key)
            return _new_message("model", IMAGE_REPLY_TEXT, attachment=image)
        reply = await gemini_service.converse(
            session.messages,
            text,
            classroom.system_instruction,
            classroom.api_key,
            model_id,
        )
        return _new_message("model", reply)
    except AI_FAULTS as e:
        logger.warning("AI call failed for session %s: %s", session.id, e)
        return _new_message("model", f"Error: {e}")


# --- Public Service Functions ---

async def send_message(
    db: StorageService,
    session_id: str,
    text: str,
    classroom: Optional[Classroom] = None,
    model_id: Optional[str] = None,
) -> Result[ChatSession]:
    """
    Appends the user's message, asks the AI for a reply and persists both.

    The session is saved once the user message is in (so it survives a slow
    or failed AI call) and once more with the reply. `classroom` is the
    caller's cached configuration; when omitted it is read from the store.
    """
    try:
        session = session_service.get(db, session_id)
        if session is None:
            raise ConfigFault(f"Chat session with ID {session_id} not found.")
        classroom = _resolve_classroom(db, session, classroom)
        text = text.strip()
        if not text:
            raise ConfigFault("Please enter a non-empty message.")
        model_id = model_id or session.model_id or ModelType.GEMINI_PRO.value

        history_session = session
        title = _generate_title(text) if not session.messages else session.title
        session = _append(session, _new_message("user", text), title=title, model_id=model_id)
        session_service.save(db, session)

        if not classroom.api_key:
            session = _append(session, _new_message("model", MISSING_KEY_TEXT))
            session_service.save(db, session)
            return Result.success(session)

        reply = await _reply_for(history_session, text, model_id, classroom)
        session = _append(session, reply)
        session_service.save(db, session)
        return Result.success(session)
    except ClassroomFault as e:
        logger.error("send_message failed for session %s: %s", session_id, e)
        return Result.failure(e)


def start_chat(
    db: StorageService,
    user_id: str,
    class_code: Optional[str] = None,
    model_id: str = ModelType.GEMINI_FLASH.value,
) -> Result[ChatSession]:
    return run_mutation(session_service.create, db, user_id, model_id, class_code)


def _change_model(db: StorageService, session_id: str, model_id: str) -> ChatSession:
    session = session_service.get(db, session_id)
    if session is None:
        raise ConfigFault(f"Chat session with ID {session_id} not found.")
    return session_service.save(db, session.model_copy(update={"model_id": model_id}))


def change_model(db: StorageService, session_id: str, model_id: str) -> Result[ChatSession]:
    return run_mutation(_change_model, db, session_id, model_id)


def delete_chat(db: StorageService, session_id: str) -> Result[None]:
    return run_mutation(session_service.delete, db, session_id)


def leave_feedback(db: StorageService, session_id: str, message_id: str, feedback: str) -> Result[ChatSession]:
    return run_mutation(session_service.annotate_message, db, session_id, message_id, feedback)
