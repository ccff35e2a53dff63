# /classroom-ai-backend/app/routers/sessions_router.py

import logging
from pydantic import ValidationError
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status
from typing import List

from ..models.classroom_model import Classroom, ClassroomPublic
from ..models.session_model import (
    ChatFrame,
    ChatSession,
    NewSessionRequest,
    SendMessageRequest,
    ModelChangeRequest,
    FeedbackRequest,
)
from ..services import chat_service, session_service
from ..services.config_sync import ConfigSyncController, FocusSource, PollingSource
from ..services.faults import ConfigFault
from ..services.storage_service import StorageService, get_storage_service
from .result_handling import unwrap

logger = logging.getLogger(__name__)

router = APIRouter()

# --- REST ENDPOINTS FOR SESSION MANAGEMENT ---

@router.get("", response_model=List[ChatSession], summary="Get a User's Chat History")
def get_user_sessions(user_id: str, db: StorageService = Depends(get_storage_service)):
    return session_service.list_by_user(db, user_id)


@router.post("", response_model=ChatSession, status_code=status.HTTP_201_CREATED, summary="Start a New Chat")
def create_session(request: NewSessionRequest, db: StorageService = Depends(get_storage_service)):
    return unwrap(chat_service.start_chat(db, request.user_id, request.class_code, request.model_id))


@router.get("/{session_id}", response_model=ChatSession, summary="Get a Single Chat Session")
def get_session(session_id: str, db: StorageService = Depends(get_storage_service)):
    session = session_service.get(db, session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Chat session with ID {session_id} not found.")
    return session


@router.put("/{session_id}/model", response_model=ChatSession, summary="Switch the Model of a Chat")
def change_session_model(session_id: str, request: ModelChangeRequest, db: StorageService = Depends(get_storage_service)):
    return unwrap(chat_service.change_model(db, session_id, request.model_id))


@router.post("/{session_id}/messages", response_model=ChatSession, summary="Send a Message")
async def send_message(session_id: str, request: SendMessageRequest, db: StorageService = Depends(get_storage_service)):
    result = await chat_service.send_message(db, session_id, request.text, model_id=request.model_id)
    return unwrap(result)


@router.put(
    "/{session_id}/messages/{message_id}/feedback",
    response_model=ChatSession,
    summary="Leave Teacher Feedback on a Message",
)
def leave_feedback(
    session_id: str,
    message_id: str,
    request: FeedbackRequest,
    db: StorageService = Depends(get_storage_service),
):
    return unwrap(chat_service.leave_feedback(db, session_id, message_id, request.feedback))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a Chat Session")
def delete_session(session_id: str, db: StorageService = Depends(get_storage_service)):
    # Deleting an unknown id is not an error.
    unwrap(chat_service.delete_chat(db, session_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- REAL-TIME WEBSOCKET ENDPOINT ---

def _session_frame(session: ChatSession) -> dict:
    return {"type": "session", "payload": session.model_dump(mode="json", by_alias=True, exclude_none=True)}


def _error_frame(message: str) -> dict:
    return {"type": "error", "payload": {"message": message}}


@router.websocket("/ws/{session_id}")
async def websocket_endpoint(
    websocket: WebSocket,
    session_id: str,
    db: StorageService = Depends(get_storage_service),
):
    session = session_service.get(db, session_id)
    if not session or not session.class_code:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()

    async def push_config(classroom: Classroom):
        public = ClassroomPublic.from_classroom(classroom)
        await websocket.send_json({"type": "config_updated", "payload": public.model_dump(mode="json", by_alias=True)})

    controller = ConfigSyncController.for_storage(db, on_change=push_config)
    try:
        controller.load(session.class_code)
    except ConfigFault as e:
        await websocket.send_json(_error_frame(str(e)))
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    focus = FocusSource()
    with controller.start(PollingSource(), focus):
        try:
            while True:
                data = await websocket.receive_text()
                try:
                    frame = ChatFrame.model_validate_json(data)
                    request = SendMessageRequest.model_validate(frame.payload) if frame.type == "user_message" else None
                except ValidationError:
                    await websocket.send_json(_error_frame("Malformed message."))
                    continue

                if frame.type == "focus":
                    focus.fire()
                elif request is not None:
                    result = await chat_service.send_message(
                        db,
                        session_id,
                        request.text,
                        classroom=controller.classroom,
                        model_id=request.model_id,
                    )
                    if result.ok:
                        await websocket.send_json(_session_frame(result.value))
                    else:
                        await websocket.send_json(_error_frame(result.message))
        except WebSocketDisconnect:
            logger.info("Client disconnected from chat session: %s", session_id)
