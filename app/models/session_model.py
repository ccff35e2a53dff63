# /classroom-ai-backend/app/models/session_model.py

from pydantic import Field
from typing import Any, Dict, List, Optional, Literal
from enum import Enum

from .base_model import CamelModel


class ModelType(str, Enum):
    GEMINI_PRO = "gemini-3-pro-preview"
    GEMINI_FLASH = "gemini-2.5-flash"
    GEMINI_IMAGE = "gemini-2.5-flash-image"


class Message(CamelModel):
    """
    One entry of a conversation. Immutable once appended, except `feedback`
    which a reviewing teacher may set later.
    """
    id: str
    role: Literal["user", "model"] = Field(..., description="Author of the message.")
    text: str
    timestamp: int = Field(..., description="Epoch milliseconds.")
    attachment: Optional[str] = Field(default=None, description="Base64-encoded image payload.")
    feedback: Optional[str] = Field(default=None, description="Teacher feedback on this message.")


class ChatSession(CamelModel):
    """
    One conversation thread owned by exactly one user. `messages` is kept in
    conversation order; every mutation is a full-record replace.
    """
    id: str
    user_id: str
    class_code: Optional[str] = Field(default=None, description="Absent for sessions created before classrooms existed.")
    title: str
    messages: List[Message] = Field(default_factory=list)
    created_at: int = Field(..., description="Creation time in epoch milliseconds.")
    model_id: str


# --- Request bodies ---

class NewSessionRequest(CamelModel):
    user_id: str
    class_code: Optional[str] = None
    model_id: str = ModelType.GEMINI_FLASH.value


class SendMessageRequest(CamelModel):
    text: str = Field(..., min_length=1)
    model_id: Optional[str] = Field(default=None, description="Switch model before sending.")


class ModelChangeRequest(CamelModel):
    model_id: str


class FeedbackRequest(CamelModel):
    feedback: str


class ChatFrame(CamelModel):
    """One client frame on the chat WebSocket: `focus` or `user_message`."""
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)
