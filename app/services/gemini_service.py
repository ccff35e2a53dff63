# /classroom-ai-backend/app/services/gemini_service.py

"""
The AI collaborator. Two capabilities, both keyed by the classroom's own
credential rather than a process-wide key:

- `converse`: history + new message + instruction -> reply text
- `generate_image`: prompt -> base64 image payload

Every SDK failure is mapped onto the fault taxonomy (AuthFault, ServiceFault,
NoContentFault); callers never see SDK exception types.
"""

import base64
import logging
from typing import Sequence, Union, Dict

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from ..models.session_model import Message, ModelType
from .faults import AuthFault, ServiceFault, NoContentFault

logger = logging.getLogger(__name__)

IMAGE_MODEL = ModelType.GEMINI_IMAGE.value
EMPTY_REPLY = "No response generated."
MISSING_KEY_MESSAGE = "API Key is missing. Please ask your teacher to configure the API Key in the settings."
SERVICE_ERROR_MESSAGE = "Failed to communicate with AI service."

HistoryItem = Union[Message, Dict[str, str]]


def _configure(credential: str) -> None:
    if not credential:
        raise AuthFault(MISSING_KEY_MESSAGE)
    # The SDK keeps one default client. It is configured and used before the
    # first await of each call, so concurrent requests do not mix credentials.
    genai.configure(api_key=credential)


def _is_auth_error(e: Exception) -> bool:
    if isinstance(e, (google_exceptions.PermissionDenied, google_exceptions.Unauthenticated)):
        return True
    return isinstance(e, google_exceptions.InvalidArgument) and "api key" in str(e).lower()


def _translate_error(e: Exception, context: str):
    logger.error("ERROR in %s with Gemini API: %s", context, e)
    if _is_auth_error(e):
        return AuthFault(f"The classroom API Key was rejected: {e}")
    return ServiceFault(SERVICE_ERROR_MESSAGE)


def _to_content(item: HistoryItem) -> Dict:
    if isinstance(item, Message):
        role, text = item.role, item.text
    else:
        role, text = item["role"], item["text"]
    return {"role": role, "parts": [text]}


async def converse(
    history: Sequence[HistoryItem],
    new_message: str,
    system_instruction: str,
    credential: str,
    model_id: str = ModelType.GEMINI_PRO.value,
) -> str:
    """Sends `new_message` on top of `history` and returns the reply text."""
    _configure(credential)
    try:
        model = genai.GenerativeModel(model_id, system_instruction=system_instruction or None)
        chat = model.start_chat(history=[_to_content(m) for m in history])
        response = await chat.send_message_async(new_message)
    except Exception as e:
        raise _translate_error(e, "converse") from e

    try:
        text = response.text
    except ValueError:
        # Raised by the SDK when the candidate carries no text parts.
        text = ""
    return text or EMPTY_REPLY


async def generate_image(prompt: str, credential: str) -> str:
    """Generates one image and returns it base64-encoded."""
    _configure(credential)
    try:
        model = genai.GenerativeModel(IMAGE_MODEL)
        response = await model.generate_content_async(prompt)
    except Exception as e:
        raise _translate_error(e, "generate_image") from e

    for candidate in (response.candidates or [])[:1]:
        for part in candidate.content.parts:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return base64.b64encode(inline.data).decode("ascii")

    raise NoContentFault("No image data returned from the model.")
