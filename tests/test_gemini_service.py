# /tests/test_gemini_service.py

import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from google.api_core import exceptions as google_exceptions

from app.models.session_model import Message
from app.services import gemini_service
from app.services.faults import AuthFault, ServiceFault, NoContentFault


@pytest.fixture
def fake_genai():
    """Replaces the SDK module so no network call is ever made."""
    with patch.object(gemini_service, "genai") as mocked:
        yield mocked


def chat_returning(fake_genai, **kwargs):
    chat = fake_genai.GenerativeModel.return_value.start_chat.return_value
    chat.send_message_async = AsyncMock(**kwargs)
    return chat


class BlockedResponse:
    @property
    def text(self):
        raise ValueError("The response has no text parts.")


def image_response(*payloads):
    parts = [SimpleNamespace(inline_data=SimpleNamespace(data=p)) for p in payloads]
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


# --- converse ---

@pytest.mark.asyncio
async def test_converse_sends_history_and_instruction(fake_genai):
    chat = chat_returning(fake_genai, return_value=SimpleNamespace(text="Hi there"))
    history = [Message(id="1", role="user", text="Hello", timestamp=1), {"role": "model", "text": "Hey"}]

    reply = await gemini_service.converse(history, "How are you?", "Be kind.", "key-1", "gemini-2.5-flash")

    assert reply == "Hi there"
    fake_genai.configure.assert_called_once_with(api_key="key-1")
    fake_genai.GenerativeModel.assert_called_once_with("gemini-2.5-flash", system_instruction="Be kind.")
    fake_genai.GenerativeModel.return_value.start_chat.assert_called_once_with(history=[
        {"role": "user", "parts": ["Hello"]},
        {"role": "model", "parts": ["Hey"]},
    ])
    chat.send_message_async.assert_awaited_once_with("How are you?")


@pytest.mark.asyncio
async def test_converse_without_credential_raises_auth_fault(fake_genai):
    with pytest.raises(AuthFault, match="API Key is missing"):
        await gemini_service.converse([], "Hi", "s", "")
    fake_genai.configure.assert_not_called()


@pytest.mark.asyncio
async def test_converse_empty_reply_gets_placeholder(fake_genai):
    chat_returning(fake_genai, return_value=BlockedResponse())
    assert await gemini_service.converse([], "Hi", "s", "k") == gemini_service.EMPTY_REPLY


@pytest.mark.parametrize("error", [
    google_exceptions.PermissionDenied("forbidden"),
    google_exceptions.Unauthenticated("who are you"),
    google_exceptions.InvalidArgument("API key not valid. Please pass a valid API key."),
])
@pytest.mark.asyncio
async def test_rejected_credential_raises_auth_fault(fake_genai, error):
    chat_returning(fake_genai, side_effect=error)
    with pytest.raises(AuthFault):
        await gemini_service.converse([], "Hi", "s", "bad-key")


@pytest.mark.parametrize("error", [
    google_exceptions.ServiceUnavailable("try later"),
    google_exceptions.InvalidArgument("unsupported model"),
    RuntimeError("socket closed"),
])
@pytest.mark.asyncio
async def test_other_errors_raise_service_fault(fake_genai, error):
    chat_returning(fake_genai, side_effect=error)
    with pytest.raises(ServiceFault, match="Failed to communicate"):
        await gemini_service.converse([], "Hi", "s", "k")


# --- generate_image ---

@pytest.mark.asyncio
async def test_generate_image_returns_base64(fake_genai):
    model = fake_genai.GenerativeModel.return_value
    model.generate_content_async = AsyncMock(return_value=image_response(b"", b"png"))

    assert await gemini_service.generate_image("A cat", "k") == "cG5n"
    fake_genai.GenerativeModel.assert_called_once_with(gemini_service.IMAGE_MODEL)


@pytest.mark.asyncio
async def test_generate_image_without_payload_raises_no_content(fake_genai):
    model = fake_genai.GenerativeModel.return_value
    model.generate_content_async = AsyncMock(return_value=image_response(b""))
    with pytest.raises(NoContentFault):
        await gemini_service.generate_image("A cat", "k")


@pytest.mark.asyncio
async def test_generate_image_transport_error_raises_service_fault(fake_genai):
    model = fake_genai.GenerativeModel.return_value
    model.generate_content_async = AsyncMock(side_effect=google_exceptions.InternalServerError("boom"))
    with pytest.raises(ServiceFault) as excinfo:
        await gemini_service.generate_image("A cat", "k")
    assert not isinstance(excinfo.value, NoContentFault)


@pytest.mark.asyncio
async def test_generate_image_without_credential(fake_genai):
    with pytest.raises(AuthFault):
        await gemini_service.generate_image("A cat", "")
