"""Tests for the HTTP client used by the chat pages."""

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import httpx
import pytest
from httpx import ASGITransport

from pdf_chat.auth import ClerkUser
from pdf_chat.main import app
from pdf_chat.services import ChatActions, get_chat_actions
from pdf_chat.ui.api_client import ChatApiClient, ChatApiError


@pytest.fixture
async def api_client(chat_actions: ChatActions) -> AsyncGenerator[ChatApiClient, None]:
    app.dependency_overrides[get_chat_actions] = lambda: chat_actions
    yield ChatApiClient(base_url="http://test", transport=ASGITransport(app=app))
    app.dependency_overrides.pop(get_chat_actions, None)


def _unreachable() -> ChatApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return ChatApiClient(base_url="http://test", transport=httpx.MockTransport(handler))


class TestChatFlow:
    async def test_new_chat_then_continue(self, api_client: ChatApiClient, signed_in: ClerkUser) -> None:
        result = await api_client.new_chat("Summarize this", "key")
        assert result.redirect and result.redirect.startswith("/chat/")
        conversation_id = result.redirect.removeprefix("/chat/")

        result = await api_client.chat("And then?", "key", conversation_id)
        assert result.revalidate == f"/chat/{conversation_id}"

        detail = await api_client.fetch_conversation(conversation_id, "token")
        assert [m.question for m in detail.messages] == ["Summarize this", "And then?"]

    async def test_action_error_message(self, api_client: ChatApiClient, fake_llm: MagicMock) -> None:
        await api_client.update_conversation("conv-1", "report.pdf", "Alpha Beta")
        fake_llm.invoke.side_effect = RuntimeError("Invalid API Key")

        result = await api_client.chat("Hello", "bad", "conv-1")

        assert result.is_error
        assert result.message == "Invalid API Key"

    async def test_unknown_conversation_fetch(self, api_client: ChatApiClient, signed_in: ClerkUser) -> None:
        assert await api_client.fetch_conversation("missing", "token") is None

    async def test_unreachable_backend_raises(self) -> None:
        with pytest.raises(ChatApiError, match="Connection failed"):
            await _unreachable().chat("Hello", "key", "conv-1")


class TestPdfCalls:
    async def test_update_then_lookup(self, api_client: ChatApiClient) -> None:
        await api_client.update_conversation("conv-1", "report.pdf", "Alpha Beta")

        assert await api_client.fetch_pdf_name("conv-1") == "report.pdf"

    async def test_update_rejected(self, api_client: ChatApiClient) -> None:
        with pytest.raises(ChatApiError, match="Failed to update Conversation data"):
            await api_client.update_conversation("", "report.pdf", "Alpha Beta")

    async def test_lookup_falls_back_to_no_pdf(self, api_client: ChatApiClient) -> None:
        assert await api_client.fetch_pdf_name("missing") is None

    async def test_lookup_unreachable_backend_is_no_pdf(self) -> None:
        assert await _unreachable().fetch_pdf_name("conv-1") is None
