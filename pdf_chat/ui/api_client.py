"""HTTP client the chat pages use to reach the backend."""

import logging
from typing import Optional

import httpx

from ..config import settings
from ..models import ActionResult, ConversationDetailResponse

logger = logging.getLogger(__name__)


class ChatApiError(Exception):
    """Raised when the backend cannot be reached or rejects a request."""


class ChatApiClient:
    """Thin async wrapper over the backend routes."""

    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = 120.0) -> None:
        self.base_url = base_url or settings.api_base_url
        self._transport = transport
        self._timeout = timeout

    def _client(self, token: Optional[str] = None) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=self._timeout,
            headers=headers,
        )

    async def _post_action(self, path: str, payload: dict, token: Optional[str] = None) -> ActionResult:
        async with self._client(token) as client:
            try:
                response = await client.post(path, json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ChatApiError(f"HTTP {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ChatApiError(f"Connection failed: {e}") from e
        return ActionResult.model_validate(response.json())

    async def new_chat(self, message: str, api_key: str, token: Optional[str] = None) -> ActionResult:
        return await self._post_action(
            "/actions/new-chat", {"message": message, "apiKey": api_key}, token
        )

    async def chat(self, message: str, api_key: str, conversation_id: str) -> ActionResult:
        return await self._post_action(
            "/actions/chat",
            {"message": message, "apiKey": api_key, "conversationId": conversation_id},
        )

    async def update_conversation(self, conversation_id: str, file_name: str, pdf_text: str) -> None:
        async with self._client() as client:
            try:
                response = await client.post(
                    "/api/updateConversation",
                    json={"id": conversation_id, "fileName": file_name, "pdfText": pdf_text},
                )
            except httpx.RequestError as e:
                raise ChatApiError(f"Connection failed: {e}") from e
        if response.status_code >= 400:
            raise ChatApiError("Failed to update Conversation data")

    async def fetch_pdf_name(self, conversation_id: str) -> Optional[str]:
        """Name of the attached PDF; any failure reads as no PDF."""
        async with self._client() as client:
            try:
                response = await client.get("/api/updateConversation", params={"id": conversation_id})
                response.raise_for_status()
                return response.json().get("pdfName") or None
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Error fetching PDF name: {e}")
                return None

    async def fetch_conversation(self, conversation_id: str, token: Optional[str]) -> Optional[ConversationDetailResponse]:
        async with self._client(token) as client:
            try:
                response = await client.get(f"/api/conversations/{conversation_id}")
            except httpx.RequestError as e:
                raise ChatApiError(f"Connection failed: {e}") from e
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise ChatApiError(f"HTTP {response.status_code}")
        return ConversationDetailResponse.model_validate(response.json())
