"""
Process-wide cache of LLM clients keyed by API key.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import settings

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]


def create_gemini_client(api_key: str) -> ChatGoogleGenerativeAI:
    """Build a chat model bound to one API key."""
    return ChatGoogleGenerativeAI(
        model=settings.google_chat_model,
        api_key=api_key,
        temperature=settings.google_temperature
    )


class LLMClientCache:
    """Memoizing lookup table from API key to client handle.

    Entries are never evicted. Inserts are guarded so concurrent first use
    of the same key builds a single client.
    """

    def __init__(self, factory: Optional[ClientFactory] = None):
        self._factory = factory or create_gemini_client
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_or_create(self, api_key: str) -> Any:
        client = self._clients.get(api_key)
        if client is not None:
            return client

        with self._lock:
            client = self._clients.get(api_key)
            if client is None:
                client = self._factory(api_key)
                self._clients[api_key] = client
                logger.info(f"LLM client created (cached clients: {len(self._clients)})")
            return client

    def clear(self) -> None:
        with self._lock:
            self._clients.clear()

    def __contains__(self, api_key: str) -> bool:
        return api_key in self._clients

    def __len__(self) -> int:
        return len(self._clients)


_client_cache: Optional[LLMClientCache] = None
_client_cache_lock = threading.Lock()


def get_client_cache() -> LLMClientCache:
    """Get the process-wide client cache."""
    global _client_cache
    if _client_cache is None:
        with _client_cache_lock:
            if _client_cache is None:
                _client_cache = LLMClientCache()
    return _client_cache
