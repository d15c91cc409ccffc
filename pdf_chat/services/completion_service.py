"""
Completion service for answering questions, optionally grounded in PDF text.
"""

from typing import Optional
import logging

from langchain_core.messages import HumanMessage, SystemMessage

from ..utils import measure_time, log_processing_info
from .llm_client_cache import LLMClientCache, get_client_cache

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."

CONTEXT_SYSTEM_PROMPT = """You are a helpful AI assistant. Use the following PDF content as context to answer questions. Only answer based on this context. If the question cannot be answered from this context, say so clearly.

Context:
{context}"""


class CompletionError(Exception):
    """Raised when the LLM provider call fails."""


def build_system_prompt(context: Optional[str]) -> str:
    """Pick the system prompt for a request."""
    if context:
        return CONTEXT_SYSTEM_PROMPT.format(context=context)
    return DEFAULT_SYSTEM_PROMPT


def _content_to_text(content) -> str:
    # Gemini may return a list of content parts instead of a plain string
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class CompletionService:
    """Service for requesting one chat completion."""

    def __init__(self, client_cache: Optional[LLMClientCache] = None):
        self.client_cache = client_cache or get_client_cache()

    @measure_time
    def complete(self, api_key: str, message: str, context: Optional[str] = None) -> str:
        """
        Request a single completion.

        Args:
            api_key: Caller's LLM API key
            message: User's message
            context: Extracted PDF text, if any

        Returns:
            The answer text

        Raises:
            CompletionError: If the provider call fails
        """
        system_prompt = build_system_prompt(context)

        try:
            llm = self.client_cache.get_or_create(api_key)
            response = llm.invoke([
                SystemMessage(content=system_prompt),
                HumanMessage(content=message)
            ])
        except Exception as e:
            logger.error(f"Completion request failed: {e}")
            raise CompletionError(str(e)) from e

        answer = _content_to_text(response.content)

        log_processing_info("Completion generated", {
            "question_length": len(message),
            "context_length": len(context or ""),
            "answer_length": len(answer)
        })

        return answer


_completion_service: Optional[CompletionService] = None


def get_completion_service() -> CompletionService:
    """FastAPI dependency returning the shared completion service."""
    global _completion_service
    if _completion_service is None:
        _completion_service = CompletionService()
    return _completion_service
