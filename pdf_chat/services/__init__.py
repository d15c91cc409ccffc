"""
Services package for the PDF Chat application.
"""

from .llm_client_cache import LLMClientCache, get_client_cache
from .completion_service import CompletionService, CompletionError, get_completion_service
from .conversation_repository import ConversationRepository, ConversationNotFoundError
from .chat_actions import ChatActions, get_chat_actions
from .pdf_processor import PDFProcessor, PDFProcessingError

__all__ = [
    "LLMClientCache",
    "get_client_cache",
    "CompletionService",
    "CompletionError",
    "get_completion_service",
    "ConversationRepository",
    "ConversationNotFoundError",
    "ChatActions",
    "get_chat_actions",
    "PDFProcessor",
    "PDFProcessingError"
]
