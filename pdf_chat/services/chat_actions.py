"""
Chat actions: start a conversation or continue an existing one.
"""

from typing import Optional
import logging

from sqlalchemy.orm import Session as OrmSession

from ..auth import ClerkUser
from ..config import settings
from ..models import ActionResult, ChatRequest, MessageEntry, NewChatRequest
from ..utils import chat_path, generate_random_id
from .completion_service import CompletionService, get_completion_service
from .conversation_repository import ConversationRepository

logger = logging.getLogger(__name__)

MESSAGE_ID_LENGTH = 8


class ChatActions:
    """Orchestrates completion requests and conversation writes."""

    def __init__(self, completion_service: Optional[CompletionService] = None,
                 conversations: Optional[ConversationRepository] = None):
        self.completion_service = completion_service or get_completion_service()
        self.conversations = conversations or ConversationRepository()

    def new_chat(self, db: OrmSession, user: Optional[ClerkUser], request: NewChatRequest) -> ActionResult:
        """
        Start a conversation seeded with one question/answer pair.

        Returns a redirect to the login page when there is no user, a redirect
        to the new conversation on success, or an error message.
        """
        if user is None:
            return ActionResult(redirect=settings.login_path)

        try:
            answer = self.completion_service.complete(request.api_key, request.message, None)

            entry = MessageEntry(
                id=generate_random_id(MESSAGE_ID_LENGTH),
                question=request.message,
                answer=answer,
            )
            conversation = self.conversations.create(
                db,
                name=request.message,
                user_id=user.user_id,
                messages=[entry],
            )
        except Exception as e:
            logger.error(f"Failed to start conversation for user {user.user_id}: {e}")
            return ActionResult(message=str(e))

        logger.info(f"Conversation {conversation.id} created for user {user.user_id}")
        return ActionResult(redirect=chat_path(conversation.id))

    def chat(self, db: OrmSession, request: ChatRequest) -> ActionResult:
        """
        Append one question/answer pair to an existing conversation.

        The stored PDF text, if any, is the answering context.
        """
        try:
            context = self.conversations.get_pdf_text(db, request.conversation_id)
            answer = self.completion_service.complete(request.api_key, request.message, context)

            entry = MessageEntry(
                id=generate_random_id(MESSAGE_ID_LENGTH),
                question=request.message,
                answer=answer,
            )
            self.conversations.append_message(db, request.conversation_id, entry)
        except Exception as e:
            logger.error(f"Failed to continue conversation {request.conversation_id}: {e}")
            return ActionResult(message=str(e))

        return ActionResult(revalidate=chat_path(request.conversation_id))


_chat_actions: Optional[ChatActions] = None


def get_chat_actions() -> ChatActions:
    """FastAPI dependency returning the shared chat actions."""
    global _chat_actions
    if _chat_actions is None:
        _chat_actions = ChatActions()
    return _chat_actions
