from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import MessageEntry, parse_messages
from ..models_db import Conversation

PLACEHOLDER_NAME = "Default Name"
PLACEHOLDER_USER_ID = "defaultUserId"


class ConversationNotFoundError(Exception):
    """Raised when a conversation ID has no record."""

    def __init__(self, conversation_id: str):
        super().__init__("Conversation not found")
        self.conversation_id = conversation_id


class ConversationRepository:
    def create(self, db: Session, *, name: str, user_id: str, messages: List[MessageEntry]) -> Conversation:
        conversation = Conversation(
            name=name,
            user_id=user_id,
            messages=[m.model_dump() for m in messages],
        )
        db.add(conversation)
        db.commit()
        db.refresh(conversation)
        return conversation

    def get(self, db: Session, conversation_id: str) -> Optional[Conversation]:
        return db.get(Conversation, conversation_id)

    def get_for_user(self, db: Session, user_id: str, conversation_id: str) -> Optional[Conversation]:
        conversation = db.get(Conversation, conversation_id)
        if not conversation or conversation.user_id != user_id:
            return None
        return conversation

    def list_for_user(self, db: Session, user_id: str) -> List[Conversation]:
        return db.scalars(
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())
        ).all()

    def get_pdf_text(self, db: Session, conversation_id: str) -> str:
        conversation = self.get(db, conversation_id)
        if not conversation:
            raise ConversationNotFoundError(conversation_id)
        return conversation.pdf_text or ""

    def append_message(self, db: Session, conversation_id: str, message: MessageEntry) -> Conversation:
        """Append one pair under a row lock so concurrent turns are not lost.

        The lock only holds on PostgreSQL. SQLite ignores `FOR UPDATE`.
        """
        conversation = db.scalars(
            select(Conversation)
            .where(Conversation.id == conversation_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()
        if not conversation:
            db.rollback()
            raise ConversationNotFoundError(conversation_id)

        existing = parse_messages(conversation.messages or [])
        conversation.messages = [m.model_dump() for m in existing] + [message.model_dump()]
        db.commit()
        db.refresh(conversation)
        return conversation

    def upsert_pdf(self, db: Session, *, conversation_id: str, pdf_name: str, pdf_text: str) -> Conversation:
        conversation = db.get(Conversation, conversation_id)
        if conversation:
            conversation.pdf_name = pdf_name
            conversation.pdf_text = pdf_text
        else:
            conversation = Conversation(
                id=conversation_id,
                name=PLACEHOLDER_NAME,
                messages=[],
                pdf_name=pdf_name,
                pdf_text=pdf_text,
                user_id=PLACEHOLDER_USER_ID,
            )
            db.add(conversation)
        db.commit()
        db.refresh(conversation)
        return conversation

    def find_pdf_name(self, db: Session, conversation_id: str):
        """Return a row with `pdf_name`, or None when the conversation is absent."""
        return db.execute(
            select(Conversation.pdf_name).where(Conversation.id == conversation_id)
        ).first()
