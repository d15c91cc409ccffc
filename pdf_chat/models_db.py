from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base
from .utils import generate_conversation_id


class Conversation(Base):
    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_conversation_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # JSON array of {"id", "question", "answer"} objects
    messages: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    pdf_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    pdf_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_id: Mapped[str] = mapped_column(String, index=True)  # Clerk user id
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
