"""
Pydantic models for request/response validation.
"""

from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class CamelModel(BaseModel):
    """Base model serialized with the camelCase names the web client uses."""
    model_config = ConfigDict(populate_by_name=True)


class MessageEntry(BaseModel):
    """One question/answer turn stored inside a conversation."""
    id: str = Field(..., description="Short random message ID")
    question: str = Field(..., description="User's question")
    answer: str = Field(..., description="Generated answer")


MessageEntryList = TypeAdapter(List[MessageEntry])


def parse_messages(raw) -> List[MessageEntry]:
    """Validate a stored JSON messages array."""
    return MessageEntryList.validate_python(raw)


class ConversationRecord(CamelModel):
    """Full persisted conversation record."""
    id: str
    name: str
    messages: List[MessageEntry] = Field(default_factory=list)
    pdf_name: Optional[str] = Field(default=None, alias="pdfName")
    pdf_text: Optional[str] = Field(default=None, alias="pdfText")
    user_id: str = Field(..., alias="userId")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_row(cls, row) -> "ConversationRecord":
        return cls(
            id=row.id,
            name=row.name,
            messages=parse_messages(row.messages or []),
            pdf_name=row.pdf_name,
            pdf_text=row.pdf_text,
            user_id=row.user_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class UpdateConversationRequest(CamelModel):
    """Request model for attaching extracted PDF text to a conversation.

    Every field is optional here so a missing one is reported as a 400
    by the endpoint rather than a schema error.
    """
    id: Optional[str] = Field(default=None, description="Conversation ID")
    file_name: Optional[str] = Field(default=None, alias="fileName", description="Original PDF filename")
    pdf_text: Optional[str] = Field(default=None, alias="pdfText", description="Extracted PDF text")


class UpdateConversationResponse(BaseModel):
    """Response model for the PDF upsert."""
    status: str = Field(default="Ok")
    data: ConversationRecord


class PdfNameResponse(CamelModel):
    """Response model for the attached-PDF lookup."""
    status: str = Field(default="Ok")
    pdf_name: Optional[str] = Field(default=None, alias="pdfName")


class NewChatRequest(CamelModel):
    """Request model for starting a conversation."""
    message: str = Field(..., min_length=1, description="User's first message")
    api_key: str = Field(..., min_length=1, alias="apiKey", description="Caller's LLM API key")


class ChatRequest(NewChatRequest):
    """Request model for continuing a conversation."""
    conversation_id: str = Field(..., min_length=1, alias="conversationId", description="Conversation ID")


class ActionResult(BaseModel):
    """Outcome of a chat action.

    Exactly one of the fields is set: a route to navigate to, a route whose
    data must be reloaded, or an error message.
    """
    redirect: Optional[str] = Field(default=None, description="Route to navigate to")
    revalidate: Optional[str] = Field(default=None, description="Route whose data changed")
    message: Optional[str] = Field(default=None, description="Error message")

    @property
    def is_error(self) -> bool:
        return self.message is not None


class ConversationSummary(CamelModel):
    """Conversation entry in the user's conversation list."""
    id: str
    name: str
    pdf_name: Optional[str] = Field(default=None, alias="pdfName")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class ConversationListResponse(CamelModel):
    """Response model for listing the user's conversations."""
    conversations: List[ConversationSummary]
    total_count: int = Field(..., alias="totalCount")


class ConversationDetailResponse(CamelModel):
    """Response model for one conversation's messages."""
    id: str
    name: str
    messages: List[MessageEntry]
    pdf_name: Optional[str] = Field(default=None, alias="pdfName")


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str = Field(..., description="Health status")
    message: str = Field(..., description="Status message")
    version: str = Field(..., description="Application version")
    timestamp: str = Field(..., description="Current timestamp")


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")
    status_code: int = Field(..., description="HTTP status code")
