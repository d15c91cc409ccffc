"""
FastAPI application for PDF Chat.
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, HTTPException, Depends, Body, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session as OrmSession
import logging

from .config import settings, validate_required_settings
from .models import (
    ActionResult, ChatRequest, NewChatRequest, ConversationRecord,
    UpdateConversationRequest, UpdateConversationResponse, PdfNameResponse,
    ConversationSummary, ConversationListResponse, ConversationDetailResponse,
    HealthResponse, ErrorResponse, parse_messages
)
from .auth import ClerkUser, get_current_user, get_optional_user
from .db import Base, engine, get_db
from .services import ChatActions, ConversationRepository, get_chat_actions
from .utils import format_timestamp

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Validate required settings on startup
try:
    validate_required_settings()
except ValueError as e:
    logger.error(f"Configuration validation failed: {e}")
    raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured.")
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
    yield
    logger.info(f"Shutting down {settings.app_name}")


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Chat with the contents of an uploaded PDF",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

conversation_repo = ConversationRepository()


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if settings.debug else "An unexpected error occurred",
            status_code=500
        ).model_dump()
    )


@app.get("/api", response_model=dict)
async def root():
    """Root endpoint."""
    return {
        "message": "PDF Chat API is running",
        "version": settings.app_version,
        "timestamp": format_timestamp()
    }


@app.get("/health", response_model=HealthResponse)
def health_check(db: OrmSession = Depends(get_db)):
    """Health check endpoint, including database connectivity."""
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(status_code=503, detail="Database unavailable")

    return HealthResponse(
        status="healthy",
        message="Service health check completed",
        version=settings.app_version,
        timestamp=format_timestamp()
    )


# ============================================================================
# CONVERSATION UPDATE ENDPOINT
# ============================================================================

@app.post(
    "/api/updateConversation",
    response_model=UpdateConversationResponse,
    status_code=status.HTTP_201_CREATED
)
def update_conversation(
    request: UpdateConversationRequest = Body(..., description="Extracted PDF payload"),
    db: OrmSession = Depends(get_db)
):
    """Attach extracted PDF text to a conversation, creating it if absent."""
    if not request.id or not request.file_name or not request.pdf_text:
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        conversation = conversation_repo.upsert_pdf(
            db,
            conversation_id=request.id,
            pdf_name=request.file_name,
            pdf_text=request.pdf_text
        )
        logger.info(f"PDF {request.file_name} attached to conversation {request.id}")
        return UpdateConversationResponse(data=ConversationRecord.from_row(conversation))

    except Exception as e:
        logger.error(f"Error processing POST request: {str(e)}")
        raise HTTPException(status_code=500, detail="An error occurred")


@app.get("/api/updateConversation", response_model=PdfNameResponse)
def get_conversation_pdf(
    conversation_id: Optional[str] = Query(default=None, alias="id"),
    db: OrmSession = Depends(get_db)
):
    """Return the name of the PDF attached to a conversation."""
    if not conversation_id:
        raise HTTPException(status_code=400, detail="Missing required 'id' parameter")

    try:
        row = conversation_repo.find_pdf_name(db, conversation_id)
    except Exception as e:
        logger.error(f"Error processing GET request: {str(e)}")
        raise HTTPException(status_code=500, detail="An error occurred")

    if row is None:
        raise HTTPException(status_code=404, detail="Conversation not found")

    return PdfNameResponse(pdf_name=row.pdf_name)


# ============================================================================
# CHAT ACTIONS
# ============================================================================

@app.post("/actions/new-chat", response_model=ActionResult, response_model_exclude_none=True)
def new_chat(
    request: NewChatRequest = Body(..., description="First message payload"),
    current_user: Optional[ClerkUser] = Depends(get_optional_user),
    db: OrmSession = Depends(get_db),
    chat_actions: ChatActions = Depends(get_chat_actions)
):
    """Start a conversation; redirects to it, or to the login page when signed out."""
    return chat_actions.new_chat(db, current_user, request)


@app.post("/actions/chat", response_model=ActionResult, response_model_exclude_none=True)
def chat(
    request: ChatRequest = Body(..., description="Follow-up message payload"),
    db: OrmSession = Depends(get_db),
    chat_actions: ChatActions = Depends(get_chat_actions)
):
    """Continue a conversation."""
    return chat_actions.chat(db, request)


# ============================================================================
# AUTHENTICATED CONVERSATION ENDPOINTS
# ============================================================================

@app.get("/api/conversations", response_model=ConversationListResponse)
def list_conversations(
    current_user: ClerkUser = Depends(get_current_user),
    db: OrmSession = Depends(get_db)
):
    """List the authenticated user's conversations, newest first."""
    try:
        rows = conversation_repo.list_for_user(db, current_user.user_id)
    except Exception as e:
        logger.error(f"Failed to list conversations: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to list conversations")

    conversations = [
        ConversationSummary(id=row.id, name=row.name, pdf_name=row.pdf_name, updated_at=row.updated_at)
        for row in rows
    ]
    return ConversationListResponse(conversations=conversations, total_count=len(conversations))


@app.get("/api/conversations/{conversation_id}", response_model=ConversationDetailResponse)
def get_conversation(
    conversation_id: str,
    current_user: ClerkUser = Depends(get_current_user),
    db: OrmSession = Depends(get_db)
):
    """Get one of the authenticated user's conversations."""
    conversation = conversation_repo.get_for_user(db, current_user.user_id, conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")

    return ConversationDetailResponse(
        id=conversation.id,
        name=conversation.name,
        messages=parse_messages(conversation.messages or []),
        pdf_name=conversation.pdf_name
    )


def run() -> None:
    """Serve the API with the chat UI mounted on the same server."""
    import uvicorn
    from nicegui import ui

    from .ui import chat_page  # noqa: F401 - registers the pages

    ui.run_with(
        app,
        title=settings.app_name,
        storage_secret=settings.storage_secret,
    )

    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
