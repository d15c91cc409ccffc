"""Pytest fixtures and shared test configuration.

Every test runs against a fresh in-memory SQLite database and a fake chat
model, so no network access or real API key is needed.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("CLERK_SECRET_KEY", "sk_test_secret")
os.environ["CLERK_ISSUER"] = "https://clerk.example.test"

from collections.abc import AsyncGenerator, Generator
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from langchain_core.messages import AIMessage

from pdf_chat.auth import ClerkUser, get_current_user, get_optional_user
from pdf_chat.db import Base, SessionLocal, engine
from pdf_chat.main import app
from pdf_chat.services import ChatActions, CompletionService, LLMClientCache, get_chat_actions


@pytest.fixture(autouse=True)
def database() -> Generator[None, None, None]:
    """Create all tables before a test and drop them afterwards."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_llm() -> MagicMock:
    """Chat model double answering every request with a fixed message."""
    llm = MagicMock(name="chat_model")
    llm.invoke.return_value = AIMessage(content="A generated answer.")
    return llm


@pytest.fixture
def client_cache(fake_llm: MagicMock) -> LLMClientCache:
    return LLMClientCache(factory=lambda api_key: fake_llm)


@pytest.fixture
def completion_service(client_cache: LLMClientCache) -> CompletionService:
    return CompletionService(client_cache=client_cache)


@pytest.fixture
def chat_actions(completion_service: CompletionService) -> ChatActions:
    return ChatActions(completion_service=completion_service)


@pytest.fixture
def user() -> ClerkUser:
    return ClerkUser(user_id="user_123", email="reader@example.com", first_name="Sam")


@pytest.fixture
def signed_in(user: ClerkUser) -> Generator[ClerkUser, None, None]:
    """Authenticate every request as `user`."""
    async def current_user() -> ClerkUser:
        return user

    app.dependency_overrides[get_current_user] = current_user
    app.dependency_overrides[get_optional_user] = current_user
    yield user
    app.dependency_overrides.pop(get_current_user, None)
    app.dependency_overrides.pop(get_optional_user, None)


@pytest.fixture
async def async_client(chat_actions: ChatActions) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX client bound to the app with the fake chat model wired in."""
    app.dependency_overrides[get_chat_actions] = lambda: chat_actions
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_chat_actions, None)
