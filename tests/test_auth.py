"""Tests for Clerk token verification and user extraction."""

import json
import time
from unittest.mock import patch

import jwt
from jwt.algorithms import RSAAlgorithm
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from pdf_chat.auth import (
    extract_user_from_payload,
    get_current_user,
    get_optional_user,
    verify_token,
)
from pdf_chat.config import settings


@pytest.fixture(scope="module")
def signing_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def jwks(signing_key: rsa.RSAPrivateKey) -> dict:
    jwk = json.loads(RSAAlgorithm.to_jwk(signing_key.public_key()))
    jwk["kid"] = "test-kid"
    return {"keys": [jwk]}


def _token(signing_key: rsa.RSAPrivateKey, **claims) -> str:
    payload = {"sub": "user_123", "iss": settings.clerk_issuer, "exp": int(time.time()) + 300}
    payload.update(claims)
    pem = signing_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return jwt.encode(payload, pem, algorithm="RS256", headers={"kid": "test-kid"})


class TestVerifyToken:
    def test_valid_token(self, signing_key, jwks) -> None:
        with patch("pdf_chat.auth.load_jwks", return_value=jwks):
            payload = verify_token(_token(signing_key))

        assert payload["sub"] == "user_123"

    def test_expired_token(self, signing_key, jwks) -> None:
        with patch("pdf_chat.auth.load_jwks", return_value=jwks), pytest.raises(HTTPException) as exc_info:
            verify_token(_token(signing_key, exp=int(time.time()) - 60))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token expired"

    def test_wrong_issuer(self, signing_key, jwks) -> None:
        with patch("pdf_chat.auth.load_jwks", return_value=jwks), pytest.raises(HTTPException) as exc_info:
            verify_token(_token(signing_key, iss="https://elsewhere.test"))

        assert exc_info.value.detail == "Invalid issuer"

    def test_unknown_key_id(self, signing_key) -> None:
        with patch("pdf_chat.auth.load_jwks", return_value={"keys": []}), pytest.raises(HTTPException) as exc_info:
            verify_token(_token(signing_key))

        assert exc_info.value.detail == "Public key not found"

    def test_malformed_token(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            verify_token("not-a-jwt")

        assert exc_info.value.status_code == 401


class TestExtractUser:
    def test_reads_standard_claims(self) -> None:
        user = extract_user_from_payload({
            "sub": "user_1", "email": "a@example.com", "first_name": "Ada", "last_name": "Lovelace",
        })

        assert user.user_id == "user_1"
        assert user.email == "a@example.com"
        assert user.full_name == "Ada Lovelace"

    def test_email_from_address_list(self) -> None:
        user = extract_user_from_payload({
            "sub": "user_1", "email_addresses": [{"email_address": "b@example.com"}],
        })

        assert user.email == "b@example.com"
        assert user.full_name == "Unknown User"

    def test_missing_subject(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            extract_user_from_payload({"email": "a@example.com"})

        assert exc_info.value.status_code == 401


class TestDependencies:
    async def test_current_user_without_credentials(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None)

        assert exc_info.value.status_code == 403

    async def test_current_user_with_valid_token(self, signing_key, jwks) -> None:
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=_token(signing_key))

        with patch("pdf_chat.auth.load_jwks", return_value=jwks):
            user = await get_current_user(credentials)

        assert user.user_id == "user_123"

    async def test_optional_user_without_credentials(self) -> None:
        assert await get_optional_user(None) is None

    async def test_optional_user_with_bad_token(self) -> None:
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="not-a-jwt")

        assert await get_optional_user(credentials) is None
