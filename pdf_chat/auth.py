"""
Clerk authentication dependencies for FastAPI.
"""

import base64
from typing import Optional, Dict, Any
from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging
import requests
import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .config import settings

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)

_jwks: Dict[str, Any] | None = None


def load_jwks() -> Dict[str, Any]:
    global _jwks
    if _jwks is None:
        try:
            resp = requests.get(settings.jwks_url, timeout=5)
            resp.raise_for_status()
            _jwks = resp.json()
        except Exception as e:
            logger.error(f"Could not load JWKS: {e}")
            raise HTTPException(status_code=503, detail="Auth key fetch failed")
    return _jwks


def _b64url_to_int(value: str) -> int:
    pad = "=" * (-len(value) % 4)
    return int.from_bytes(base64.urlsafe_b64decode(value + pad), "big")


def jwk_to_pem(jwk_key: Dict[str, Any]) -> str:
    """Convert an RSA JWK (n/e) to a PEM public key."""
    n_b64 = jwk_key.get("n")
    e_b64 = jwk_key.get("e")
    if not n_b64 or not e_b64:
        raise HTTPException(status_code=401, detail="Invalid JWK")

    pub = rsa.RSAPublicNumbers(_b64url_to_int(e_b64), _b64url_to_int(n_b64)).public_key()
    return pub.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("utf-8")


def get_public_key_pem(token: str) -> str:
    kid = jwt.get_unverified_header(token).get("kid")
    jwks = load_jwks()
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return jwk_to_pem(key)
    raise HTTPException(status_code=401, detail="Public key not found")


def verify_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token,
            get_public_key_pem(token),
            algorithms=["RS256"],
            issuer=settings.clerk_issuer,
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidIssuerError:
        raise HTTPException(status_code=401, detail="Invalid issuer")
    except jwt.InvalidTokenError as e:
        logger.error(f"JWT verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")


class ClerkUser:
    """Represents an authenticated Clerk user."""

    def __init__(self, user_id: str, email: Optional[str] = None,
                 first_name: Optional[str] = None, last_name: Optional[str] = None):
        self.user_id = user_id
        self.email = email
        self.first_name = first_name
        self.last_name = last_name

    @property
    def full_name(self) -> str:
        names = [n for n in (self.first_name, self.last_name) if n]
        return " ".join(names) if names else "Unknown User"

    def __repr__(self) -> str:
        return f"ClerkUser(user_id={self.user_id!r})"


def extract_user_from_payload(payload: Dict[str, Any]) -> ClerkUser:
    """Extract user information from JWT payload."""
    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing user ID"
        )

    email = payload.get("email_address") or payload.get("email")
    if not email:
        emails = payload.get("email_addresses") or []
        if isinstance(emails, list) and emails:
            email = emails[0] if isinstance(emails[0], str) else emails[0].get("email_address")

    return ClerkUser(
        user_id=user_id,
        email=email,
        first_name=payload.get("first_name") or payload.get("given_name"),
        last_name=payload.get("last_name") or payload.get("family_name"),
    )


async def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> ClerkUser:
    """
    Dependency to get the current authenticated user.

    Raises:
        HTTPException: If authentication fails
    """
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authenticated")

    try:
        user = extract_user_from_payload(verify_token(credentials.credentials))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Authentication failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed"
        )

    logger.info(f"User authenticated: {user.user_id}")
    return user


async def get_optional_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Optional[ClerkUser]:
    """
    Dependency to get the current user if authenticated, None otherwise.
    """
    if not credentials:
        return None

    try:
        return await get_current_user(credentials)
    except HTTPException as e:
        logger.info(f"Ignoring invalid credentials: {e.detail}")
        return None
