"""Login and bearer-token checks for the protected endpoints.

A single account is configured through settings. Passwords are compared via
salted SHA-256 digests and tokens are HS256 JWTs carrying an expiry.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fx_bnr.settings import Settings
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)

JWT_ALGORITHM = "HS256"

_bearer = HTTPBearer(auto_error=False)


def hash_password(password: str, salt: str) -> str:
    return hashlib.sha256((salt + password).encode("utf-8")).hexdigest()


class Authenticator:
    """Verifies credentials and issues/validates access tokens."""

    def __init__(
        self,
        username: str,
        password: str,
        *,
        secret: str,
        token_ttl: timedelta = timedelta(hours=24),
    ) -> None:
        self.username = username
        self._salt = secrets.token_hex(8)
        self._password_hash = hash_password(password, self._salt)
        self._secret = secret
        self.token_ttl = token_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "Authenticator":
        return cls(
            settings.admin_username,
            settings.admin_password,
            secret=settings.jwt_secret,
            token_ttl=timedelta(hours=settings.token_ttl_hours),
        )

    def verify(self, username: str, password: str) -> bool:
        candidate = hash_password(password, self._salt)
        return hmac.compare_digest(
            username.encode("utf-8"), self.username.encode("utf-8")
        ) and hmac.compare_digest(candidate, self._password_hash)

    def issue_token(self, username: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {"username": username, "iat": now, "exp": now + self.token_ttl}
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        return jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def require_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    authenticator: Authenticator = Depends(get_authenticator),
) -> dict[str, Any]:
    """FastAPI dependency rejecting requests without a valid bearer token."""

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization token was found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return authenticator.decode_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        LOGGER.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


__all__ = ["Authenticator", "JWT_ALGORITHM", "hash_password", "require_token"]
