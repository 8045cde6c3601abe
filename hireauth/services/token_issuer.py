"""Issue signed JWT access tokens and opaque, server-held refresh tokens."""

import base64
import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from hireauth.core.config import TokenSettings
from hireauth.services.credential_store import CredentialStore

# Dedicated subject-identifier claim; carries the numeric user id.
SUBJECT_ID_CLAIM = "sid"
ROLE_CLAIM = "role"

REFRESH_TOKEN_BYTES = 64


class TokenIssuer:
    """Creates access tokens (never stored) and refresh tokens (persisted via CredentialStore)."""

    def __init__(self, token_settings: TokenSettings, credential_store: CredentialStore) -> None:
        self._settings = token_settings
        self._store = credential_store

    def create_access_token(self, user_id: int, role: str) -> str:
        """
        Create a compact HS256 JWT for an already verified identity.

        Claims: sub and sid (user id), jti (fresh UUID), role, iss, aud, iat, exp.
        """
        now = datetime.now(UTC)
        expire = now + timedelta(minutes=self._settings.access_token_minutes)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            SUBJECT_ID_CLAIM: str(user_id),
            "jti": str(uuid.uuid4()),
            ROLE_CLAIM: role,
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(
            payload,
            self._settings.secret.get_secret_value(),
            algorithm=self._settings.algorithm,
        )

    def create_refresh_token(self, user_id: int) -> str:
        """Generate 64 random bytes, base64-encode them and store them as the user's only refresh token."""
        refresh_token = base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")
        expires_at = datetime.now(UTC) + timedelta(days=self._settings.refresh_token_days)
        self._store.save(user_id, refresh_token, expires_at)
        return refresh_token
