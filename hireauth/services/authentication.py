"""Register, login and logout: the credential lifecycle on top of users, tokens and the credential store."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from hireauth.core.errors import ConflictError, UnauthenticatedError
from hireauth.core.security import (
    BCRYPT_ROUNDS,
    burn_password_check,
    hash_password,
    verify_password,
)
from hireauth.models import ROLE_USER, ROLES, User
from hireauth.services.credential_store import CredentialStore
from hireauth.services.token_issuer import SUBJECT_ID_CLAIM, TokenIssuer
from hireauth.services.users import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def resolve_subject_id(claims: Mapping[str, Any]) -> str | None:
    """Return the caller's user id: the dedicated sid claim, else the registered sub claim."""
    for name in (SUBJECT_ID_CLAIM, "sub"):
        value = claims.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


class AuthenticationService:
    """Orchestrates register/login/logout. Raises domain errors; persistence errors propagate."""

    def __init__(
        self,
        users: UserRepository,
        credential_store: CredentialStore,
        token_issuer: TokenIssuer,
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ) -> None:
        self._users = users
        self._store = credential_store
        self._issuer = token_issuer
        self._bcrypt_rounds = bcrypt_rounds

    def register(self, username: str, password: str, role: str | None = None) -> User:
        """Create a user with a bcrypt hash of the password. Raises ConflictError on duplicate username."""
        role = role or ROLE_USER
        if role not in ROLES:
            raise ValueError(f"Unknown role '{role}'")
        if self._users.find_by_username(username) is not None:
            raise ConflictError("Username already exists.")
        user = self._users.create(
            username=username,
            password_hash=hash_password(password, rounds=self._bcrypt_rounds),
            role=role,
        )
        logger.info("User registered", extra={"user_id": user.id, "role": role})
        return user

    def login(self, username: str, password: str) -> TokenPair:
        """
        Verify credentials and issue an access token plus a fresh refresh token.

        Unknown username and wrong password raise the same UnauthenticatedError,
        and both cost one bcrypt verification.
        """
        user = self._users.find_by_username(username)
        if user is None:
            burn_password_check(password, rounds=self._bcrypt_rounds)
            logger.info("Login failed")
            raise UnauthenticatedError(INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            logger.info("Login failed")
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        access_token = self._issuer.create_access_token(user_id=user.id, role=user.role)
        refresh_token = self._issuer.create_refresh_token(user_id=user.id)
        logger.info("Login succeeded", extra={"user_id": user.id})
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def logout(self, claims: Mapping[str, Any]) -> None:
        """Delete the caller's refresh token. Idempotent; raises UnauthenticatedError without a subject."""
        subject = resolve_subject_id(claims)
        if subject is None:
            raise UnauthenticatedError("Token has no subject identifier")
        try:
            user_id = int(subject)
        except ValueError:
            raise UnauthenticatedError("Invalid subject identifier") from None
        removed = self._store.delete(user_id)
        logger.info("Logout", extra={"user_id": user_id, "session_removed": removed})
