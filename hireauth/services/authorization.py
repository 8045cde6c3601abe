"""Per-request authorization: validate access tokens locally and enforce endpoint tiers."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import jwt

from hireauth.core.config import TokenSettings
from hireauth.core.errors import ForbiddenError, UnauthenticatedError
from hireauth.models import ROLE_ADMIN
from hireauth.services.authentication import resolve_subject_id
from hireauth.services.ownership import OwnershipDecision, OwnershipOracle
from hireauth.services.token_issuer import ROLE_CLAIM

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["exp", "iss", "aud", "sub", "jti"]


class AccessTier(str, Enum):
    PUBLIC = "public"
    OWNER_OR_ADMIN = "owner_or_admin"
    ADMIN_ONLY = "admin_only"


@dataclass(frozen=True)
class CallerIdentity:
    """Identity extracted from a validated access token."""

    subject_id: str
    role: str
    token_id: str | None = None
    claims: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class AuthorizationGuard:
    """
    Stateless checks on every protected request.

    Token validation is pure (signature, issuer, audience, expiry) and never reads the
    credential store, so access tokens stay valid until they expire.
    """

    def __init__(self, token_settings: TokenSettings) -> None:
        self._settings = token_settings

    def decode(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT; raise UnauthenticatedError on any failure."""
        if not token or not token.strip():
            raise UnauthenticatedError("Not authenticated")
        try:
            return jwt.decode(
                token,
                self._settings.secret.get_secret_value(),
                algorithms=[self._settings.algorithm],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise UnauthenticatedError("Token has expired") from None
        except jwt.PyJWTError:
            raise UnauthenticatedError("Invalid or expired token") from None

    def authenticate(self, token: str | None) -> CallerIdentity:
        """Validate the bearer token and return the caller's subject id and role."""
        if token is None:
            raise UnauthenticatedError("Not authenticated")
        claims = self.decode(token)
        subject = resolve_subject_id(claims)
        if subject is None:
            raise UnauthenticatedError("Invalid token payload")
        return CallerIdentity(
            subject_id=subject,
            role=str(claims.get(ROLE_CLAIM) or ""),
            token_id=claims.get("jti"),
            claims=claims,
        )

    def require_admin(self, caller: CallerIdentity) -> None:
        if not caller.is_admin:
            raise ForbiddenError("Admin access required")

    def require_owner_or_admin(self, caller: CallerIdentity, owner_id: int | str | None) -> None:
        """Owner check against an owning-user id already local to this service."""
        if caller.is_admin:
            return
        if owner_id is None or str(owner_id) != caller.subject_id:
            raise ForbiddenError("Not the owner of this resource")

    async def require_remote_owner_or_admin(
        self,
        caller: CallerIdentity,
        oracle: OwnershipOracle,
        resource_id: int | str,
        authorization: str | None,
    ) -> OwnershipDecision | None:
        """
        Owner check for a resource held by another service. Admin passes without a
        network call (returns None). Anything other than OWNER is Forbidden.
        """
        if caller.is_admin:
            return None
        decision = await oracle.check(resource_id, authorization)
        if decision is not OwnershipDecision.OWNER:
            if decision is OwnershipDecision.UNREACHABLE:
                logger.warning(
                    "Denying access: ownership service unreachable",
                    extra={"resource_type": oracle.resource_type, "resource_id": str(resource_id)},
                )
            raise ForbiddenError("Not the owner of this resource")
        return decision

    def authorize(
        self,
        tier: AccessTier,
        token: str | None,
        owner_id: int | str | None = None,
    ) -> CallerIdentity | None:
        """Apply a tier with local data only. PUBLIC never requires (or rejects) a token."""
        if tier is AccessTier.PUBLIC:
            return None
        caller = self.authenticate(token)
        if tier is AccessTier.ADMIN_ONLY:
            self.require_admin(caller)
        else:
            self.require_owner_or_admin(caller, owner_id)
        return caller
