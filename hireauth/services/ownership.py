"""Ownership lookups against the service that owns a resource, forwarding the caller's bearer token."""

import logging
import time
from enum import Enum

import httpx

logger = logging.getLogger(__name__)


class OwnershipDecision(str, Enum):
    """Outcome of a remote ownership lookup. Only OWNER grants access."""

    OWNER = "owner"
    NOT_OWNER = "not_owner"
    UNREACHABLE = "unreachable"


def parse_ownership_body(body: str) -> bool:
    """True only for a boolean-shaped 'true' body (JSON or plain text, any case)."""
    return body.strip().lower() == "true"


class OwnershipOracle:
    """
    Asks one owning service whether the caller owns a resource.

    One GET per decision, no cache and no retry. The inbound Authorization header is
    forwarded verbatim so the owning service authorizes the lookup itself.
    """

    def __init__(
        self,
        resource_type: str,
        base_url: str,
        path_template: str,
        timeout_sec: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.resource_type = resource_type
        self._base_url = base_url.rstrip("/")
        self._path_template = path_template
        self._timeout = httpx.Timeout(timeout_sec)
        self._transport = transport

    def lookup_url(self, resource_id: int | str) -> str:
        return f"{self._base_url}{self._path_template.format(resource_id=resource_id)}"

    async def check(self, resource_id: int | str, authorization: str | None) -> OwnershipDecision:
        """Resolve ownership. Non-2xx or non-'true' bodies give NOT_OWNER; transport errors give UNREACHABLE."""
        if not authorization or not authorization.strip():
            return OwnershipDecision.NOT_OWNER

        url = self.lookup_url(resource_id)
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                try:
                    request = client.build_request("GET", url, headers={"Authorization": authorization})
                except httpx.InvalidURL as e:
                    # A resource id that cannot form a URL names nothing the caller owns.
                    self._log(resource_id, OwnershipDecision.NOT_OWNER, start, reason=f"invalid url: {e}")
                    return OwnershipDecision.NOT_OWNER
                response = await client.send(request)
        except httpx.TimeoutException as e:
            self._log(resource_id, OwnershipDecision.UNREACHABLE, start, reason=f"timeout: {type(e).__name__}")
            return OwnershipDecision.UNREACHABLE
        except httpx.HTTPError as e:
            self._log(resource_id, OwnershipDecision.UNREACHABLE, start, reason=type(e).__name__)
            return OwnershipDecision.UNREACHABLE

        if not response.is_success:
            self._log(
                resource_id,
                OwnershipDecision.NOT_OWNER,
                start,
                reason=f"status {response.status_code}",
            )
            return OwnershipDecision.NOT_OWNER

        decision = (
            OwnershipDecision.OWNER
            if parse_ownership_body(response.text)
            else OwnershipDecision.NOT_OWNER
        )
        self._log(resource_id, decision, start)
        return decision

    def _log(
        self,
        resource_id: int | str,
        decision: OwnershipDecision,
        start: float,
        reason: str | None = None,
    ) -> None:
        extra: dict[str, str | float] = {
            "resource_type": self.resource_type,
            "resource_id": str(resource_id),
            "ownership_decision": decision.value,
            "ownership_latency_seconds": time.perf_counter() - start,
        }
        if reason:
            extra["reason"] = reason
        level = logging.WARNING if decision is OwnershipDecision.UNREACHABLE else logging.INFO
        logger.log(level, "Ownership lookup completed", extra=extra)
