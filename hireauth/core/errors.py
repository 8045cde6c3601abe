"""Domain errors raised by the auth services and mapped to HTTP statuses by the routes."""


class AuthError(Exception):
    """Base class for credential and authorization failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthenticatedError(AuthError):
    """Missing, malformed, expired or badly signed token; or failed login (401)."""


class ForbiddenError(AuthError):
    """Authenticated, but the role or ownership check failed (403)."""


class ConflictError(AuthError):
    """Resource already exists, e.g. duplicate username at registration (409)."""


class NotFoundError(AuthError):
    """Referenced user does not exist where the operation requires it (404)."""


class ConfigurationError(Exception):
    """Invalid startup configuration (e.g. empty signing secret). Fatal, not per-request."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
