"""Register/login/logout routes and the auth dependencies shared by protected endpoints."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hireauth.core.database import get_db
from hireauth.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
)
from hireauth.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenPairResponse,
    UserListItem,
    UsersListResponse,
)
from hireauth.services.authentication import AuthenticationService
from hireauth.services.authorization import AuthorizationGuard, CallerIdentity
from hireauth.services.credential_store import CredentialStore
from hireauth.services.token_issuer import TokenIssuer
from hireauth.services.users import UserRepository

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

# How often a pending ownership lookup checks whether the client went away.
DISCONNECT_POLL_SEC = 0.05

# Non-standard status used when the client closed the connection before we answered.
CLIENT_CLOSED_REQUEST = 499

T = TypeVar("T")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_guard(request: Request) -> AuthorizationGuard:
    return request.app.state.guard


def get_auth_service(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> AuthenticationService:
    """Build the per-request service graph on the request's DB session."""
    store = CredentialStore(db)
    issuer = TokenIssuer(request.app.state.token_settings, store)
    return AuthenticationService(
        users=UserRepository(db),
        credential_store=store,
        token_issuer=issuer,
        bcrypt_rounds=request.app.state.settings.BCRYPT_ROUNDS,
    )


def get_current_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    guard: Annotated[AuthorizationGuard, Depends(get_guard)],
) -> CallerIdentity:
    """Dependency: require a valid Bearer JWT. Raises 401 if missing or invalid."""
    token = credentials.credentials if credentials is not None else None
    try:
        return guard.authenticate(token)
    except UnauthenticatedError as e:
        raise _unauthorized(e.message) from None


def require_admin(
    caller: Annotated[CallerIdentity, Depends(get_current_caller)],
    guard: Annotated[AuthorizationGuard, Depends(get_guard)],
) -> CallerIdentity:
    """Dependency: require role 'Admin'. Raises 403 for everyone else."""
    try:
        guard.require_admin(caller)
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message) from None
    return caller


class ClientDisconnected(Exception):
    """The inbound client went away while we were waiting on an outbound call."""


async def await_unless_disconnected(request: Request, awaitable: Awaitable[T]) -> T:
    """Await an outbound call, cancelling it if the inbound client disconnects first."""
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SEC)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected; cancelling outbound call")
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


def require_remote_owner_or_admin(
    resource_type: str,
    path_param: str,
) -> Callable[..., Awaitable[CallerIdentity]]:
    """
    Build a dependency for owner-or-admin endpoints whose resource lives in another service.

    Admin passes without a network call. Everyone else needs the owning service to answer
    'true' for path parameter `path_param`; errors, timeouts and other answers are 403.
    """

    async def dependency(
        request: Request,
        caller: Annotated[CallerIdentity, Depends(get_current_caller)],
        guard: Annotated[AuthorizationGuard, Depends(get_guard)],
    ) -> CallerIdentity:
        oracle = request.app.state.ownership_oracles.get(resource_type)
        if oracle is None:
            raise RuntimeError(f"No ownership oracle configured for '{resource_type}'")
        resource_id = request.path_params.get(path_param)
        if resource_id is None:
            raise RuntimeError(f"Path parameter '{path_param}' not found on this route")
        try:
            await await_unless_disconnected(
                request,
                guard.require_remote_owner_or_admin(
                    caller,
                    oracle,
                    resource_id,
                    request.headers.get("Authorization"),
                ),
            )
        except ForbiddenError as e:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message) from None
        except ClientDisconnected:
            raise HTTPException(
                status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request"
            ) from None
        return caller

    return dependency


@router.post("/register", response_model=str)
def register(
    body: RegisterRequest,
    service: Annotated[AuthenticationService, Depends(get_auth_service)],
) -> str:
    """
    Create an account. Role defaults to User; a taken username is 409.
    The requested role is honoured as given, Admin included: deployments must gate this route.
    """
    try:
        service.register(body.username, body.password, body.role)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from None
    return "User created successfully"


@router.post("/login", response_model=TokenPairResponse)
def login(
    body: LoginRequest,
    service: Annotated[AuthenticationService, Depends(get_auth_service)],
) -> TokenPairResponse:
    """
    Authenticate with username and password; returns an access token and a refresh token.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    try:
        tokens = service.login(body.username, body.password)
    except UnauthenticatedError as e:
        raise _unauthorized(e.message) from None
    return TokenPairResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    caller: Annotated[CallerIdentity, Depends(get_current_caller)],
    service: Annotated[AuthenticationService, Depends(get_auth_service)],
) -> MessageResponse:
    """Drop the caller's refresh token. Calling it again is not an error."""
    try:
        service.logout(caller.claims)
    except UnauthenticatedError as e:
        raise _unauthorized(e.message) from None
    return MessageResponse(message="Logged out successfully")


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CallerIdentity, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = UserRepository(db).list_all()
    return UsersListResponse(users=[UserListItem.model_validate(u) for u in users])


@router.get("/users/{user_id}", response_model=UserListItem)
def get_user(
    user_id: int,
    caller: Annotated[CallerIdentity, Depends(get_current_caller)],
    guard: Annotated[AuthorizationGuard, Depends(get_guard)],
    db: Annotated[Session, Depends(get_db)],
) -> UserListItem:
    """Get one user. A user record is owned by that user; Admin may read any."""
    try:
        guard.require_owner_or_admin(caller, owner_id=user_id)
    except ForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message) from None
    try:
        user = UserRepository(db).get(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from None
    return UserListItem.model_validate(user)
