"""Health check endpoints with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from hireauth.api.routes.auth import get_current_caller
from hireauth.core.database import check_db_connected, get_db
from hireauth.schemas.health import HealthResponse
from hireauth.services.authorization import CallerIdentity

router = APIRouter()


def _health(request: Request, db: Session) -> HealthResponse:
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(
        status="ok",
        environment=request.app.state.settings.APP_ENV,
        database=db_status,
    )


@router.get("", response_model=HealthResponse)
def get_health(request: Request, db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Public; used by load balancers and monitoring.
    """
    return _health(request, db)


@router.post("", response_model=HealthResponse)
def post_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    _caller: Annotated[CallerIdentity, Depends(get_current_caller)],
) -> HealthResponse:
    """Same as GET, but only for callers with a valid access token."""
    return _health(request, db)
