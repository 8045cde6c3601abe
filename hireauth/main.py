"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hireauth.api.routes import health
from hireauth.api.routes import router as api_router
from hireauth.core.config import Settings, TokenSettings, get_settings
from hireauth.core.database import build_engine, build_session_factory
from hireauth.services.authorization import AuthorizationGuard
from hireauth.services.ownership import OwnershipOracle

logger = logging.getLogger(__name__)


def build_ownership_oracles(settings: Settings) -> dict[str, OwnershipOracle]:
    """Resource types whose ownership is resolved by another service."""
    return {
        "job": OwnershipOracle(
            resource_type="job",
            base_url=settings.JOB_SERVICE_URL,
            path_template="/api/jobs/{resource_id}/",
            timeout_sec=settings.OWNERSHIP_REQUEST_TIMEOUT_SEC,
        ),
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app; settings and everything derived from them are fixed for its lifetime."""
    settings = settings or get_settings()
    token_settings = TokenSettings.from_settings(settings)
    engine = build_engine(settings)

    app = FastAPI(
        title="hireauth API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.token_settings = token_settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.guard = AuthorizationGuard(token_settings)
    app.state.ownership_oracles = build_ownership_oracles(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.API_PREFIX)
    app.include_router(health.router, prefix="/health", tags=["health"])

    logger.info(
        "hireauth configured",
        extra={"environment": settings.APP_ENV, "jwt_issuer": settings.JWT_ISSUER},
    )
    return app


app = create_app()
