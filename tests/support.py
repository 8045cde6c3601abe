"""Shared builders for tests: settings, an in-memory SQLite app and fake owning services."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-unit-tests-only-0123456789")

from collections.abc import Callable

import httpx
from fastapi import FastAPI
from pydantic import SecretStr
from sqlalchemy.orm import Session

from hireauth.core.config import Settings, TokenSettings
from hireauth.main import create_app
from hireauth.models import Base
from hireauth.services.authentication import AuthenticationService
from hireauth.services.credential_store import CredentialStore
from hireauth.services.ownership import OwnershipOracle
from hireauth.services.token_issuer import TokenIssuer
from hireauth.services.users import UserRepository

TEST_SECRET = "test-secret-key-for-unit-tests-only-0123456789"
JOB_SERVICE_URL = "http://job-service.test"


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": SecretStr(TEST_SECRET),
        "JWT_ISSUER": "hireauth-test",
        "JWT_AUDIENCE": "hireauth-test-services",
        "JWT_EXPIRE_MINUTES": 15,
        "BCRYPT_ROUNDS": 4,
        "JOB_SERVICE_URL": JOB_SERVICE_URL,
        "OWNERSHIP_REQUEST_TIMEOUT_SEC": 1.0,
    }
    values.update(overrides)
    return Settings(**values)


def make_token_settings(**overrides: object) -> TokenSettings:
    return TokenSettings.from_settings(make_settings(**overrides))


def make_app(**overrides: object) -> FastAPI:
    """App on a fresh in-memory database with all tables created."""
    app = create_app(make_settings(**overrides))
    Base.metadata.create_all(app.state.engine)
    return app


def open_session(app: FastAPI) -> Session:
    return app.state.session_factory()


def make_auth_service(session: Session, token_settings: TokenSettings) -> AuthenticationService:
    store = CredentialStore(session)
    return AuthenticationService(
        users=UserRepository(session),
        credential_store=store,
        token_issuer=TokenIssuer(token_settings, store),
        bcrypt_rounds=4,
    )


def fake_job_oracle(handler: Callable[[httpx.Request], httpx.Response]) -> OwnershipOracle:
    """Job ownership oracle whose HTTP calls are answered by `handler`."""
    return OwnershipOracle(
        resource_type="job",
        base_url=JOB_SERVICE_URL,
        path_template="/api/jobs/{resource_id}/",
        timeout_sec=1.0,
        transport=httpx.MockTransport(handler),
    )
