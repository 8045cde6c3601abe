"""API routes."""

from fastapi import APIRouter

from hireauth.api.routes import auth

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
