"""Route modules for the canvas sync HTTP API."""

from fastapi import APIRouter

from .health import router as health_router
from .rooms import router as rooms_router


def create_api_router() -> APIRouter:
    """Create aggregated router with all API routes."""
    api_router = APIRouter()
    api_router.include_router(health_router)
    api_router.include_router(rooms_router)
    return api_router


__all__ = ["create_api_router"]
