"""API router aggregation."""
from fastapi import APIRouter

from panel_notation.api.v1 import health, services, shortcodes

api_router = APIRouter()

# v1 routes
v1_router = APIRouter(prefix="/v1")

v1_router.include_router(health.router, tags=["health"])
v1_router.include_router(services.router, prefix="/services", tags=["services"])
v1_router.include_router(shortcodes.router, prefix="/shortcodes", tags=["shortcodes"])

api_router.include_router(v1_router)

__all__ = ["api_router"]
