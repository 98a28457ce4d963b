"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from pans_scales.api.v1 import health, scales

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Scales
api_router.include_router(scales.router)
