"""API v1 router."""

from fastapi import APIRouter

from erp.api.v1.endpoints import exports, health, reports

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exports.router, prefix="/exports", tags=["exports"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
