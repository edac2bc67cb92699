"""Health check endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from erp.core.database import get_db
from erp.core.feature_flags import feature_flags

router = APIRouter()


@router.get("/")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "dicel-erp-api"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)) -> dict[str, str]:
    """Readiness check: the database answers a trivial query."""
    await db.execute(text("SELECT 1"))
    return {"status": "ready", "service": "dicel-erp-api"}


@router.get("/features")
async def feature_status() -> dict[str, bool]:
    """Current feature flag values."""
    return feature_flags.model_dump()
