"""Health and readiness probes."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps

health_router = APIRouter()


@health_router.get("/", summary="Liveness probe")
async def healthcheck() -> dict[str, str]:
    """Report that the process is serving requests."""

    return {"status": "ok"}


@health_router.get("/ready", summary="Readiness probe")
async def readiness(db_session: AsyncSession = Depends(deps.get_db_session)) -> dict[str, str]:
    """Report whether the directory store answers a trivial query."""

    try:
        await db_session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="database unavailable") from exc
    return {"status": "ready"}
