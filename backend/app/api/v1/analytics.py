"""Dashboard analytics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.config import AppSettings
from app.core.logging import get_logger
from app.models.company import AnalyticsSnapshot
from app.services import analytics

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=AnalyticsSnapshot, summary="National totals, per-prefecture rows and top liked.")
async def get_analytics(
    settings: AppSettings = Depends(deps.get_app_settings),
    db_session: AsyncSession = Depends(deps.get_db_session),
) -> AnalyticsSnapshot:
    try:
        return await analytics.get_analytics(db_session, top_n=settings.top_liked_limit)
    except SQLAlchemyError as exc:
        logger.exception("analytics.failed", exc_info=exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to fetch data. Please try again later.",
        ) from exc
