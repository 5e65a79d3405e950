"""Directory search, likes, investigation and application email endpoints.

Unknown company ids surface as ``CompanyNotFoundError`` and are mapped to 404
by the application-level handler.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.config import AppSettings
from app.core.logging import get_logger
from app.models.company import InvestigationResult, LikedIdsRequest, LikeResult, SearchPage, SearchRequest
from app.services import application_email, investigate, likes, search
from app.services.classifier import SectorClassifier

logger = get_logger(__name__)

router = APIRouter()

_FETCH_FAILED = "Failed to fetch data. Please try again later."


@router.post("/search", response_model=SearchPage, summary="Search the directory with filters.")
async def search_companies(
    request: SearchRequest,
    settings: AppSettings = Depends(deps.get_app_settings),
    db_session: AsyncSession = Depends(deps.get_db_session),
) -> SearchPage:
    try:
        return await search.search(db_session, request.page, request.filters, page_size=settings.page_size)
    except SQLAlchemyError as exc:
        logger.exception("search.failed", page=request.page, exc_info=exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_FETCH_FAILED) from exc


@router.get("/count", summary="Total number of organizations in the directory.")
async def count_companies(db_session: AsyncSession = Depends(deps.get_db_session)) -> dict[str, int]:
    try:
        total = await search.fetch_total_count(db_session)
    except SQLAlchemyError as exc:
        logger.exception("search.count_failed", exc_info=exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_FETCH_FAILED) from exc
    return {"total": total}


@router.post("/liked", summary="Which of the given companies this device has liked.")
async def liked_companies(
    request: LikedIdsRequest,
    db_session: AsyncSession = Depends(deps.get_db_session),
) -> dict[str, list[int]]:
    liked_ids = await likes.fetch_liked_ids(db_session, request.device_id, request.company_ids)
    return {"liked_ids": sorted(liked_ids)}


@router.post("/{company_id}/like", response_model=LikeResult, summary="Toggle this device's like.")
async def toggle_company_like(
    company_id: int,
    device_id: str = Depends(deps.require_device_id),
    db_session: AsyncSession = Depends(deps.get_db_session),
) -> LikeResult:
    try:
        return await likes.toggle_like(db_session, device_id, company_id)
    except SQLAlchemyError as exc:
        logger.exception("like.toggle_failed", company_id=company_id, exc_info=exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Like could not be saved.") from exc


@router.post(
    "/{company_id}/investigate",
    response_model=InvestigationResult,
    summary="Classify sectors with AI, store tags and return the research hand-off URL.",
)
async def investigate_company(
    company_id: int,
    settings: AppSettings = Depends(deps.get_app_settings),
    classifier: SectorClassifier = Depends(deps.get_classifier),
    db_session: AsyncSession = Depends(deps.get_db_session),
) -> InvestigationResult:
    return await investigate.investigate(
        db_session,
        company_id,
        classifier,
        base_url=settings.search_handoff_url,
    )


@router.post("/{company_id}/application-email", summary="Generate a Japanese application email.")
async def generate_application_email(
    company_id: int,
    form: application_email.ApplicationForm,
    db_session: AsyncSession = Depends(deps.get_db_session),
) -> dict[str, str]:
    company = await investigate.load_company(db_session, company_id)
    return {"email": application_email.render_application_email(company.company_name, form)}
