"""The "investigate this company" flow: classify, save tags, hand off to search."""

from __future__ import annotations

from urllib.parse import urlencode

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import CompanyNotFoundError
from app.core.logging import get_logger
from app.models.company import CompanyRecord, InvestigationResult
from app.models.tables import Company
from app.services.classifier import SectorClassifier
from app.services.records import to_company_records

logger = get_logger(__name__)

DEFAULT_HANDOFF_URL = "https://www.google.com/search"

RESEARCH_PROMPT = (
    'Research the Japanese Registered Support Organization "{name}" thoroughly using Japanese-language sources. '
    "Validation data to make sure it is the right company: Registration No. {reg_number}, Address: {address}{ceo}. "
    "Every claim must link to a working source URL. Answer four points: "
    "1. Official website and current social media accounts with links. "
    "2. Specified Skilled Worker job fields they recruit for, each with an accuracy percentage and the job posting link. "
    "3. How to apply: the direct contact or inquiry form URL and any HR email. "
    "4. Reputation: reviews, local news and any reported problems, each with a source link."
)


async def load_company(session: AsyncSession, company_id: int) -> CompanyRecord:
    row = await session.scalar(select(Company).where(Company.id == company_id))
    records = to_company_records([row]) if row is not None else []
    if not records:
        raise CompanyNotFoundError(company_id)
    return records[0]


async def write_tags(session: AsyncSession, company_id: int, tags: str) -> None:
    """Store a tag string on a company. Re-writing the same value is harmless."""

    try:
        await session.execute(update(Company).where(Company.id == company_id).values(tags=tags))
        await session.commit()
    except Exception:
        await session.rollback()
        raise


def build_search_url(company: CompanyRecord, *, base_url: str = DEFAULT_HANDOFF_URL) -> str:
    """External search link pre-filled with a research prompt for the company."""

    ceo = f", CEO: {company.representative}" if company.representative else ""
    prompt = RESEARCH_PROMPT.format(
        name=company.display_name,
        reg_number=company.reg_number,
        address=company.display_address or "N/A",
        ceo=ceo,
    )
    return f"{base_url}?{urlencode({'q': prompt, 'udm': '50'})}"


async def investigate(
    session: AsyncSession,
    company_id: int,
    classifier: SectorClassifier,
    *,
    base_url: str = DEFAULT_HANDOFF_URL,
) -> InvestigationResult:
    """Classify a company, save any tags found and return the hand-off URL.

    A failed tag write is logged and reported as ``saved=False``; it never
    blocks the hand-off.
    """

    company = await load_company(session, company_id)
    # End the read so no connection is held while the classifier waits on the network.
    await session.rollback()
    tags = await classifier.classify(company)

    saved = False
    if tags:
        try:
            await write_tags(session, company.id, tags)
            saved = True
        except SQLAlchemyError as exc:
            logger.warning("investigate.tag_write_failed", company_id=company.id, tags=tags, error=str(exc))
    else:
        logger.info("investigate.no_tags", company_id=company.id)

    return InvestigationResult(
        company_id=company.id,
        tags=tags,
        saved=saved,
        search_url=build_search_url(company, base_url=base_url),
    )
