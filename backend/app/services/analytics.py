"""Dashboard figures derived from the precomputed leaderboard table."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.company import AnalyticsOverview, AnalyticsSnapshot, CompanyRecord, LeaderboardEntry
from app.models.tables import Company, Leaderboard
from app.services.records import to_company_records, to_leaderboard_entries

logger = get_logger(__name__)


def summarize(rows: list[LeaderboardEntry]) -> AnalyticsOverview:
    return AnalyticsOverview(
        total_companies=sum(row.total_tsk for row in rows),
        total_analyzed=sum(row.total_tags_analyzed for row in rows),
    )


async def fetch_top_liked(session: AsyncSession, limit: int = 5) -> list[CompanyRecord]:
    rows = await session.scalars(
        select(Company).order_by(Company.total_likes.desc(), Company.id.asc()).limit(limit)
    )
    return to_company_records(rows)


async def get_analytics(session: AsyncSession, *, top_n: int = 5) -> AnalyticsSnapshot:
    """Read the leaderboard and top-liked companies; store errors propagate."""

    leaderboard_rows = await session.scalars(
        select(Leaderboard).order_by(Leaderboard.total_tsk.desc(), Leaderboard.prefecture.asc())
    )
    rows = to_leaderboard_entries(leaderboard_rows)
    top_liked = await fetch_top_liked(session, top_n)

    overview = summarize(rows)
    logger.debug(
        "analytics.snapshot",
        prefectures=len(rows),
        total_companies=overview.total_companies,
        total_analyzed=overview.total_analyzed,
    )
    return AnalyticsSnapshot(overview=overview, rows=rows, top_liked=top_liked)
