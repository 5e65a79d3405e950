"""Compile search filters into a single paginated directory query."""

from __future__ import annotations

from sqlalchemy import ColumnElement, Select, and_, func, not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidFiltersError
from app.core.logging import get_logger
from app.models.company import SearchFilters, SearchPage
from app.models.tables import Company
from app.services.records import to_company_records

logger = get_logger(__name__)

PAGE_SIZE = 20
_LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )


def _contains(column, needle: str) -> ColumnElement[bool]:
    """Case-insensitive substring match with LIKE wildcards taken literally.

    On SQLite ``ilike`` compiles to ``lower() LIKE lower()``, which folds ASCII
    only: "Ō" and "ō" do not match each other there. Japanese script has no
    case, so prefecture and company-name searches are unaffected.
    """

    return column.ilike(f"%{_escape_like(needle)}%", escape=_LIKE_ESCAPE)


def language_keyword(language: str) -> str:
    """Match languages on their first word so "Filipino (Tagalog)" finds "Filipino"."""

    parts = language.split()
    return parts[0] if parts else ""


def build_conditions(filters: SearchFilters) -> list[ColumnElement[bool]]:
    """Return one condition per active filter category; the caller ANDs them."""

    conditions: list[ColumnElement[bool]] = []

    query = filters.query.strip()
    if query:
        conditions.append(
            or_(
                _contains(Company.company_name, query),
                _contains(Company.branch_name, query),
                _contains(Company.address, query),
                _contains(Company.branch_address, query),
            )
        )

    prefectures = [pref.strip() for pref in filters.prefectures if pref.strip()]
    if prefectures:
        conditions.append(
            or_(
                *(
                    or_(_contains(Company.address, pref), _contains(Company.branch_address, pref))
                    for pref in prefectures
                )
            )
        )

    included = [kw for kw in (language_keyword(lang) for lang in filters.languages) if kw]
    if included:
        conditions.append(or_(*(_contains(Company.language, kw) for kw in included)))

    for keyword in (language_keyword(lang) for lang in filters.excluded_languages):
        if not keyword:
            continue
        # NULL language contains nothing, so it survives an exclusion.
        conditions.append(or_(Company.language.is_(None), not_(_contains(Company.language, keyword))))

    if filters.support_legal:
        conditions.append(Company.support_legal == "Yes")
    if filters.support_optional:
        conditions.append(Company.support_optional == "Yes")

    return conditions


def build_search_statement(filters: SearchFilters) -> Select[tuple[Company]]:
    """Filtered and ordered statement, without pagination."""

    stmt = select(Company)
    conditions = build_conditions(filters)
    if conditions:
        stmt = stmt.where(and_(*conditions))

    if filters.date_sort is not None:
        start_date = Company.support_start_date
        direction = start_date.asc() if filters.date_sort == "oldest" else start_date.desc()
        # Undated rows go last in both directions.
        stmt = stmt.order_by(start_date.is_(None).asc(), direction)
    else:
        stmt = stmt.order_by(Company.total_likes.desc())

    return stmt.order_by(Company.id.asc())


async def search(
    session: AsyncSession,
    page: int,
    filters: SearchFilters,
    *,
    page_size: int = PAGE_SIZE,
) -> SearchPage:
    """Run one filtered query and return the requested 1-indexed page plus the total."""

    if page < 1:
        raise InvalidFiltersError(f"Page must be >= 1, got {page}.")

    stmt = build_search_statement(filters)
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())

    total = int(await session.scalar(count_stmt) or 0)
    rows = await session.scalars(stmt.offset((page - 1) * page_size).limit(page_size))
    records = to_company_records(rows)

    logger.info(
        "search.completed",
        page=page,
        total=total,
        returned=len(records),
        active_filters=len(build_conditions(filters)),
        date_sort=filters.date_sort,
    )
    return SearchPage(records=records, total=total, page=page, page_size=page_size)


async def fetch_total_count(session: AsyncSession) -> int:
    """Unfiltered directory size."""

    return int(await session.scalar(select(func.count()).select_from(Company)) or 0)
