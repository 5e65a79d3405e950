"""Per-device like toggling.

The server side is a single transaction that flips the membership row and
adjusts ``total_likes`` in SQL. :class:`LikeToggle` is the client-side
counterpart: optimistic flip, then either adopt the server answer or revert.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace

from sqlalchemy import case, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import CompanyNotFoundError
from app.core.logging import get_logger
from app.models.company import LikeResult
from app.models.tables import Company, CompanyLike

logger = get_logger(__name__)


async def toggle_like(session: AsyncSession, device_id: str, company_id: int) -> LikeResult:
    """Flip the (device, company) like and return the authoritative state."""

    if not device_id:
        raise ValueError("device_id must not be empty.")

    try:
        exists = await session.scalar(select(Company.id).where(Company.id == company_id))
        if exists is None:
            raise CompanyNotFoundError(company_id)

        removed = await session.execute(
            delete(CompanyLike).where(CompanyLike.device_id == device_id, CompanyLike.tsk_id == company_id)
        )
        if removed.rowcount:
            liked = False
            delta = Company.total_likes - removed.rowcount
            new_total = case((delta > 0, delta), else_=0)
        else:
            liked = True
            await session.execute(insert(CompanyLike).values(device_id=device_id, tsk_id=company_id))
            new_total = Company.total_likes + 1

        await session.execute(update(Company).where(Company.id == company_id).values(total_likes=new_total))
        total = await session.scalar(select(Company.total_likes).where(Company.id == company_id))
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("like.toggled", company_id=company_id, liked=liked, total=total)
    return LikeResult(liked=liked, total=int(total or 0))


async def fetch_liked_ids(session: AsyncSession, device_id: str, company_ids: Iterable[int]) -> set[int]:
    """Return the subset of ``company_ids`` this device has liked."""

    ids = list(dict.fromkeys(company_ids))
    if not ids or not device_id:
        return set()

    try:
        rows = await session.scalars(
            select(CompanyLike.tsk_id).where(CompanyLike.device_id == device_id, CompanyLike.tsk_id.in_(ids))
        )
    except SQLAlchemyError as exc:
        logger.warning("like.lookup_failed", device_id=device_id, error=str(exc))
        return set()
    return set(rows)


RemoteToggle = Callable[[], Awaitable[LikeResult]]


@dataclass(frozen=True, slots=True)
class LikeToggle:
    """Local like state for one company card."""

    company_id: int
    liked: bool
    total: int

    def optimistic(self) -> "LikeToggle":
        if self.liked:
            return replace(self, liked=False, total=max(self.total - 1, 0))
        return replace(self, liked=True, total=self.total + 1)

    async def toggle(
        self,
        remote: RemoteToggle,
        *,
        on_optimistic: Callable[["LikeToggle"], None] | None = None,
    ) -> "LikeToggle":
        """Apply the optimistic flip, call ``remote`` once and settle.

        Returns the server state on success and ``self`` unchanged on any
        failure. Failures are logged, never raised.
        """

        if on_optimistic is not None:
            on_optimistic(self.optimistic())

        try:
            result = await remote()
        except Exception as exc:
            logger.warning("like.toggle.reverted", company_id=self.company_id, error=str(exc))
            return self

        return replace(self, liked=result.liked, total=result.total)
