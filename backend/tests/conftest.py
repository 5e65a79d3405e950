"""Shared fixtures: an in-memory directory store and a row factory."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import date
from itertools import count
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import build_engine, init_models
from app.models.tables import Company, Leaderboard

_reg_numbers = count(1)


def company_row(**overrides: Any) -> Company:
    values: dict[str, Any] = {
        "office_type": "HeadOffice",
        "reg_number": f"19登-{next(_reg_numbers):06d}",
        "reg_date": date(2019, 4, 1),
        "company_name": "Sakura Support",
        "address": "東京都新宿区西新宿1-1-1",
        "support_legal": "No",
        "support_optional": "No",
        "total_likes": 0,
    }
    values.update(overrides)
    return Company(**values)


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_models(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
def seed_companies(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[list[int]]]:
    """Insert company rows in a separate session and return their ids in order."""

    async def _seed(*rows: Company) -> list[int]:
        async with session_factory() as db_session:
            db_session.add_all(rows)
            await db_session.commit()
            return [row.id for row in rows]

    return _seed


@pytest.fixture
def seed_leaderboard(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[None]]:
    async def _seed(*rows: dict[str, Any]) -> None:
        async with session_factory() as db_session:
            db_session.add_all(Leaderboard(**row) for row in rows)
            await db_session.commit()

    return _seed
