"""Boundary validation from raw store rows into typed records."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.logging import get_logger
from app.models.company import CompanyRecord, LeaderboardEntry

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate_rows(rows: Iterable[Any], model: type[ModelT], event: str) -> list[ModelT]:
    validated: list[ModelT] = []
    for row in rows:
        try:
            if isinstance(row, dict):
                validated.append(model.model_validate(row))
            else:
                validated.append(model.model_validate(row, from_attributes=True))
        except ValidationError as exc:
            logger.warning(
                event,
                row_id=getattr(row, "id", None) if not isinstance(row, dict) else row.get("id"),
                errors=exc.errors(include_url=False, include_context=False),
            )
    return validated


def to_company_records(rows: Iterable[Any]) -> list[CompanyRecord]:
    """Validate company rows, dropping (and logging) any that are malformed."""

    return _validate_rows(rows, CompanyRecord, "company.row.invalid")


def to_leaderboard_entries(rows: Iterable[Any]) -> list[LeaderboardEntry]:
    """Validate leaderboard rows, dropping (and logging) any that are malformed."""

    return _validate_rows(rows, LeaderboardEntry, "leaderboard.row.invalid")
