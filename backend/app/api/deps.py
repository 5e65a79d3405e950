"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from app.core.config import AppSettings, get_settings
from app.core.db import get_session
from app.services.classifier import SectorClassifier

_classifier: SectorClassifier | None = None
_classifier_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    """Expose application settings as a dependency."""

    return get_settings()


async def get_db_session():
    """Provide an async SQLAlchemy session."""

    async with get_session() as session:
        yield session


def get_classifier(settings: AppSettings = Depends(get_app_settings)) -> SectorClassifier:
    """Return a classifier built from settings, rebuilt when settings change."""

    global _classifier, _classifier_settings
    if _classifier is None or _classifier_settings is not settings:
        _classifier = SectorClassifier.from_settings(settings)
        _classifier_settings = settings
    return _classifier


def require_device_id(x_device_id: str | None = Header(default=None)) -> str:
    """Read the opaque per-browser token sent with like calls."""

    device_id = (x_device_id or "").strip()
    if not device_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="X-Device-Id header is required.")
    return device_id
