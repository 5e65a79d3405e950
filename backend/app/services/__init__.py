"""Service exports."""

from . import (
    analytics,
    application_email,
    classifier,
    filters,
    identity,
    investigate,
    likes,
    records,
    search,
)

__all__ = [
    "analytics",
    "application_email",
    "classifier",
    "filters",
    "identity",
    "investigate",
    "likes",
    "records",
    "search",
]
