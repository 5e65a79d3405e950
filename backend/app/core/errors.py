"""Domain exceptions raised by the service layer."""

from __future__ import annotations


class DirectoryError(Exception):
    """Base class for directory service errors."""


class CompanyNotFoundError(DirectoryError):
    """Raised when a company id does not exist in the directory."""

    def __init__(self, company_id: int) -> None:
        super().__init__(f"Company {company_id} not found.")
        self.company_id = company_id


class InvalidFiltersError(DirectoryError, ValueError):
    """Raised when a filter combination is inconsistent."""
