"""Pydantic schemas for directory records and API payloads."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from app.models.sectors import SECTOR_CODES, SectorScore, parse_tags


class OfficeType(str, Enum):
    HEAD_OFFICE = "HeadOffice"
    BRANCH = "Branch"


_OFFICE_TYPE_ALIASES: dict[str, OfficeType] = {
    "headoffice": OfficeType.HEAD_OFFICE,
    "head office": OfficeType.HEAD_OFFICE,
    "head": OfficeType.HEAD_OFFICE,
    "本店": OfficeType.HEAD_OFFICE,
    "本社": OfficeType.HEAD_OFFICE,
    "branch": OfficeType.BRANCH,
    "branch office": OfficeType.BRANCH,
    "支店": OfficeType.BRANCH,
    "支社": OfficeType.BRANCH,
    "営業所": OfficeType.BRANCH,
}


class CompanyFields(BaseModel):
    """Company columns as ingested, before the store assigns an id."""

    model_config = ConfigDict(from_attributes=True)

    office_type: OfficeType
    reg_number: str = Field(..., min_length=1)
    reg_date: date | None = None
    company_name: str = Field(..., min_length=1)
    zipcode: str | None = None
    address: str | None = None
    phone: str | None = None
    representative: str | None = None
    branch_name: str | None = None
    branch_zipcode: str | None = None
    branch_address: str | None = None
    support_legal: str = "No"
    support_optional: str = "No"
    support_start_date: date | None = None
    language: str | None = None
    note: str | None = None
    total_likes: int = Field(default=0, ge=0)
    tags: str | None = None

    @field_validator(
        "reg_date",
        "zipcode",
        "address",
        "phone",
        "representative",
        "branch_name",
        "branch_zipcode",
        "branch_address",
        "support_start_date",
        "language",
        "note",
        "tags",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("office_type", mode="before")
    @classmethod
    def _coerce_office_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            alias = _OFFICE_TYPE_ALIASES.get(value.strip().lower())
            if alias is not None:
                return alias
        return value

    @field_validator("total_likes", mode="before")
    @classmethod
    def _default_likes(cls, value: Any) -> Any:
        return 0 if value is None else value


class CompanyRecord(CompanyFields):
    """Validated view of a row from the ``tsk_id`` table."""

    id: int

    @property
    def is_branch(self) -> bool:
        return self.office_type is OfficeType.BRANCH

    @property
    def display_name(self) -> str:
        if self.is_branch and self.branch_name:
            return self.branch_name
        return self.company_name

    @property
    def display_address(self) -> str | None:
        if self.is_branch and self.branch_address:
            return self.branch_address
        return self.address

    @property
    def display_zipcode(self) -> str | None:
        if self.is_branch and self.branch_zipcode:
            return self.branch_zipcode
        return self.zipcode

    @property
    def sector_tags(self) -> list[SectorScore]:
        return parse_tags(self.tags)


class SearchFilters(BaseModel):
    """Client-held search state. Included and excluded languages never overlap."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    prefectures: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()
    excluded_languages: tuple[str, ...] = ()
    support_legal: bool = False
    support_optional: bool = False
    date_sort: Literal["newest", "oldest"] | None = None

    @model_validator(mode="after")
    def _languages_are_disjoint(self) -> "SearchFilters":
        overlap = set(self.languages) & set(self.excluded_languages)
        if overlap:
            raise ValueError(f"Languages cannot be both included and excluded: {sorted(overlap)}")
        return self


class SearchRequest(BaseModel):
    page: int = Field(default=1, ge=1)
    filters: SearchFilters = Field(default_factory=SearchFilters)


class SearchPage(BaseModel):
    records: list[CompanyRecord]
    total: int
    page: int
    page_size: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return -(-self.total // self.page_size) if self.page_size else 0


class LikeResult(BaseModel):
    liked: bool
    total: int


class LikedIdsRequest(BaseModel):
    device_id: str = Field(..., min_length=1)
    company_ids: list[int] = Field(default_factory=list, max_length=200)


class LeaderboardEntry(BaseModel):
    """Validated view of one ``leaderboard_data`` row."""

    model_config = ConfigDict(from_attributes=True)

    prefecture: str = Field(..., min_length=1)
    total_tsk: int = Field(..., ge=0)
    total_tags_analyzed: int = Field(..., ge=0)
    ssw_a: int = Field(default=0, ge=0)
    ssw_b: int = Field(default=0, ge=0)
    ssw_c: int = Field(default=0, ge=0)
    ssw_d: int = Field(default=0, ge=0)
    ssw_e: int = Field(default=0, ge=0)
    ssw_f: int = Field(default=0, ge=0)
    ssw_g: int = Field(default=0, ge=0)
    ssw_h: int = Field(default=0, ge=0)
    ssw_i: int = Field(default=0, ge=0)
    ssw_j: int = Field(default=0, ge=0)
    ssw_k: int = Field(default=0, ge=0)
    ssw_l: int = Field(default=0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def sector_counts(self) -> dict[str, int]:
        return {code: getattr(self, f"ssw_{code.lower()}") for code in SECTOR_CODES}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsOverview(BaseModel):
    total_companies: int
    total_analyzed: int


class AnalyticsSnapshot(BaseModel):
    overview: AnalyticsOverview
    rows: list[LeaderboardEntry]
    top_liked: list[CompanyRecord]
    timestamp: datetime = Field(default_factory=_utcnow)


class InvestigationResult(BaseModel):
    company_id: int
    tags: str
    saved: bool
    search_url: str
