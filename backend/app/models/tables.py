"""SQLAlchemy models for the company directory store."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base declarative model."""


class Company(Base):
    """One registered support organization or branch office."""

    __tablename__ = "tsk_id"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    office_type: Mapped[str] = mapped_column(String, nullable=False)
    reg_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    reg_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    company_name: Mapped[str] = mapped_column(String, nullable=False)
    zipcode: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    representative: Mapped[str | None] = mapped_column(String, nullable=True)
    branch_name: Mapped[str | None] = mapped_column(String, nullable=True)
    branch_zipcode: Mapped[str | None] = mapped_column(String, nullable=True)
    branch_address: Mapped[str | None] = mapped_column(String, nullable=True)
    support_legal: Mapped[str] = mapped_column(String, nullable=False, default="No")
    support_optional: Mapped[str] = mapped_column(String, nullable=False, default="No")
    support_start_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    language: Mapped[str | None] = mapped_column(Text, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    tags: Mapped[str | None] = mapped_column(String, nullable=True)


class CompanyLike(Base):
    """Membership row: a device has liked a company."""

    __tablename__ = "tsk_likes"
    __table_args__ = (UniqueConstraint("device_id", "tsk_id", name="uq_device_like"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    tsk_id: Mapped[int] = mapped_column(ForeignKey("tsk_id.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Leaderboard(Base):
    """Precomputed per-prefecture aggregate, refreshed outside this service."""

    __tablename__ = "leaderboard_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prefecture: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    total_tsk: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_tags_analyzed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_a: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_b: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_c: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_d: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_e: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_f: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_h: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_i: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_j: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_k: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ssw_l: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
