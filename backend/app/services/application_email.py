"""Japanese job application email addressed to a support organization."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator, model_validator


@dataclass(frozen=True, slots=True)
class SSWField:
    id: str
    jp_field: str
    jp_exam: str


@dataclass(frozen=True, slots=True)
class LanguageLevel:
    id: str
    jp: str


SSW_FIELDS: dict[str, SSWField] = {
    field.id: field
    for field in (
        SSWField("caregiver", "介護", "介護技能評価試験、介護日本語評価試験"),
        SSWField("food_service", "外食業", "外食業特定技能1号技能測定試験"),
        SSWField("agriculture", "農業", "農業技能測定試験1号"),
        SSWField("food_manufacturing", "飲食料品製造業", "飲食料品製造業特定技能1号技能測定試験"),
        SSWField("auto_repair", "自動車整備", "自動車整備分野特定技能1号評価試験"),
        SSWField("fishery_aquaculture", "漁業（養殖業）", "1号漁業技能測定試験(養殖業)"),
        SSWField("fishery_fishing", "漁業（漁業）", "1号漁業技能測定試験(漁業)"),
        SSWField("construction", "建設", "建設分野特定技能1号評価試験"),
        SSWField("accommodation", "宿泊", "宿泊分野特定技能1号評価試験"),
        SSWField(
            "manufacturing",
            "素形材・産業機械・電気電子情報関連製造業",
            "製造分野特定技能1号評価試験",
        ),
    )
}

JAPANESE_LEVELS: dict[str, LanguageLevel] = {
    level.id: level
    for level in (
        LanguageLevel("n1", "JLPT N1"),
        LanguageLevel("n2", "JLPT N2"),
        LanguageLevel("n3", "JLPT N3"),
        LanguageLevel("n4", "JLPT N4"),
        LanguageLevel("n5", "JLPT N5"),
        LanguageLevel("jft", "JFT-Basic A2"),
        LanguageLevel("nat1", "NAT-TEST 1級"),
        LanguageLevel("nat2", "NAT-TEST 2級"),
        LanguageLevel("nat3", "NAT-TEST 3級"),
        LanguageLevel("nat4", "NAT-TEST 4級"),
        LanguageLevel("nat5", "NAT-TEST 5級"),
    )
}

_KATAKANA_RE = re.compile(r"^[\u30A0-\u30FF\s]+$")
_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_CORPORATE_SUFFIX_RE = re.compile(
    r"\s+(Company\s+Limited|Co\.,\s*Ltd\.?|Ltd\.?|Inc\.?|K\.K\.?|Corp\.?|Corporation)\s*$",
    re.IGNORECASE,
)
_CORPORATE_PREFIX_RE = re.compile(r"^(株式会社|有限会社|合同会社)\s*")


class ApplicationForm(BaseModel):
    country: str = Field(default="インドネシア", min_length=1)
    nickname_kana: str
    ssw_field_id: str
    experience: bool = False
    jlpt_id: str
    jlpt_date: str | None = None
    ssw_cert_id: str
    ssw_cert_date: str | None = None
    desired_job: str = Field(..., min_length=1)
    full_name_kana: str
    full_name: str = ""
    address: str = "インドネシア"
    email: str = Field(..., min_length=3)
    phone: str = ""

    @field_validator("nickname_kana", "full_name_kana")
    @classmethod
    def _katakana_only(cls, value: str) -> str:
        value = value.strip()
        if not value or not _KATAKANA_RE.match(value):
            raise ValueError("must be written in katakana (e.g. ヤマダ)")
        return value

    @field_validator("jlpt_date", "ssw_cert_date")
    @classmethod
    def _year_month(cls, value: str | None) -> str | None:
        if value in (None, ""):
            return None
        if not _YEAR_MONTH_RE.match(value):
            raise ValueError("must be formatted as YYYY-MM")
        return value

    @model_validator(mode="after")
    def _known_ids(self) -> "ApplicationForm":
        if self.ssw_field_id not in SSW_FIELDS:
            raise ValueError(f"unknown SSW field: {self.ssw_field_id}")
        if self.ssw_cert_id not in SSW_FIELDS:
            raise ValueError(f"unknown SSW certificate: {self.ssw_cert_id}")
        if self.jlpt_id not in JAPANESE_LEVELS:
            raise ValueError(f"unknown language certificate: {self.jlpt_id}")
        return self


def clean_company_name(name: str) -> str:
    """Drop legal-form suffixes/prefixes so the salutation reads 株式会社<name>."""

    stripped = _CORPORATE_SUFFIX_RE.sub("", name.strip())
    return _CORPORATE_PREFIX_RE.sub("", stripped).strip()


def format_year_month_jp(value: str | None) -> str:
    if not value:
        return "----年--月"
    year, month = value.split("-")
    return f"{year}年{month}月"


def render_application_email(company_name: str, form: ApplicationForm) -> str:
    field = SSW_FIELDS[form.ssw_field_id]
    cert = SSW_FIELDS[form.ssw_cert_id]
    level = JAPANESE_LEVELS[form.jlpt_id]
    experience_text = "経験者" if form.experience else "未経験"

    return f"""株式会社{clean_company_name(company_name)}
採用ご担当者様

はじめまして。
{form.country}国籍の{form.nickname_kana}と申します。

特定技能「{field.jp_field}」で就職先を探しております。{experience_text}でも応募可能な求人をご紹介いただくことは可能でしょうか。

日本語力：{level.jp}（{format_year_month_jp(form.jlpt_date)} 合格）
資格：{cert.jp_exam}（{format_year_month_jp(form.ssw_cert_date)} 合格）
希望職種：{form.desired_job}

体を動かす仕事や、
シフト勤務は問題ありません。
日本で長く働きたいと考えています。

入社時期や在留資格の手続きについては、
会社の方針に従います。

履歴書（CV）を添付いたします。ご確認のほどよろしくお願いいたします。

氏名：{form.full_name_kana}
({form.full_name}）
住所：{form.address}
メール：{form.email}
電話：{form.phone}（WhatsApp可）"""
