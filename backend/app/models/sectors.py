"""Sector codes and the compact tag string format (e.g. ``"A90,K75"``)."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

SECTOR_LEGEND: dict[str, str] = {
    "A": "Nursing Care",
    "B": "Building Cleaning",
    "C": "Construction",
    "D": "Manufacturing",
    "E": "Electronics / Electric",
    "F": "Automobile Repair",
    "G": "Aviation",
    "H": "Accommodation",
    "I": "Agriculture",
    "J": "Fishery",
    "K": "Food & Beverage Manufacturing",
    "L": "Food Service",
}

SECTOR_CODES: tuple[str, ...] = tuple(SECTOR_LEGEND)

# Labels a model may emit for each sector, lowercased. Canonical labels first.
SECTOR_MAP: dict[str, str] = {
    **{label.lower(): code for code, label in SECTOR_LEGEND.items()},
    "kaigo": "A",
    "caregiving": "A",
    "nursing": "A",
    "cleaning": "B",
    "building cleaning management": "B",
    "manufacturing / factory": "D",
    "factory": "D",
    "industrial products manufacturing": "D",
    "electronics": "E",
    "electric": "E",
    "electrical, electronics and information": "E",
    "auto repair": "F",
    "automobile maintenance": "F",
    "airport ground handling": "G",
    "hotel": "H",
    "accommodation / hotel": "H",
    "farming": "I",
    "fisheries": "J",
    "aquaculture": "J",
    "food manufacturing": "K",
    "food and beverage manufacturing": "K",
    "food service / restaurant": "L",
    "restaurant": "L",
}

_TOKEN_RE = re.compile(r"^([A-L])(\d{1,3})$")
_CANDIDATE_RE = re.compile(r"(?<![A-Za-z0-9])([A-L])(\d{1,3})(?!\d)")


@dataclass(frozen=True, slots=True)
class SectorScore:
    code: str
    percent: int

    @property
    def label(self) -> str:
        return SECTOR_LEGEND[self.code]

    def to_token(self) -> str:
        return f"{self.code}{self.percent}"


def sector_code_for_label(label: str) -> str | None:
    """Translate a human-readable category label into its sector code."""

    cleaned = " ".join(label.strip().lower().split())
    if not cleaned:
        return None
    if cleaned.upper() in SECTOR_LEGEND:
        return cleaned.upper()
    return SECTOR_MAP.get(cleaned)


def serialize_tags(scores: Iterable[SectorScore]) -> str:
    return ",".join(score.to_token() for score in scores)


def parse_tags(raw: str | None) -> list[SectorScore]:
    """Parse a stored tag string, skipping tokens that are not valid.

    Order is preserved as written; callers that need ranking go through
    :func:`normalize_scores`.
    """

    if not raw:
        return []

    scores: list[SectorScore] = []
    for token in raw.split(","):
        match = _TOKEN_RE.match(token.strip())
        if match is None:
            continue
        percent = int(match.group(2))
        if percent > 100:
            continue
        scores.append(SectorScore(code=match.group(1), percent=percent))
    return scores


def extract_candidates(text: str) -> list[SectorScore]:
    """Pull every ``<code><percent>`` pair out of free-form model output."""

    candidates: list[SectorScore] = []
    for match in _CANDIDATE_RE.finditer(text or ""):
        percent = int(match.group(2))
        if percent > 100:
            continue
        candidates.append(SectorScore(code=match.group(1), percent=percent))
    return candidates


def normalize_scores(scores: Iterable[SectorScore], *, min_confidence: int = 0) -> list[SectorScore]:
    """Threshold, rank descending and keep the highest score per code."""

    ranked = sorted(
        (score for score in scores if score.percent >= min_confidence),
        key=lambda score: score.percent,
        reverse=True,
    )
    seen: set[str] = set()
    unique: list[SectorScore] = []
    for score in ranked:
        if score.code in seen:
            continue
        seen.add(score.code)
        unique.append(score)
    return unique
