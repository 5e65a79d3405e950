from __future__ import annotations

import pytest

from app.models.sectors import (
    SECTOR_CODES,
    SectorScore,
    extract_candidates,
    normalize_scores,
    parse_tags,
    sector_code_for_label,
    serialize_tags,
)


def test_tag_string_keeps_order_and_labels() -> None:
    scores = parse_tags("A95,K80,D65")

    assert [(s.code, s.percent) for s in scores] == [("A", 95), ("K", 80), ("D", 65)]
    assert scores[0].label == "Nursing Care"


@pytest.mark.parametrize(
    "scores",
    [
        [],
        [SectorScore("G", 72)],
        [SectorScore("A", 0)],
        [SectorScore("A", 100)],
        [SectorScore("B", 100), SectorScore("L", 0), SectorScore("E", 5)],
        [SectorScore(code, 100 - index) for index, code in enumerate(SECTOR_CODES)],
    ],
    ids=["empty", "single", "zero", "hundred", "mixed", "all-codes"],
)
def test_tag_string_round_trips(scores: list[SectorScore]) -> None:
    encoded = serialize_tags(scores)

    assert parse_tags(encoded) == scores
    assert serialize_tags(parse_tags(encoded)) == encoded
    if not scores:
        assert encoded == ""


def test_parse_tags_skips_invalid_tokens() -> None:
    scores = parse_tags("A90, Z50,K,B101,  L70 ,c40")

    assert serialize_tags(scores) == "A90,L70"


def test_parse_tags_handles_empty_values() -> None:
    assert parse_tags(None) == []
    assert parse_tags("") == []


def test_extract_candidates_ignores_codes_inside_words() -> None:
    text = 'Based on job postings: "A95, K80". The PDF45 brochure and 2L30 are noise. H120 is out of range.'

    candidates = extract_candidates(text)

    assert candidates == [SectorScore("A", 95), SectorScore("K", 80)]


def test_normalize_scores_thresholds_ranks_and_deduplicates() -> None:
    scores = [
        SectorScore("D", 65),
        SectorScore("A", 70),
        SectorScore("K", 40),
        SectorScore("A", 95),
        SectorScore("L", 70),
    ]

    normalized = normalize_scores(scores, min_confidence=60)

    assert serialize_tags(normalized) == "A95,L70,D65"


def test_normalize_scores_keeps_input_order_for_ties() -> None:
    normalized = normalize_scores([SectorScore("C", 80), SectorScore("B", 80)])

    assert [s.code for s in normalized] == ["C", "B"]


def test_sector_code_for_label_accepts_labels_codes_and_aliases() -> None:
    assert sector_code_for_label("Food Service") == "L"
    assert sector_code_for_label("  building   CLEANING ") == "B"
    assert sector_code_for_label("k") == "K"
    assert sector_code_for_label("restaurant") == "L"
    assert sector_code_for_label("Space Travel") is None
    assert sector_code_for_label("") is None


def test_sector_codes_cover_a_through_l() -> None:
    assert "".join(SECTOR_CODES) == "ABCDEFGHIJKL"
