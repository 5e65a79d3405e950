"""Pure mutations over :class:`SearchFilters`.

Each function returns a new filters value; the input is never modified. The
language toggle is the only way languages move between the included and
excluded sets, which keeps the two disjoint.
"""

from __future__ import annotations

from enum import Enum

from app.models.company import SearchFilters

LANGUAGES: tuple[str, ...] = (
    "Indonesian",
    "English",
    "Vietnamese",
    "Chinese",
    "Filipino (Tagalog)",
    "Burmese",
    "Nepali",
    "Thai",
    "Cambodian (Khmer)",
    "Mongolian",
    "Uzbek",
    "Sinhalese",
)


class LanguageState(str, Enum):
    NEUTRAL = "neutral"
    INCLUDED = "included"
    EXCLUDED = "excluded"


def language_state(filters: SearchFilters, language: str) -> LanguageState:
    if language in filters.languages:
        return LanguageState.INCLUDED
    if language in filters.excluded_languages:
        return LanguageState.EXCLUDED
    return LanguageState.NEUTRAL


def toggle_language(filters: SearchFilters, language: str) -> SearchFilters:
    """Cycle a language neutral -> included -> excluded -> neutral."""

    included = [lang for lang in filters.languages if lang != language]
    excluded = [lang for lang in filters.excluded_languages if lang != language]

    state = language_state(filters, language)
    if state is LanguageState.NEUTRAL:
        included.append(language)
    elif state is LanguageState.INCLUDED:
        excluded.append(language)

    return filters.model_copy(update={"languages": tuple(included), "excluded_languages": tuple(excluded)})


def set_languages(filters: SearchFilters, included: list[str], excluded: list[str]) -> SearchFilters:
    """Replace both language sets at once; a language listed twice ends up included."""

    included_unique = list(dict.fromkeys(included))
    excluded_unique = [lang for lang in dict.fromkeys(excluded) if lang not in included_unique]
    return filters.model_copy(
        update={"languages": tuple(included_unique), "excluded_languages": tuple(excluded_unique)}
    )


def toggle_prefecture(filters: SearchFilters, prefecture: str) -> SearchFilters:
    if prefecture in filters.prefectures:
        remaining = tuple(pref for pref in filters.prefectures if pref != prefecture)
    else:
        remaining = (*filters.prefectures, prefecture)
    return filters.model_copy(update={"prefectures": remaining})


def reset_languages(filters: SearchFilters) -> SearchFilters:
    return filters.model_copy(update={"languages": (), "excluded_languages": ()})
