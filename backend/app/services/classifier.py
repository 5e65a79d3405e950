"""AI sector classification with credential and model failover.

A company is researched by a web-search grounded completion. Each
(credential, model) pair is tried in priority order, one request at a time,
until one returns at least one sector above the confidence threshold. When
every pair fails the result is the empty tag string, which callers treat as
"no classification available" rather than an error.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field, ValidationError

from app.core.config import AppSettings, get_settings
from app.core.logging import get_logger
from app.models.company import CompanyRecord
from app.models.sectors import (
    SECTOR_LEGEND,
    SectorScore,
    extract_candidates,
    normalize_scores,
    sector_code_for_label,
    serialize_tags,
)

logger = get_logger(__name__)

WEB_SEARCH_TOOL: dict[str, Any] = {"type": "web_search_preview"}

SYSTEM_PROMPT = (
    "You research Japanese Registered Support Organizations (登録支援機関) that place "
    "Specified Skilled Worker (特定技能) visa holders. You always search the web before answering "
    "and you never invent sectors without evidence."
)

PROMPT_TEMPLATE = """Analyze this Japanese Registered Support Organization (TSK).
Company Name: {company_name}
Address: {address}
Registration Number: {reg_number}
Representative: {representative}

Task: Use web search to identify which Specified Skilled Worker sectors this organization handles or recruits for.
Assign each sector a confidence percentage (0-100) based on the strength of evidence such as job postings,
the official website, or recruitment pages. Prefer Japanese-language sources.

Sector codes:
{legend}

Instructions:
1. Search for the official website, job postings and recruitment pages.
2. Only report sectors with a confidence of at least {min_confidence}%.
3. Sort the sectors by confidence, highest first.
4. If the organization is general or nothing can be found, return an empty answer.
{output_instructions}"""

CODES_OUTPUT_INSTRUCTIONS = (
    '5. Write each sector as its code followed immediately by the percentage (e.g. "A90").\n'
    "6. Return ONLY the codes separated by commas, nothing else.\n\n"
    'Example output: "A95,K80,D65"'
)

JSON_OUTPUT_INSTRUCTIONS = (
    "5. Return ONLY a JSON object of this exact shape, with no markdown or prose:\n"
    '{{"sectors": [{{"category": "<one of: {labels}>", "score": <integer 0-100>}}]}}\n'
    '6. Use an empty list for "sectors" when nothing qualifies.'
)


SectorCategory = Enum(  # type: ignore[misc]
    "SectorCategory",
    {code: label for code, label in SECTOR_LEGEND.items()},
    type=str,
)


class SectorAssessment(BaseModel):
    category: SectorCategory
    score: int = Field(..., ge=0, le=100)


class SectorReport(BaseModel):
    sectors: list[SectorAssessment] = Field(default_factory=list)


class MalformedOutputError(ValueError):
    """Raised when model output does not match the expected structure."""


@dataclass(frozen=True, slots=True)
class Credential:
    index: int
    api_key: str

    @property
    def label(self) -> str:
        """Loggable identity that never exposes the key itself."""

        return f"key{self.index}:...{self.api_key[-4:]}"


LLMFactory = Callable[[Credential, str], Any]


def _supports_temperature(model: str) -> bool:
    return not model.startswith(("gpt-5", "o1", "o3", "o4"))


def build_web_search_llm(credential: Credential, model: str, *, settings: AppSettings) -> Any:
    """Create a Responses API chat model with the web search tool bound."""

    kwargs: dict[str, Any] = {
        "model": model,
        "openai_api_key": credential.api_key,
        "openai_api_base": settings.openai_api_base,
        "use_responses_api": True,
        "timeout": settings.classifier_timeout_seconds,
        # Failover to the next candidate replaces client-side retries.
        "max_retries": 0,
    }
    if _supports_temperature(model):
        kwargs["temperature"] = settings.classifier_temperature

    return ChatOpenAI(**kwargs).bind_tools([WEB_SEARCH_TOOL])


def _message_content_to_text(message: Any) -> str:
    """Coerce message content into a string for downstream parsing."""

    content = message.content if isinstance(message, AIMessage) else getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and item.get("type", "text") == "text" and "text" in item:
                parts.append(str(item["text"]))
            elif isinstance(item, str):
                parts.append(item)
        return "".join(parts)
    return str(content)


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("```", 2)[1] if stripped.count("```") >= 2 else stripped.lstrip("`")
    if stripped.lower().startswith("json"):
        stripped = stripped[4:]
    return stripped.strip()


def parse_code_output(text: str) -> list[SectorScore]:
    return extract_candidates(text)


def parse_json_output(text: str) -> list[SectorScore]:
    """Validate schema-constrained output and translate labels to codes."""

    cleaned = _strip_code_fence(text)
    if not cleaned:
        return []
    try:
        report = SectorReport.model_validate_json(cleaned)
    except ValidationError as exc:
        raise MalformedOutputError(f"Sector report failed validation: {exc.error_count()} error(s)") from exc

    scores: list[SectorScore] = []
    for item in report.sectors:
        code = sector_code_for_label(item.category.value)
        if code is not None:
            scores.append(SectorScore(code=code, percent=item.score))
    return scores


class SectorClassifier:
    """Sequential (credential x model) fallback around a grounded completion."""

    def __init__(
        self,
        *,
        api_keys: Sequence[str],
        models: Sequence[str],
        min_confidence: int = 60,
        output_format: Literal["codes", "json"] = "codes",
        llm_factory: LLMFactory,
    ) -> None:
        self.credentials = [Credential(index=i, api_key=key) for i, key in enumerate(api_keys)]
        self.models = list(models)
        self.min_confidence = min_confidence
        self.output_format = output_format
        self._llm_factory = llm_factory

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "SectorClassifier":
        settings = settings or get_settings()
        return cls(
            api_keys=settings.credential_pool(),
            models=settings.classifier_models,
            min_confidence=settings.classifier_min_confidence,
            output_format=settings.classifier_output_format,
            llm_factory=lambda credential, model: build_web_search_llm(credential, model, settings=settings),
        )

    def build_prompt(self, company: CompanyRecord) -> str:
        legend = "\n".join(f"{code}: {label}" for code, label in SECTOR_LEGEND.items())
        if self.output_format == "json":
            output_instructions = JSON_OUTPUT_INSTRUCTIONS.format(labels=" | ".join(SECTOR_LEGEND.values()))
        else:
            output_instructions = CODES_OUTPUT_INSTRUCTIONS

        return PROMPT_TEMPLATE.format(
            company_name=company.display_name,
            address=company.display_address or "N/A",
            reg_number=company.reg_number,
            representative=company.representative or "N/A",
            legend=legend,
            min_confidence=self.min_confidence,
            output_instructions=output_instructions,
        )

    def parse_output(self, text: str) -> list[SectorScore]:
        """Turn raw model text into thresholded, ranked, unique scores."""

        if self.output_format == "json":
            candidates = parse_json_output(text)
        else:
            candidates = parse_code_output(text)
        return normalize_scores(candidates, min_confidence=self.min_confidence)

    async def classify(self, company: CompanyRecord) -> str:
        """Return a tag string such as ``"A95,K70"``, or ``""`` when nothing qualifies."""

        if not self.credentials or not self.models:
            logger.warning(
                "classifier.unconfigured",
                company_id=company.id,
                credentials=len(self.credentials),
                models=len(self.models),
            )
            return ""

        messages: list[BaseMessage] = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=self.build_prompt(company)),
        ]

        attempts = 0
        for credential in self.credentials:
            for model in self.models:
                attempts += 1
                attempt_log = logger.bind(
                    company_id=company.id,
                    credential=credential.label,
                    model=model,
                    attempt=attempts,
                )
                try:
                    llm = self._llm_factory(credential, model)
                    response = await llm.ainvoke(messages)
                    scores = self.parse_output(_message_content_to_text(response))
                except Exception as exc:
                    attempt_log.warning(
                        "classifier.attempt",
                        outcome="error",
                        error_type=type(exc).__name__,
                        error=str(exc)[:300],
                    )
                    continue

                if not scores:
                    attempt_log.info("classifier.attempt", outcome="no_candidates")
                    continue

                tags = serialize_tags(scores)
                attempt_log.info("classifier.attempt", outcome="success", tags=tags)
                return tags

        logger.info("classifier.exhausted", company_id=company.id, attempts=attempts)
        return ""
