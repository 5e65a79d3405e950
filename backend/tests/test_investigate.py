from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from structlog.testing import capture_logs

from app.core.errors import CompanyNotFoundError
from app.models.tables import Company
from app.services import investigate as investigate_service
from app.services.classifier import SectorClassifier
from app.services.investigate import build_search_url, investigate, load_company

from conftest import company_row


class FixedClassifier:
    def __init__(self, tags: str) -> None:
        self.tags = tags
        self.seen: list[int] = []

    async def classify(self, company) -> str:
        self.seen.append(company.id)
        return self.tags


async def _stored_tags(session_factory, company_id: int) -> str | None:
    async with session_factory() as db_session:
        return await db_session.scalar(select(Company.tags).where(Company.id == company_id))


@pytest.mark.asyncio
async def test_investigate_saves_tags_and_returns_handoff(session, session_factory, seed_companies) -> None:
    (company_id,) = await seed_companies(company_row(company_name="Sakura Support", representative="山田 太郎"))
    classifier = FixedClassifier("A90,L70")

    result = await investigate(session, company_id, classifier)

    assert result.tags == "A90,L70"
    assert result.saved is True
    assert classifier.seen == [company_id]
    assert await _stored_tags(session_factory, company_id) == "A90,L70"
    query = parse_qs(urlparse(result.search_url).query)
    assert query["udm"] == ["50"]
    assert "Sakura Support" in query["q"][0]
    assert "CEO: 山田 太郎" in query["q"][0]


@pytest.mark.asyncio
async def test_investigate_leaves_tags_alone_when_classifier_finds_nothing(
    session, session_factory, seed_companies
) -> None:
    (company_id,) = await seed_companies(company_row(tags="B80"))

    result = await investigate(session, company_id, FixedClassifier(""))

    assert result.tags == ""
    assert result.saved is False
    assert await _stored_tags(session_factory, company_id) == "B80"
    assert result.search_url


@pytest.mark.asyncio
async def test_failed_tag_write_still_hands_off(session, seed_companies, monkeypatch) -> None:
    (company_id,) = await seed_companies(company_row())

    async def broken_write(*args, **kwargs) -> None:
        raise OperationalError("UPDATE tsk_id", {}, Exception("database is locked"))

    monkeypatch.setattr(investigate_service, "write_tags", broken_write)

    result = await investigate(session, company_id, FixedClassifier("C75"))

    assert result.tags == "C75"
    assert result.saved is False
    assert result.search_url.startswith("https://www.google.com/search?")


@pytest.mark.asyncio
async def test_unknown_company_is_reported(session) -> None:
    with pytest.raises(CompanyNotFoundError):
        await investigate(session, 404, FixedClassifier("A90"))


@pytest.mark.asyncio
async def test_branch_rows_use_branch_details(session, seed_companies) -> None:
    (company_id,) = await seed_companies(
        company_row(
            office_type="Branch",
            company_name="Kaede Holdings",
            branch_name="Kaede Osaka",
            address="東京都",
            branch_address="大阪府大阪市北区",
        )
    )

    company = await load_company(session, company_id)
    url = build_search_url(company, base_url="https://search.example/find")

    assert url.startswith("https://search.example/find?")
    prompt = parse_qs(urlparse(url).query)["q"][0]
    assert '"Kaede Osaka"' in prompt
    assert "大阪府大阪市北区" in prompt
    assert "CEO" not in prompt


class TransactionSpyClassifier:
    """Records whether the session is mid-transaction while classifying."""

    def __init__(self, session, tags: str) -> None:
        self._session = session
        self.tags = tags
        self.in_transaction: list[bool] = []

    async def classify(self, company) -> str:
        self.in_transaction.append(self._session.in_transaction())
        return self.tags


@pytest.mark.asyncio
async def test_no_transaction_is_held_while_classifying(session, session_factory, seed_companies) -> None:
    (company_id,) = await seed_companies(company_row())
    classifier = TransactionSpyClassifier(session, "K80")

    result = await investigate(session, company_id, classifier)

    assert classifier.in_transaction == [False]
    assert result.saved is True
    assert await _stored_tags(session_factory, company_id) == "K80"
    assert session.in_transaction() is False


@pytest.mark.asyncio
async def test_exhausted_classifier_writes_nothing(session, session_factory, seed_companies) -> None:
    (company_id,) = await seed_companies(company_row(tags="J65"))
    calls: list[tuple[int, str]] = []

    def failing_factory(credential, model):
        calls.append((credential.index, model))
        raise RuntimeError("upstream unavailable")

    classifier = SectorClassifier(
        api_keys=["sk-one-1111", "sk-two-2222"],
        models=["model-a", "model-b", "model-c"],
        llm_factory=failing_factory,
    )

    with capture_logs() as logs:
        result = await investigate(session, company_id, classifier)

    assert result.tags == ""
    assert result.saved is False
    assert await _stored_tags(session_factory, company_id) == "J65"
    attempts = [entry for entry in logs if entry["event"] == "classifier.attempt"]
    assert len(attempts) == 6
    assert [(entry["credential"], entry["model"]) for entry in attempts] == [
        (f"key{index}:...{suffix}", model)
        for index, suffix in ((0, "1111"), (1, "2222"))
        for model in ("model-a", "model-b", "model-c")
    ]
    assert calls == [(index, model) for index in (0, 1) for model in ("model-a", "model-b", "model-c")]
