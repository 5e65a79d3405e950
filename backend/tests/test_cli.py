from __future__ import annotations

import csv

import pytest
from typer.testing import CliRunner

from app.cli import app, import_rows
from app.core.config import get_settings

from conftest import company_row

runner = CliRunner()

_COLUMNS = ["office_type", "reg_number", "company_name", "address", "language", "support_legal", "support_start_date"]


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


def _write_csv(path, rows: list[dict[str, str]]) -> None:
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)


def test_import_like_and_analytics_commands(cli_env) -> None:
    csv_path = cli_env / "registry.csv"
    _write_csv(
        csv_path,
        [
            {
                "office_type": "本店",
                "reg_number": "19登-000001",
                "company_name": "Sakura Support",
                "address": "東京都新宿区",
                "language": "English",
                "support_legal": "Yes",
                "support_start_date": "2020-04-01",
            },
            {
                "office_type": "Warehouse",
                "reg_number": "19登-000002",
                "company_name": "Broken",
                "address": "",
                "language": "",
                "support_legal": "No",
                "support_start_date": "",
            },
        ],
    )

    first = runner.invoke(app, ["import-csv", str(csv_path)])
    second = runner.invoke(app, ["import-csv", str(csv_path)])

    assert first.exit_code == 0, first.output
    assert "Inserted: 1" in first.output
    assert "Invalid: 1" in first.output
    assert "Skipped (already present): 1" in second.output

    state_file = cli_env / "state.json"
    liked = runner.invoke(app, ["like", "1", "--state-file", str(state_file)])
    assert liked.exit_code == 0, liked.output
    assert "Company 1: liked (1 total)" in liked.output
    assert state_file.exists()

    missing = runner.invoke(app, ["like", "999", "--state-file", str(state_file)])
    assert missing.exit_code == 1

    analytics = runner.invoke(app, ["analytics", "--top", "1"])
    assert analytics.exit_code == 0, analytics.output
    assert "Sakura Support" in analytics.output


@pytest.mark.asyncio
async def test_import_rows_skips_known_registration_numbers(session, seed_companies) -> None:
    await seed_companies(company_row(reg_number="20登-000777"))

    inserted, skipped, invalid = await import_rows(
        session,
        [
            {"office_type": "HeadOffice", "reg_number": "20登-000777", "company_name": "Known"},
            {"office_type": "Branch", "reg_number": "20登-000778", "company_name": "New", "branch_name": "New Nagoya"},
            {"office_type": "HeadOffice", "reg_number": "", "company_name": "No number"},
        ],
    )

    assert (inserted, skipped, invalid) == (1, 1, 1)
