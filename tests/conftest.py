from collections.abc import Generator
from pathlib import Path

import pytest

from email_asset_stats.config import Settings
from email_asset_stats.database import build_session_factory
from email_asset_stats.pipeline import RefreshRunner


HEADER = "Language,Priority,Email Name,Email ID,Owner,Team,Link,Notes,Due,Updated,Status"


def csv_row(language: str, priority: str, status: str) -> str:
    middle = ",".join(f"col{index}" for index in range(2, 10))
    return f"{language},{priority},{middle},{status}"


def csv_text(*rows: str) -> str:
    return "\n".join([HEADER, *rows]) + "\n"


@pytest.fixture()
def temp_workspace(tmp_path: Path) -> Path:
    (tmp_path / "data").mkdir(parents=True, exist_ok=True)
    (tmp_path / "outputs").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture()
def export_path(temp_workspace: Path) -> Path:
    path = temp_workspace / "data" / "emails.csv"
    path.write_text(
        csv_text(
            csv_row("English", "P1", "New Asset in Workflow"),
            csv_row("English", "P2", "Retired"),
            csv_row("German", "P1", "In Progress"),
            csv_row("Backfill TBD", "P1", "Retired"),
            csv_row("", "P3", "Retired"),
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def test_settings(temp_workspace: Path, export_path: Path) -> Settings:
    return Settings(
        app_name="email-asset-stats",
        database_url=f"sqlite:///{temp_workspace / 'test.db'}",
        log_level="INFO",
        csv_source=str(export_path),
        output_dir=str(temp_workspace / "outputs"),
        fetch_timeout_seconds=5,
        refresh_interval_minutes=15,
    )


@pytest.fixture()
def runner(test_settings: Settings) -> Generator[RefreshRunner, None, None]:
    session_factory = build_session_factory(test_settings.database_url)
    yield RefreshRunner(test_settings, session_factory)
