from pathlib import Path

import pytest
import requests

from email_asset_stats.fetch import CsvFetchError, fetch_csv_text


class _Response:
    def __init__(self, status_code: int, text: str = "") -> None:
        self.status_code = status_code
        self.text = text


class _Session:
    def __init__(self, response: _Response | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float) -> _Response:
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def test_fetch_reads_local_file_and_drops_bom(tmp_path: Path) -> None:
    path = tmp_path / "export.csv"
    path.write_text("\ufeffLanguage,Priority\n", encoding="utf-8")

    assert fetch_csv_text(str(path), timeout_seconds=1) == "Language,Priority\n"


def test_fetch_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(CsvFetchError, match="not found"):
        fetch_csv_text(str(tmp_path / "missing.csv"), timeout_seconds=1)


def test_fetch_url_returns_body() -> None:
    session = _Session(_Response(200, "a,b\n"))

    text = fetch_csv_text("https://example.com/emails.csv", timeout_seconds=7, session=session)

    assert text == "a,b\n"
    assert session.calls == [("https://example.com/emails.csv", 7)]


def test_fetch_url_non_success_status_raises() -> None:
    session = _Session(_Response(404))

    with pytest.raises(CsvFetchError, match="HTTP error! status: 404"):
        fetch_csv_text("https://example.com/emails.csv", timeout_seconds=1, session=session)


def test_fetch_url_network_error_is_wrapped() -> None:
    session = _Session(error=requests.ConnectionError("connection refused"))

    with pytest.raises(CsvFetchError, match="connection refused") as exc_info:
        fetch_csv_text("http://example.com/emails.csv", timeout_seconds=1, session=session)

    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_fetch_url_closes_session_it_creates(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[_OwnedSession] = []

    class _OwnedSession(_Session):
        def __init__(self) -> None:
            super().__init__(_Response(200, "a,b\n"))
            self.closed = False
            created.append(self)

        def __enter__(self) -> "_OwnedSession":
            return self

        def __exit__(self, *exc_info) -> None:
            self.closed = True

    monkeypatch.setattr(requests, "Session", _OwnedSession)

    assert fetch_csv_text("https://example.com/emails.csv", timeout_seconds=3) == "a,b\n"
    assert len(created) == 1
    assert created[0].closed is True
