import logging
from pathlib import Path

import requests


logger = logging.getLogger(__name__)

_BOM = "\ufeff"


class CsvFetchError(RuntimeError):
    pass


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_csv_text(
    source: str,
    *,
    timeout_seconds: float,
    session: requests.Session | None = None,
) -> str:
    if is_url(source) and session is not None:
        text = _fetch_url(source, timeout_seconds=timeout_seconds, session=session)
    elif is_url(source):
        with requests.Session() as owned_session:
            text = _fetch_url(source, timeout_seconds=timeout_seconds, session=owned_session)
    else:
        text = _read_file(Path(source))
    return text.removeprefix(_BOM)


def _fetch_url(url: str, *, timeout_seconds: float, session: requests.Session) -> str:
    try:
        response = session.get(url, timeout=timeout_seconds)
    except requests.RequestException as exc:
        raise CsvFetchError(f"request failed for {url}: {exc}") from exc

    if not 200 <= response.status_code < 300:
        logger.error("csv fetch rejected", extra={"url": url, "status_code": response.status_code})
        raise CsvFetchError(f"HTTP error! status: {response.status_code}")
    return response.text


def _read_file(path: Path) -> str:
    if not path.exists():
        raise CsvFetchError(f"csv file not found: {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CsvFetchError(f"could not read {path}: {exc}") from exc
