from collections.abc import Iterator, Sequence

from email_asset_stats.aggregate import STATUS_CATEGORIES
from email_asset_stats.csv_reader import iter_rows
from email_asset_stats.schemas import Record


NOT_CREATED = "Not Created"
UNKNOWN_LANGUAGE = "Unknown"
UNASSIGNED_PRIORITY = "Unassigned"

# Placeholder rows in the export that do not name a language.
EXCLUDED_LANGUAGE_MARKERS = ("Backfill TBD", "(Backfill TBD)", "Kelsey Craddock")

LANGUAGE_COLUMN = 0
PRIORITY_COLUMN = 1
STATUS_COLUMN = 10


def clean_status(status: str | None, categories: Sequence[str] = STATUS_CATEGORIES) -> str:
    """Map a raw status onto one of the known categories.

    Only exact matches are kept; any other value, including differently
    capitalized ones, is counted as ``Not Created``.
    """
    value = (status or "").strip()
    if value in categories:
        return value
    return NOT_CREATED


def clean_language(language: str | None) -> str | None:
    value = (language or "").strip()
    if not value:
        return UNKNOWN_LANGUAGE

    if any(marker in value for marker in EXCLUDED_LANGUAGE_MARKERS):
        return None

    if value[:1] in ("'", '"'):
        value = value[1:]
    if value[-1:] in ("'", '"'):
        value = value[:-1]
    return value


def clean_priority(priority: str | None) -> str:
    value = (priority or "").strip()
    return value or UNASSIGNED_PRIORITY


def parse_records(text: str) -> Iterator[Record]:
    for row in iter_rows(text):
        language = clean_language(row[LANGUAGE_COLUMN])
        if not language or language == UNKNOWN_LANGUAGE:
            continue
        yield Record(
            language=language,
            priority=clean_priority(row[PRIORITY_COLUMN]),
            status=clean_status(row[STATUS_COLUMN]),
        )
