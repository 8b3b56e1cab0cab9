from collections.abc import Iterable
from datetime import UTC, datetime
import re

from email_asset_stats.schemas import GroupStats, Record, Summary


STATUS_CATEGORIES: tuple[str, ...] = (
    "New Asset in Workflow",
    "Old Asset - Live",
    "QA Ready - Old Asset Updated",
    "In Progress",
    "Retired",
    "No Update Needed",
    "Not Created",
)

UNRANKED_PRIORITY = 999

_DIGITS = re.compile(r"\d")


def calculate_percentage(count: int, total: int) -> str:
    if total == 0:
        return "0%"
    return f"{count / total * 100:.1f}%"


def priority_rank(priority: str) -> int:
    """Rank a priority key by the number formed from all of its digits.

    ``"P1"`` ranks 1 and ``"P10 - Later"`` ranks 10. Keys without digits get
    ``UNRANKED_PRIORITY`` so they sort after every numbered priority.
    """
    digits = "".join(_DIGITS.findall(priority))
    if not digits:
        return UNRANKED_PRIORITY
    return int(digits)


def _count_into(groups: dict[str, dict[str, int]], totals: dict[str, int], key: str, status: str) -> None:
    if key not in groups:
        groups[key] = {}
        totals[key] = 0
    totals[key] += 1
    groups[key][status] = groups[key].get(status, 0) + 1


def _freeze(groups: dict[str, dict[str, int]], totals: dict[str, int]) -> dict[str, GroupStats]:
    return {key: GroupStats(total=totals[key], statuses=statuses) for key, statuses in groups.items()}


def build_summary(records: Iterable[Record], *, generated_at: datetime | None = None) -> Summary:
    status_counts = {status: 0 for status in STATUS_CATEGORIES}
    language_groups: dict[str, dict[str, int]] = {}
    language_totals: dict[str, int] = {}
    priority_groups: dict[str, dict[str, int]] = {}
    priority_totals: dict[str, int] = {}
    total_emails = 0

    for record in records:
        total_emails += 1
        status_counts[record.status] = status_counts.get(record.status, 0) + 1
        _count_into(language_groups, language_totals, record.language, record.status)
        _count_into(priority_groups, priority_totals, record.priority, record.status)

    # sorted() is stable, so ties keep first-seen order.
    sorted_languages = tuple(sorted(language_groups, key=lambda language: -language_totals[language]))
    sorted_priorities = tuple(sorted(priority_groups, key=priority_rank))

    return Summary(
        total_emails=total_emails,
        status_categories=STATUS_CATEGORIES,
        status_counts=status_counts,
        language_stats=_freeze(language_groups, language_totals),
        priority_stats=_freeze(priority_groups, priority_totals),
        sorted_languages=sorted_languages,
        sorted_priorities=sorted_priorities,
        generated_at=generated_at or datetime.now(UTC),
    )
