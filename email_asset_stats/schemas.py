from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Record:
    language: str
    priority: str
    status: str


@dataclass(frozen=True)
class GroupStats:
    total: int
    statuses: dict[str, int]

    def to_dict(self) -> dict[str, object]:
        return {"total": self.total, "statuses": dict(self.statuses)}


@dataclass(frozen=True)
class Summary:
    total_emails: int
    status_categories: tuple[str, ...]
    status_counts: dict[str, int]
    language_stats: dict[str, GroupStats]
    priority_stats: dict[str, GroupStats]
    sorted_languages: tuple[str, ...]
    sorted_priorities: tuple[str, ...]
    generated_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "total_emails": self.total_emails,
            "status_categories": list(self.status_categories),
            "status_counts": dict(self.status_counts),
            "language_stats": {key: stats.to_dict() for key, stats in self.language_stats.items()},
            "priority_stats": {key: stats.to_dict() for key, stats in self.priority_stats.items()},
            "sorted_languages": list(self.sorted_languages),
            "sorted_priorities": list(self.sorted_priorities),
            "generated_at": self.generated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> "Summary":
        def _stats(raw: dict[str, dict]) -> dict[str, GroupStats]:
            return {
                key: GroupStats(total=int(value["total"]), statuses=dict(value["statuses"]))
                for key, value in raw.items()
            }

        return cls(
            total_emails=int(payload["total_emails"]),
            status_categories=tuple(payload["status_categories"]),
            status_counts=dict(payload["status_counts"]),
            language_stats=_stats(payload["language_stats"]),
            priority_stats=_stats(payload["priority_stats"]),
            sorted_languages=tuple(payload["sorted_languages"]),
            sorted_priorities=tuple(payload["sorted_priorities"]),
            generated_at=datetime.fromisoformat(str(payload["generated_at"])),
        )


@dataclass(frozen=True)
class RefreshResult:
    run_id: int
    run_key: str
    source: str
    trigger_source: str
    status: str
    total_emails: int
    summary: Summary | None
    summary_path: str | None
    error: str | None
    reused_existing_run: bool
