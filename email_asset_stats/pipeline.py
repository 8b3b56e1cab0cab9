from collections.abc import Callable
import json
import logging
from pathlib import Path
from typing import TypeVar

from sqlalchemy.orm import Session, sessionmaker

from email_asset_stats.config import Settings
from email_asset_stats.db_models import RefreshRun
from email_asset_stats.fetch import fetch_csv_text
from email_asset_stats.loader import summarize_text
from email_asset_stats.run_store import (
    create_or_get_run,
    create_step,
    finish_step_failure,
    finish_step_success,
    mark_run_failed,
    mark_run_running,
    mark_run_succeeded,
    reset_failed_run_state,
    stored_summary,
)
from email_asset_stats.schemas import RefreshResult, Summary


logger = logging.getLogger(__name__)
T = TypeVar("T")


def write_json(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as outfile:
        json.dump(payload, outfile, indent=2, ensure_ascii=False)
        outfile.write("\n")


class RefreshRunner:
    def __init__(self, settings: Settings, session_factory: sessionmaker[Session]) -> None:
        self.settings = settings
        self.session_factory = session_factory

    def run(self, *, run_key: str, source: str | None = None, trigger_source: str = "manual") -> RefreshResult:
        source = source or self.settings.csv_source

        with self.session_factory() as db:
            run, created = create_or_get_run(db, run_key=run_key, source=source, trigger_source=trigger_source)
            if not created:
                if run.status == "failed":
                    logger.info("retrying previously failed refresh", extra={"run_key": run_key})
                    reset_failed_run_state(db, run, source=source)
                else:
                    logger.info("idempotent refresh reused", extra={"run_key": run_key, "status": run.status})
                    return self._result_from_run(run, summary=stored_summary(run), reused_existing_run=True)

            mark_run_running(db, run)

            try:
                csv_text = self._run_step(
                    db,
                    run,
                    "fetch",
                    lambda: fetch_csv_text(source, timeout_seconds=self.settings.fetch_timeout_seconds),
                )
                summary = self._run_step(db, run, "aggregate", lambda: summarize_text(csv_text))
                self._run_step(
                    db,
                    run,
                    "publish_summary",
                    lambda: write_json(self._summary_path(run_key), summary.to_dict()),
                )
                mark_run_succeeded(db, run, summary=summary)
            except Exception as exc:
                mark_run_failed(db, run, error=str(exc))
                logger.exception("dashboard refresh failed", extra={"run_key": run_key, "source": source})
                return self._result_from_run(run, summary=None, reused_existing_run=False)

            logger.info(
                "loaded %d emails from CSV",
                summary.total_emails,
                extra={"run_key": run_key, "source": source},
            )
            return self._result_from_run(run, summary=summary, reused_existing_run=False)

    def _run_step(self, db: Session, run: RefreshRun, step_name: str, fn: Callable[[], T]) -> T:
        step = create_step(db, run_id=run.id, step_name=step_name)
        try:
            result = fn()
        except Exception as exc:
            finish_step_failure(db, step, str(exc))
            raise
        finish_step_success(db, step)
        return result

    def _summary_path(self, run_key: str) -> Path:
        return Path(self.settings.output_dir) / "summaries" / f"{run_key}.json"

    def _result_from_run(self, run: RefreshRun, *, summary: Summary | None, reused_existing_run: bool) -> RefreshResult:
        summary_path = self._summary_path(run.run_key) if run.status == "succeeded" else None
        return RefreshResult(
            run_id=run.id,
            run_key=run.run_key,
            source=run.source,
            trigger_source=run.trigger_source,
            status=run.status,
            total_emails=run.total_emails,
            summary=summary,
            summary_path=str(summary_path) if summary_path else None,
            error=run.error,
            reused_existing_run=reused_existing_run,
        )
