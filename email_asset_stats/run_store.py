from datetime import UTC, datetime
import json

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from email_asset_stats.db_models import RefreshRun, StepRun
from email_asset_stats.schemas import Summary


def utc_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def get_run_by_key(db: Session, run_key: str) -> RefreshRun | None:
    stmt = select(RefreshRun).where(RefreshRun.run_key == run_key)
    return db.execute(stmt).scalar_one_or_none()


def create_or_get_run(db: Session, *, run_key: str, source: str, trigger_source: str) -> tuple[RefreshRun, bool]:
    run = RefreshRun(run_key=run_key, source=source, trigger_source=trigger_source, status="queued")
    db.add(run)
    try:
        db.commit()
    except IntegrityError:
        # Unique run_key makes repeated refreshes with the same key idempotent.
        db.rollback()
        existing = get_run_by_key(db, run_key)
        if existing:
            return existing, False
        raise

    db.refresh(run)
    return run, True


def reset_failed_run_state(db: Session, run: RefreshRun, *, source: str) -> None:
    db.execute(delete(StepRun).where(StepRun.run_id == run.id))

    run.status = "queued"
    run.source = source
    run.error = None
    run.completed_at = None
    run.total_emails = 0
    run.summary_payload = None
    db.commit()


def mark_run_running(db: Session, run: RefreshRun) -> None:
    run.status = "running"
    run.started_at = utc_now()
    run.error = None
    db.commit()


def mark_run_succeeded(db: Session, run: RefreshRun, *, summary: Summary) -> None:
    run.status = "succeeded"
    run.total_emails = summary.total_emails
    run.summary_payload = json.dumps(summary.to_dict())
    run.completed_at = utc_now()
    run.error = None
    db.commit()


def mark_run_failed(db: Session, run: RefreshRun, *, error: str) -> None:
    run.status = "failed"
    run.error = error
    run.total_emails = 0
    run.summary_payload = None
    run.completed_at = utc_now()
    db.commit()


def create_step(db: Session, *, run_id: int, step_name: str) -> StepRun:
    step = StepRun(run_id=run_id, step_name=step_name, status="started", started_at=utc_now())
    db.add(step)
    db.commit()
    db.refresh(step)
    return step


def finish_step_success(db: Session, step: StepRun) -> None:
    finished_at = utc_now()
    step.status = "succeeded"
    step.completed_at = finished_at
    step.duration_ms = (finished_at - step.started_at).total_seconds() * 1000
    step.error = None
    db.commit()


def finish_step_failure(db: Session, step: StepRun, error: str) -> None:
    finished_at = utc_now()
    step.status = "failed"
    step.completed_at = finished_at
    step.duration_ms = (finished_at - step.started_at).total_seconds() * 1000
    step.error = error
    db.commit()


def stored_summary(run: RefreshRun) -> Summary | None:
    if not run.summary_payload:
        return None
    return Summary.from_dict(json.loads(run.summary_payload))


def latest_summary(db: Session) -> Summary | None:
    stmt = (
        select(RefreshRun)
        .where(RefreshRun.status == "succeeded")
        .order_by(RefreshRun.completed_at.desc(), RefreshRun.id.desc())
        .limit(1)
    )
    run = db.execute(stmt).scalar_one_or_none()
    if run is None:
        return None
    return stored_summary(run)
