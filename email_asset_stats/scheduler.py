from datetime import UTC, datetime
import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from sqlalchemy.orm import Session, sessionmaker

from email_asset_stats.config import Settings
from email_asset_stats.pipeline import RefreshRunner


logger = logging.getLogger(__name__)


def scheduled_run_key(now: datetime) -> str:
    return f"scheduled-{now.strftime('%Y-%m-%dT%H:%M')}"


def _run_scheduled_refresh(settings: Settings, session_factory: sessionmaker[Session]) -> None:
    run_key = scheduled_run_key(datetime.now(UTC))

    runner = RefreshRunner(settings, session_factory)
    result = runner.run(run_key=run_key, trigger_source="scheduled")
    if result.status == "failed":
        logger.error(
            "scheduled refresh failed",
            extra={"run_key": result.run_key, "source": result.source, "error": result.error},
        )
        return
    logger.info(
        "scheduled refresh completed",
        extra={
            "run_key": result.run_key,
            "total_emails": result.total_emails,
            "reused_existing_run": result.reused_existing_run,
        },
    )


def start_scheduler(settings: Settings, session_factory: sessionmaker[Session], *, run_now: bool = False) -> None:
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(
        _run_scheduled_refresh,
        "interval",
        args=[settings, session_factory],
        minutes=settings.refresh_interval_minutes,
        id="dashboard_refresh",
        replace_existing=True,
    )

    logger.info(
        "scheduler started",
        extra={"refresh_interval_minutes": settings.refresh_interval_minutes, "source": settings.csv_source},
    )

    if run_now:
        _run_scheduled_refresh(settings, session_factory)

    scheduler.start()
