import argparse
import asyncio
from datetime import UTC, datetime
import logging

from email_asset_stats.aggregate import calculate_percentage
from email_asset_stats.config import get_settings
from email_asset_stats.database import build_session_factory
from email_asset_stats.fetch import CsvFetchError
from email_asset_stats.loader import load_csv_data
from email_asset_stats.pipeline import RefreshRunner
from email_asset_stats.scheduler import start_scheduler
from email_asset_stats.schemas import Summary


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build email asset dashboard statistics from a CSV export")
    subparsers = parser.add_subparsers(dest="command", required=True)

    refresh_parser = subparsers.add_parser("refresh", help="run one recorded dashboard refresh")
    refresh_parser.add_argument("--source", required=False, help="CSV path or URL (defaults to CSV_SOURCE)")
    refresh_parser.add_argument("--run-key", required=False, help="Idempotency key for this refresh")
    refresh_parser.add_argument(
        "--trigger-source",
        default="manual",
        choices=["manual", "scheduled"],
        help="Metadata label for how this refresh was triggered",
    )

    show_parser = subparsers.add_parser("show", help="load the CSV and print its summary without recording it")
    show_parser.add_argument("--source", required=False, help="CSV path or URL (defaults to CSV_SOURCE)")

    schedule_parser = subparsers.add_parser("schedule", help="refresh the dashboard on an interval")
    schedule_parser.add_argument("--run-now", action="store_true", help="also refresh once immediately")

    return parser.parse_args()


def format_status_table(summary: Summary) -> str:
    width = max(len(status) for status in summary.status_categories)
    lines = []
    for status in summary.status_categories:
        count = summary.status_counts[status]
        percentage = calculate_percentage(count, summary.total_emails)
        lines.append(f"{status.ljust(width)}  {count:>6}  {percentage:>6}")
    return "\n".join(lines)


def main() -> None:
    args = parse_args()
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args.command == "show":
        source = args.source or settings.csv_source
        try:
            summary = asyncio.run(load_csv_data(source, timeout_seconds=settings.fetch_timeout_seconds))
        except CsvFetchError as exc:
            raise SystemExit(f"error loading csv: {exc}") from exc
        print(f"total={summary.total_emails} generated_at={summary.generated_at.isoformat()}")
        print(format_status_table(summary))
        return

    session_factory = build_session_factory(settings.database_url)
    if args.command == "schedule":
        start_scheduler(settings, session_factory, run_now=args.run_now)
        return

    run_key = args.run_key or f"manual-{datetime.now(UTC).strftime('%Y%m%dT%H%M%S')}"

    runner = RefreshRunner(settings, session_factory)
    result = runner.run(run_key=run_key, source=args.source, trigger_source=args.trigger_source)

    print(
        "run_id={run_id} run_key={run_key} trigger={trigger} status={status} total={total} reused={reused} summary={summary}".format(
            run_id=result.run_id,
            run_key=result.run_key,
            trigger=result.trigger_source,
            status=result.status,
            total=result.total_emails,
            reused=result.reused_existing_run,
            summary=result.summary_path,
        )
    )
    if result.status == "failed":
        print(f"error={result.error}")
        raise SystemExit(1)
    if result.summary is not None:
        print(format_status_table(result.summary))


if __name__ == "__main__":
    main()
