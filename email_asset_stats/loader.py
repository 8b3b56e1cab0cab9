import asyncio
from datetime import datetime
import logging

import requests

from email_asset_stats.aggregate import build_summary
from email_asset_stats.config import DEFAULT_CSV_SOURCE
from email_asset_stats.fetch import CsvFetchError, fetch_csv_text
from email_asset_stats.normalize import parse_records
from email_asset_stats.schemas import Summary


logger = logging.getLogger(__name__)


def summarize_text(csv_text: str, *, generated_at: datetime | None = None) -> Summary:
    return build_summary(parse_records(csv_text), generated_at=generated_at)


async def load_csv_data(
    source: str = DEFAULT_CSV_SOURCE,
    *,
    timeout_seconds: float = 30.0,
    session: requests.Session | None = None,
) -> Summary:
    """Fetch the export at ``source`` and return its dashboard summary.

    Fetch failures are logged and re-raised as :class:`CsvFetchError`; rows
    that cannot be used are dropped while parsing and never raise.
    """
    try:
        csv_text = await asyncio.to_thread(
            fetch_csv_text,
            source,
            timeout_seconds=timeout_seconds,
            session=session,
        )
    except CsvFetchError:
        logger.exception("error loading csv", extra={"source": source})
        raise

    summary = summarize_text(csv_text)
    logger.info("loaded %d emails from CSV", summary.total_emails, extra={"source": source})
    return summary
