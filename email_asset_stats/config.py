from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()

DEFAULT_CSV_SOURCE = "HubSpot Email Template Rebrand _ List of Emails to be Updated - Emails To Be Updated.csv"


@dataclass(frozen=True)
class Settings:
    app_name: str
    database_url: str
    log_level: str
    csv_source: str
    output_dir: str
    fetch_timeout_seconds: float
    refresh_interval_minutes: int


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "email-asset-stats"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./dashboard.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        csv_source=os.getenv("CSV_SOURCE", DEFAULT_CSV_SOURCE),
        output_dir=os.getenv("OUTPUT_DIR", "./outputs"),
        fetch_timeout_seconds=float(os.getenv("FETCH_TIMEOUT_SECONDS", "30")),
        refresh_interval_minutes=int(os.getenv("REFRESH_INTERVAL_MINUTES", "15")),
    )
