# WorkTrack - Configuration
# Settings loaded from environment variables

from decimal import Decimal
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings loaded from environment variables.

    Create a .env file in the project root for local development:

        # .env
        WORKTRACK_DATABASE_URL=sqlite+aiosqlite:///worktrack.db
        WORKTRACK_DB_ECHO=false
        WORKTRACK_SEED_ON_INITIALIZE=true

    For production, set these as actual environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "WorkTrack"
    debug: bool = False

    # Database - any SQLAlchemy async URL; SQLite via aiosqlite by default
    database_url: str = "sqlite+aiosqlite:///worktrack.db"
    db_echo: bool = False  # Log SQL statements
    db_pool_pre_ping: bool = True

    # Seed the default reference catalogs when the store is initialized
    seed_on_initialize: bool = True

    # Entry date window (days relative to today)
    max_days_past: int = 365
    max_days_future: int = 30

    # Daily premium tiers: hours up to the first limit are regular,
    # up to the second are overtime, the rest doubletime
    regular_hours_limit: Decimal = Decimal("8")
    overtime_hours_limit: Decimal = Decimal("12")

    @model_validator(mode="after")
    def check_hour_limits(self) -> "Settings":
        if self.overtime_hours_limit < self.regular_hours_limit:
            raise ValueError("overtime_hours_limit must not be below regular_hours_limit")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once.
    """
    return Settings()
