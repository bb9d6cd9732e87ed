"""Runtime settings, read from the environment (and a local ``.env``)."""

from __future__ import annotations

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class StoreSettings(BaseModel):
    backend: Literal["memory", "sqlite"] = "memory"
    sqlite_path: str = "events.db"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: Literal["console", "json"] = "console"


class Settings(BaseModel):
    store: StoreSettings = Field(default_factory=StoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    # Longest window accepted by range queries.
    max_range_days: int = Field(default=365, gt=0)


def load_settings() -> Settings:
    """Build settings from ``SCHEDULER_*`` environment variables."""
    return Settings(
        store=StoreSettings(
            backend=os.getenv("SCHEDULER_STORE", "memory"),
            sqlite_path=os.getenv("SCHEDULER_SQLITE_PATH", "events.db"),
        ),
        logging=LoggingSettings(
            level=os.getenv("SCHEDULER_LOG_LEVEL", "INFO"),
            format=os.getenv("SCHEDULER_LOG_FORMAT", "console"),
        ),
        max_range_days=int(os.getenv("SCHEDULER_MAX_RANGE_DAYS", "365")),
    )
