import calendar
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, field_validator

from worklog.models.schema import RoundingSpec
from worklog.utils.grammar import parse_rounding

if os.name == "nt":
    LEDGER_FILE_NAME = "worklog.csv"
else:
    LEDGER_FILE_NAME = ".worklog.csv"

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def default_ledger_path() -> Path:
    return Path.home() / LEDGER_FILE_NAME


class Settings(BaseModel):
    ledger_path: Path
    week_start: int = calendar.SATURDAY
    rounding: Optional[RoundingSpec] = None
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


def _weekday(name: str) -> int:
    key = name.strip().lower()
    for index, day in enumerate(WEEKDAYS):
        # accept "sat", "saturday", ...
        if len(key) >= 3 and day.startswith(key):
            return index
    raise ValueError(f"Unknown weekday for WORKLOG_WEEK_START: {name!r}")


def load_settings() -> Settings:
    """Read settings from the environment each time it is called."""
    ledger = os.getenv("WORKLOG_LEDGER")
    rounding = os.getenv("WORKLOG_ROUNDING", "").strip()
    return Settings(
        ledger_path=Path(ledger).expanduser() if ledger else default_ledger_path(),
        week_start=_weekday(os.getenv("WORKLOG_WEEK_START", "saturday")),
        rounding=parse_rounding(rounding) if rounding else None,
        log_level=os.getenv("WORKLOG_LOG_LEVEL", "WARNING"),
    )
