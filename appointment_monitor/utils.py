"""
Utility helpers: logging setup and date formatting.
"""

from __future__ import annotations

from datetime import datetime
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from zoneinfo import ZoneInfo

from .config import DEFAULT_TIMEZONE, LoggingConfig, get_settings


# Dutch short month names, as shown on the booking site
DUTCH_MONTHS = (
    "jan",
    "feb",
    "mrt",
    "apr",
    "mei",
    "jun",
    "jul",
    "aug",
    "sep",
    "okt",
    "nov",
    "dec",
)


def setup_logging(logging_cfg: LoggingConfig | None = None) -> None:
    """
    Configure application-wide logging with rotation.

    Logs go both to a rotating file under logs_dir and to the console.
    """
    if logging_cfg is None:
        logging_cfg = get_settings().logging

    logs_dir: Path = logging_cfg.logs_dir
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / "appointment_monitor.log"

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=logging_cfg.max_bytes,
        backupCount=logging_cfg.backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(logging_cfg.log_level.upper())
    root.handlers.clear()
    root.addHandler(file_handler)
    root.addHandler(console_handler)


def format_date(value: datetime, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """
    Render a point in time for operators, e.g. "12 mrt 2025 14:30".

    Naive values are taken as wall-clock time in tz_name.
    """
    zone = ZoneInfo(tz_name)
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    local = value.astimezone(zone)
    month = DUTCH_MONTHS[local.month - 1]
    return f"{local.day} {month} {local.year} {local:%H:%M}"


__all__ = ["setup_logging", "format_date", "DUTCH_MONTHS"]
