"""
Config loading via Pydantic v2 and python-dotenv.

Reads the target appointment, poll interval and OpsGenie key from the
environment (optionally from a .env file in the project root) and validates
them before the monitor starts.
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
import os
from pathlib import Path
from typing import List, Mapping, Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=False)


DEFAULT_TIMEZONE = "Europe/Amsterdam"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class MonitorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_appointment_date: datetime
    check_interval_ms: int = Field(gt=0)
    display_timezone: str = DEFAULT_TIMEZONE
    headless: bool = True

    @field_validator("display_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        # raises ZoneInfoNotFoundError (a KeyError) for unknown names
        try:
            ZoneInfo(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @model_validator(mode="after")
    def _localize_appointment(self) -> "MonitorConfig":
        # Naive dates are wall-clock time in the display timezone
        if self.current_appointment_date.tzinfo is None:
            aware = self.current_appointment_date.replace(tzinfo=ZoneInfo(self.display_timezone))
            object.__setattr__(self, "current_appointment_date", aware)
        return self

    @property
    def check_interval_seconds(self) -> float:
        return self.check_interval_ms / 1000


class OpsGenieConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    api_url: str = "https://api.opsgenie.com"
    tags: List[str] = Field(default_factory=lambda: ["appointment-checker"])
    timeout: float = Field(default=10.0, gt=0)


class SiteConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    booking_url: str = "https://ouder-amstel.mijnafspraakmaken.nl/client/"
    service_label: str = "Brondocumenten afhalen/inleveren"
    next_step_label: str = "Ga verder naar stap 2"
    response_fragment: str = "/firstAvailableAppointmentTime"


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    logs_dir: Path = Field(default_factory=lambda: BASE_DIR / "logs")
    log_level: str = Field(default="INFO")
    max_bytes: int = Field(default=5 * 1024 * 1024)  # 5 MB
    backup_count: int = Field(default=5)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    monitor: MonitorConfig
    opsgenie: OpsGenieConfig
    site: SiteConfig = SiteConfig()
    logging: LoggingConfig = LoggingConfig()


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings(env: Mapping[str, str]) -> Settings:
    """
    Build settings from an environment mapping.

    Required variables are passed through as-is, so a missing one reaches
    pydantic as None and fails validation instead of picking up a default.

    Raises ValidationError if a required variable is missing or invalid.
    """
    monitor_kwargs = {
        "current_appointment_date": env.get("CURRENT_APPOINTMENT_DATE"),
        "check_interval_ms": env.get("CHECK_INTERVAL_MS"),
    }
    if _optional(env, "DISPLAY_TIMEZONE"):
        monitor_kwargs["display_timezone"] = _optional(env, "DISPLAY_TIMEZONE")
    if _optional(env, "HEADLESS"):
        monitor_kwargs["headless"] = _optional(env, "HEADLESS")

    opsgenie_kwargs = {"api_key": env.get("OPSGENIE_API_KEY")}
    if _optional(env, "OPSGENIE_API_URL"):
        opsgenie_kwargs["api_url"] = _optional(env, "OPSGENIE_API_URL").rstrip("/")

    site_kwargs = {}
    if _optional(env, "BOOKING_URL"):
        site_kwargs["booking_url"] = _optional(env, "BOOKING_URL")
    if _optional(env, "BOOKING_SERVICE"):
        site_kwargs["service_label"] = _optional(env, "BOOKING_SERVICE")

    logging_kwargs = {}
    if _optional(env, "LOG_LEVEL"):
        logging_kwargs["log_level"] = _optional(env, "LOG_LEVEL")
    if _optional(env, "LOGS_DIR"):
        logging_kwargs["logs_dir"] = _optional(env, "LOGS_DIR")

    return Settings(
        monitor=MonitorConfig(**monitor_kwargs),
        opsgenie=OpsGenieConfig(**opsgenie_kwargs),
        site=SiteConfig(**site_kwargs),
        logging=LoggingConfig(**logging_kwargs),
    )


@lru_cache
def get_settings() -> Settings:
    """
    Load and cache settings from the process environment.

    Raises ValidationError if .env is incomplete or invalid.
    """
    return load_settings(os.environ)


__all__ = [
    "Settings",
    "MonitorConfig",
    "OpsGenieConfig",
    "SiteConfig",
    "LoggingConfig",
    "load_settings",
    "get_settings",
    "BASE_DIR",
]
