"""
Configuration management for the availability watcher
"""
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Dict, Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError


# Environment variable -> watch setting
ENV_VARS = {
    "CAMPGROUND_IDS": "campground_ids",
    "MONTHS": "months",
    "START_DATES": "start_dates",
    "INTERVAL": "interval_minutes",
    "MIN_NIGHTS": "min_nights",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    return value


def _normalize(value: str, fmt: str, name: str, expected: str) -> str:
    try:
        return datetime.strptime(value, fmt).strftime(fmt)
    except ValueError:
        raise ValueError(f"invalid {name} {value!r}, expected {expected}")


class WatchConfig(BaseModel):
    """What to watch and how often"""
    campground_ids: List[str]
    months: List[str]
    min_nights: int = Field(default=1, ge=1)
    start_dates: List[str] = Field(default_factory=list)
    interval_minutes: float = Field(default=5.0, gt=0)
    notify_partial: bool = False

    @field_validator("campground_ids", "months", "start_dates", mode="before")
    @classmethod
    def _parse_list(cls, value):
        return _split_csv(value)

    @field_validator("campground_ids")
    @classmethod
    def _require_campgrounds(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one campground id is required")
        # Keep first-seen order for display
        return list(dict.fromkeys(value))

    @field_validator("months")
    @classmethod
    def _check_months(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one month (YYYY-MM) is required")
        # Stored zero-padded: months go into upstream URLs as-is
        return list(dict.fromkeys(
            _normalize(month, "%Y-%m", "month", "YYYY-MM") for month in value
        ))

    @field_validator("start_dates")
    @classmethod
    def _check_start_dates(cls, value: List[str]) -> List[str]:
        # Stored zero-padded: matching compares start dates as strings
        return list(dict.fromkeys(
            _normalize(day, "%Y-%m-%d", "start date", "YYYY-MM-DD") for day in value
        ))

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60

    @property
    def requests_per_poll(self) -> int:
        return len(self.campground_ids) * len(self.months)

    def describe_start_dates(self) -> str:
        return " or ".join(self.start_dates) if self.start_dates else "any date"


class TelegramConfig(BaseModel):
    token: Optional[str] = None
    chat_id: Optional[str] = None
    long_poll_timeout: int = 30
    conflict_backoff: float = 10.0
    error_backoff: float = 5.0

    @field_validator("chat_id", mode="before")
    @classmethod
    def _chat_id_as_str(cls, value):
        if value is None or value == "":
            return None
        return str(value)

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.chat_id)


class APIConfig(BaseModel):
    base_url: str = "https://www.recreation.gov"
    timeout: float = 10
    requests_per_second: float = 10
    headers: Dict[str, str] = Field(default_factory=lambda: {
        "accept": "application/json",
        "cache-control": "no-cache",
    })


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def _check_level(cls, value):
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"invalid log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level


class Config(BaseModel):
    """Main configuration class"""
    watch: WatchConfig
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def read_yaml(path: str | Path) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        return yaml.safe_load(f) or {}


def env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Collect settings from the environment as a nested config dict"""
    watch = {
        field: environ[name]
        for name, field in ENV_VARS.items()
        if environ.get(name, "").strip()
    }
    if environ.get("NOTIFY_PARTIAL", "").strip().lower() == "true":
        watch["notify_partial"] = True

    telegram = {}
    if environ.get("TELEGRAM_TOKEN"):
        telegram["token"] = environ["TELEGRAM_TOKEN"]
    if environ.get("TELEGRAM_CHAT_ID"):
        telegram["chat_id"] = environ["TELEGRAM_CHAT_ID"]

    data: Dict[str, Any] = {"watch": watch}
    if telegram:
        data["telegram"] = telegram
    if environ.get("LOG_LEVEL"):
        data["logging"] = {"level": environ["LOG_LEVEL"]}
    return data


def merge_settings(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge nested config dicts; values in `override` win"""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Build the configuration from a YAML file, the environment and CLI flags.

    Later sources win: file < environment < overrides.

    Raises:
        ConfigError: if required settings are missing or invalid
    """
    data: Dict[str, Any] = read_yaml(path) if path else {}
    data = merge_settings(data, env_overrides(os.environ if environ is None else environ))
    if overrides:
        data = merge_settings(data, overrides)
    data.setdefault("watch", {})

    try:
        return Config(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
