from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_BIRTH_DATE = "1979-09-02T00:00:00+09:00"
DEFAULT_TIMEZONE = "Asia/Tokyo"
SHEET_BACKENDS = {"memory", "csv", "sqlite"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - SHEET_BACKEND: 'memory' (default), 'csv' or 'sqlite'
    - SHEET_NAME: name of the sheet holding the items. Default 'list'
    - SHEET_CSV_DIR: directory of '<sheet>.csv' files. Default './data'
    - SHEET_SQLITE_PATH: path to sqlite db file. Default './data/sheets.db'
    - BIRTH_DATE: ISO8601 datetime the target age bucket is computed from
    - TIMEZONE: IANA zone whose calendar is used for age calculation. Default 'Asia/Tokyo'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level. Default 'INFO'
    """

    sheet_backend: str
    sheet_name: str
    csv_dir: str
    sqlite_db_path: str
    birth_date: datetime
    timezone_name: str
    cors_allow_origins: List[str]
    log_level: str

    @property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.timezone_name)


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_birth_date(value: str) -> datetime:
    """
    Parse BIRTH_DATE as an ISO8601 datetime. Naive values are taken as UTC and
    anything unparsable falls back to the built-in default.
    """
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        parsed = datetime.fromisoformat(DEFAULT_BIRTH_DATE)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_timezone(value: str) -> str:
    name = value.strip()
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return DEFAULT_TIMEZONE
    return name


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("SHEET_BACKEND", "memory").strip().lower()
    if backend not in SHEET_BACKENDS:
        # Fallback to memory if unsupported
        backend = "memory"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        log_level = "INFO"

    return Settings(
        sheet_backend=backend,
        sheet_name=_get_env("SHEET_NAME", "list").strip(),
        csv_dir=_get_env("SHEET_CSV_DIR", "./data").strip(),
        sqlite_db_path=_get_env("SHEET_SQLITE_PATH", "./data/sheets.db").strip(),
        birth_date=_parse_birth_date(_get_env("BIRTH_DATE", DEFAULT_BIRTH_DATE)),
        timezone_name=_parse_timezone(_get_env("TIMEZONE", DEFAULT_TIMEZONE)),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=log_level,
    )
