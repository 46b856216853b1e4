"""
Row normalization for sheet data.

Turns the raw 2D values of a sheet (header row + data rows, cells of any type)
into a list of typed bucket list records. Parsing never raises on bad cell
content: every malformed value degrades to the field's default so a partially
dirty sheet still produces a response.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from .age import calculate_age, decade_bucket
from .models import Record
from .settings import DEFAULT_BIRTH_DATE, DEFAULT_TIMEZONE, Settings

logger = logging.getLogger(__name__)

# Cell past the end of a row shorter than the header.
MISSING: Any = object()

MAX_TARGET_AGE = 100

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")
_TRUTHY = frozenset({"true", "1", "yes"})
_IMAGE_URL_PREFIXES = ("http://", "https://", "data:image/")


@dataclass(frozen=True)
class ParseContext:
    """Values shared by every row of a single conversion."""

    now: datetime
    now_iso: str
    normalized_target_age: int


FieldParser = Callable[[Any, ParseContext], Any]


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def format_timestamp(value: date) -> str:
    """
    Format a date/datetime as an ISO8601 UTC string with millisecond precision,
    e.g. '2024-07-31T10:00:00.000Z'. Plain dates are treated as UTC midnight.
    """
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return _as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# PUBLIC_INTERFACE
def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Return `value` as an aware UTC datetime, or None when it is not a timestamp.

    Accepts datetime and date instances and non-blank ISO8601 strings (a
    trailing "Z" and date-only strings are allowed). Other types yield None.
    """
    try:
        if isinstance(value, datetime):
            return _as_utc(value)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        if isinstance(value, str) and value.strip():
            return _as_utc(datetime.fromisoformat(value.strip()))
    except (ValueError, OverflowError):
        # Unparsable, or out of range once shifted to UTC
        return None
    return None


# PUBLIC_INTERFACE
def to_text(value: Any) -> str:
    """
    Convert any cell value to text.

    None and missing cells become '', booleans 'true'/'false', integral floats
    lose their '.0', dates are formatted as ISO8601 UTC.
    """
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, date):
        try:
            return format_timestamp(value)
        except OverflowError:
            return value.isoformat()
    return str(value)


# PUBLIC_INTERFACE
def parse_int(value: Any) -> Optional[int]:
    """
    Parse an integer the lenient way spreadsheets expect: ints pass, finite
    floats are truncated, strings use their leading digits ('42abc' -> 42).
    Booleans, dates and anything unparsable yield None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def _parse_id(value: Any, ctx: ParseContext) -> Optional[int]:
    return parse_int(value)


def _parse_target_age(value: Any, ctx: ParseContext) -> int:
    if value is None or value is MISSING:
        return ctx.normalized_target_age
    age = parse_int(value)
    if age is None or age < ctx.normalized_target_age or age > MAX_TARGET_AGE:
        return ctx.normalized_target_age
    return decade_bucket(age)


def _parse_completed(value: Any, ctx: ParseContext) -> bool:
    return value is True or to_text(value).strip().lower() in _TRUTHY


def _parse_image_url(value: Any, ctx: ParseContext) -> str:
    url = to_text(value).strip()
    return url if url.startswith(_IMAGE_URL_PREFIXES) else ""


def _parse_text(value: Any, ctx: ParseContext) -> str:
    return to_text(value).strip()


def _parse_completed_at(value: Any, ctx: ParseContext) -> Optional[str]:
    timestamp = parse_timestamp(value)
    if timestamp is None or timestamp > ctx.now:
        return None
    return format_timestamp(timestamp)


def _passthrough(value: Any, ctx: ParseContext) -> Any:
    return value


PARSERS: Dict[str, FieldParser] = {
    "id": _parse_id,
    "target_age": _parse_target_age,
    "completed": _parse_completed,
    "image_url": _parse_image_url,
    "category": _parse_text,
    "title": _parse_text,
    "note": _parse_text,
    "completed_at": _parse_completed_at,
}


def normalize_header(value: Any) -> str:
    return to_text(value).strip().lower()


def _enforce_completion(record: Record, ctx: ParseContext) -> None:
    if record.get("completed"):
        if not record.get("completed_at"):
            record["completed_at"] = ctx.now_iso
    else:
        record["completed_at"] = None


# PUBLIC_INTERFACE
class RowNormalizer:
    """
    Converts sheet values into normalized records.

    The birth date the target age bucket derives from, the timezone whose
    calendar is used for it, and the clock are injected so conversions are
    reproducible in tests.
    """

    def __init__(
        self,
        birth_date: datetime,
        tz: tzinfo = timezone.utc,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._birth_date = _as_utc(birth_date)
        self._tz = tz
        self._clock = clock or _utc_now

    @classmethod
    def from_settings(cls, settings: Settings) -> "RowNormalizer":
        return cls(settings.birth_date, settings.tz)

    def target_age_bucket(self, now: datetime) -> int:
        """Current age rounded down to its decade, using the configured calendar."""
        age = calculate_age(
            self._birth_date.astimezone(self._tz),
            _as_utc(now).astimezone(self._tz),
        )
        return decade_bucket(age)

    def context(self, now: Optional[datetime] = None) -> ParseContext:
        current = _as_utc(now if now is not None else self._clock())
        return ParseContext(
            now=current,
            now_iso=format_timestamp(current),
            normalized_target_age=self.target_age_bucket(current),
        )

    def convert(self, values: Any, now: Optional[datetime] = None) -> List[Record]:
        """
        Convert a 2D list (header row + data rows) into records, one per data row
        in input order. Anything that is not a non-empty list of rows yields [].
        """
        if not isinstance(values, (list, tuple)) or not values:
            return []
        header_row, *rows = values
        if not isinstance(header_row, (list, tuple)):
            return []

        headers = [normalize_header(h) for h in header_row]
        # One instant for the whole call
        ctx = self.context(now)
        records = [self._convert_row(headers, row, ctx) for row in rows]
        logger.debug(
            "Normalized %d rows over %d columns (target age bucket %d)",
            len(records),
            len(headers),
            ctx.normalized_target_age,
        )
        return records

    def _convert_row(self, headers: List[str], row: Any, ctx: ParseContext) -> Record:
        cells: Sequence[Any] = row if isinstance(row, (list, tuple)) else ()
        record: Record = {}
        for index, header in enumerate(headers):
            value = cells[index] if index < len(cells) else MISSING
            parsed = PARSERS.get(header, _passthrough)(value, ctx)
            # Duplicate headers: the later column wins
            if parsed is MISSING:
                record.pop(header, None)
            else:
                record[header] = parsed
        _enforce_completion(record, ctx)
        return record


# PUBLIC_INTERFACE
def convert_to_records(
    values: Any,
    *,
    birth_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[Record]:
    """
    Convert sheet values into records with the default birth date and timezone
    unless overridden. `now` pins the processing instant.
    """
    normalizer = RowNormalizer(
        birth_date or datetime.fromisoformat(DEFAULT_BIRTH_DATE),
        tz or ZoneInfo(DEFAULT_TIMEZONE),
    )
    return normalizer.convert(values, now=now)
