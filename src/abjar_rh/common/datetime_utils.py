from __future__ import annotations

import math
from datetime import date, datetime, time

from ..core.enums import Weekday
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Tanggal tidak valid (YYYY-MM-DD)")


def parse_iso_datetime(value: str) -> datetime:
    """Parse `YYYY-MM-DDTHH:MM[:SS]` (datetime-local input) into a naive datetime."""
    v = (value or "").strip()
    for fmt in ("%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S"):
        try:
            return datetime.strptime(v, fmt)
        except ValueError:
            continue
    raise ValidationError("Tenggat waktu tidak valid")


def parse_hhmm(value: str, field_name: str = "Jam") -> time:
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} tidak valid (HH:MM)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def weekday_of(d: date) -> Weekday:
    return Weekday.from_index(d.weekday())


def is_weekday(d: date) -> bool:
    return d.weekday() < 5


def week_number(d: date) -> int:
    """Week bucket used by the attendance export: ceil(day_of_year / 7)."""
    return math.ceil(d.timetuple().tm_yday / 7)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
