from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .constants import DAYS_IN_WEEK

WEEKDAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Resolve an IANA zone name. Raises ValueError for unknown identifiers."""
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValueError("Time zone required.")
    if trimmed.upper() in {"UTC", "Z", "GMT"}:
        return timezone.utc
    try:
        return ZoneInfo(trimmed)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid time zone identifier: {trimmed!r}") from exc


@dataclass(frozen=True)
class DayWindow:
    """A local calendar day in an explicit time zone.

    The instant range is ``[start_utc, end_utc)``: from local midnight up to,
    but excluding, the next local midnight.
    """

    date: date
    tz: tzinfo

    @classmethod
    def from_iso(cls, date_iso: str, tz: tzinfo) -> "DayWindow":
        return cls(date.fromisoformat(date_iso), tz)

    @classmethod
    def containing(cls, instant: datetime, tz: tzinfo) -> "DayWindow":
        return cls(instant.astimezone(tz).date(), tz)

    @property
    def start_local(self) -> datetime:
        return datetime.combine(self.date, time(0, 0), tzinfo=self.tz)

    @property
    def start_utc(self) -> datetime:
        return self.start_local.astimezone(timezone.utc)

    @property
    def end_utc(self) -> datetime:
        return self.shift(1).start_utc

    @property
    def weekday_key(self) -> str:
        return WEEKDAY_KEYS[self.date.weekday()]

    def iso_date(self) -> str:
        return self.date.isoformat()

    def shift(self, days: int) -> "DayWindow":
        return DayWindow(self.date + timedelta(days=days), self.tz)

    def week(self) -> List["DayWindow"]:
        return [self.shift(offset) for offset in range(DAYS_IN_WEEK)]

    def contains(self, instant: datetime) -> bool:
        return self.start_utc <= instant < self.end_utc


def week_start_for(value: date) -> date:
    return value - timedelta(days=value.weekday())


def current_week_start(tz: tzinfo, now: Optional[datetime] = None) -> DayWindow:
    """Monday of the local week containing ``now`` (defaults to the current instant)."""
    instant = now or datetime.now(timezone.utc)
    today = instant.astimezone(tz).date()
    return DayWindow(week_start_for(today), tz)


def parse_date_input(value: Optional[str]) -> Optional[date]:
    """Accept ``YYYY-MM-DD`` or ``DD.MM.YYYY``. Raises ValueError on bad input."""
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    if re.match(r"^\d{4}-\d{2}-\d{2}$", trimmed):
        try:
            return date.fromisoformat(trimmed)
        except ValueError as exc:
            raise ValueError("Invalid date.") from exc
    match = re.match(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$", trimmed)
    if not match:
        raise ValueError("Invalid date format.")
    day_raw, month_raw, year_raw = match.groups()
    try:
        return date(int(year_raw), int(month_raw), int(day_raw))
    except ValueError as exc:
        raise ValueError("Invalid date.") from exc


def local_hours(instant: datetime, tz: tzinfo) -> float:
    """Wall-clock hour of day as a fraction, e.g. 22:30 -> 22.5."""
    local = instant.astimezone(tz)
    return local.hour + local.minute / 60 + local.second / 3600


def format_hhmm(instant: datetime, tz: tzinfo) -> str:
    return instant.astimezone(tz).strftime("%H:%M")
