from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from .constants import DAYS_IN_WEEK, FRAGMENT_HEAD, FRAGMENT_TAIL, HOURS_IN_DAY
from .days import DayWindow, format_hhmm, local_hours
from .errors import MalformedShiftError
from .models import RawShift, ShiftFragment
from .themes import resolve_theme, theme_variant

logger = logging.getLogger(__name__)

BEFORE_WEEK = -1
AFTER_WEEK = DAYS_IN_WEEK


def day_index(instant: datetime, week: Sequence[DayWindow]) -> int:
    """Index of the day containing ``instant``, or -1 / 7 when outside the week."""
    first = week[0]
    offset = (instant.astimezone(first.tz).date() - first.date).days
    if offset < 0:
        return BEFORE_WEEK
    if offset >= len(week):
        return AFTER_WEEK
    return offset


def _in_week(index: int) -> bool:
    return 0 <= index < DAYS_IN_WEEK


def _is_local_midnight(instant: datetime, day: DayWindow) -> bool:
    local = instant.astimezone(day.tz)
    return (local.hour, local.minute, local.second, local.microsecond) == (0, 0, 0, 0)


def _elapsed_hours(instant: datetime, day: DayWindow) -> float:
    hours = (instant - day.start_utc).total_seconds() / 3600
    return min(HOURS_IN_DAY, max(0.0, hours))


def _fragment(
    shift: RawShift,
    part: str,
    index: int,
    start_hour: float,
    end_hour: float,
    time_range: str,
) -> ShiftFragment:
    if end_hour <= start_hour:
        raise MalformedShiftError(
            f"{shift.id} {part}: end {end_hour:.2f} is not after start {start_hour:.2f}"
        )
    theme = resolve_theme(shift.sharedShift.theme)
    return ShiftFragment(
        id=f"{shift.id}-{part}",
        shiftId=shift.id,
        part=part,
        dayIndex=index,
        startHour=start_hour,
        endHour=end_hour,
        teamName=shift.team_name,
        groupName=shift.group_name,
        theme=theme.value,
        variant=theme_variant(theme),
        timeRange=time_range,
    )


def normalize(shift: RawShift, week: Sequence[DayWindow]) -> List[ShiftFragment]:
    """Split one shift into day-bounded fragments (0, 1 or 2 of them).

    A shift within one day keeps its span. A shift crossing into another day is
    cut at local midnight: the head runs to 24.0 on the start day, the tail from
    0.0 on the end day. A tail ending exactly at midnight is not emitted, and
    endpoints outside the week contribute nothing.
    """
    if shift.end <= shift.start:
        logger.debug("Dropping shift %s: end is not after start", shift.id)
        return []

    tz = week[0].tz
    start_index = day_index(shift.start, week)
    end_index = day_index(shift.end, week)
    time_range = f"{format_hhmm(shift.start, tz)}–{format_hhmm(shift.end, tz)}"

    pending = []
    if start_index == end_index:
        if _in_week(start_index):
            start_hour = local_hours(shift.start, tz)
            end_hour = local_hours(shift.end, tz)
            if end_hour <= start_hour:
                # Clocks went back inside the shift; wall-clock hours repeat.
                day = week[start_index]
                start_hour = _elapsed_hours(shift.start, day)
                end_hour = _elapsed_hours(shift.end, day)
            pending.append((FRAGMENT_HEAD, start_index, start_hour, end_hour))
    else:
        if _in_week(start_index):
            pending.append((FRAGMENT_HEAD, start_index, local_hours(shift.start, tz), HOURS_IN_DAY))
        if _in_week(end_index) and not _is_local_midnight(shift.end, week[end_index]):
            pending.append((FRAGMENT_TAIL, end_index, 0.0, local_hours(shift.end, tz)))

    fragments: List[ShiftFragment] = []
    for part, index, start_hour, end_hour in pending:
        try:
            fragments.append(_fragment(shift, part, index, start_hour, end_hour, time_range))
        except MalformedShiftError as exc:
            logger.debug("Dropping fragment: %s", exc)
    return fragments


def normalize_week(
    shifts: Iterable[RawShift], week: Sequence[DayWindow]
) -> List[List[ShiftFragment]]:
    """Normalize every distinct shift and group the fragments by day index.

    A shift crossing midnight is returned by the fetches of both days it
    touches; only its first occurrence is used.
    """
    by_day: List[List[ShiftFragment]] = [[] for _ in range(DAYS_IN_WEEK)]
    seen: Dict[str, RawShift] = {}
    for shift in shifts:
        if shift.id in seen:
            continue
        seen[shift.id] = shift
        for fragment in normalize(shift, week):
            by_day[fragment.dayIndex].append(fragment)
    return by_day
