from __future__ import annotations

import logging
from datetime import date, tzinfo
from typing import List, Sequence

from .days import DayWindow, week_start_for
from .errors import FetchError
from .fetcher import ShiftsService, build_cache_key
from .layout import max_track_count, place_fragments
from .models import DayShifts, DayView, WeekView
from .normalize import normalize_week
from .week import fetch_week

logger = logging.getLogger(__name__)


def build_week_view(
    week: Sequence[DayWindow],
    days: Sequence[DayShifts],
    *,
    time_zone: str,
    subject_id: str,
) -> WeekView:
    """Normalize and lay out fetched days. Pure; never raises for bad shifts.

    A failed day stays empty with its error, even when a neighbouring day
    returned a shift that spills into it.
    """
    all_shifts = [shift for day in days for shift in day.shifts]
    fragments_by_day = normalize_week(all_shifts, week)

    views: List[DayView] = []
    for window, fetched in zip(week, days):
        view = DayView(
            dayIndex=fetched.dayIndex,
            dateISO=fetched.dateISO,
            weekday=window.weekday_key,
            status=fetched.status,
            error=fetched.error,
        )
        if fetched.status == "ok":
            view.fragments = place_fragments(fragments_by_day[fetched.dayIndex])
            view.maxTrackCount = max_track_count(view.fragments)
        views.append(view)

    has_errors = any(view.status == "error" for view in views)
    return WeekView(
        weekStartISO=week[0].iso_date(),
        weekEndISO=week[-1].iso_date(),
        weekNumber=week[0].date.isocalendar()[1],
        timeZone=time_zone,
        subjectId=subject_id,
        days=views,
        allEmpty=not has_errors and not any(view.fragments for view in views),
        hasErrors=has_errors,
    )


class WeekCalendarService:
    def __init__(self, fetcher: ShiftsService):
        self.fetcher = fetcher

    async def load_week(
        self, week_start: date, tz: tzinfo, time_zone: str, subject_id: str = ""
    ) -> WeekView:
        week = DayWindow(week_start_for(week_start), tz).week()
        days = await fetch_week(self.fetcher, week[0], subject_id)
        return build_week_view(week, days, time_zone=time_zone, subject_id=subject_id)

    def invalidate_week(self, week_start: date, tz: tzinfo, subject_id: str = "") -> List[str]:
        keys = [
            build_cache_key(day, subject_id)
            for day in DayWindow(week_start_for(week_start), tz).week()
        ]
        removed = self.fetcher.cache.invalidate_many(keys)
        logger.info("Refresh dropped %d cached day(s) for %s", removed, subject_id or "me")
        return keys

    async def refresh(
        self, week_start: date, tz: tzinfo, time_zone: str, subject_id: str = ""
    ) -> WeekView:
        self.invalidate_week(week_start, tz, subject_id)
        return await self.load_week(week_start, tz, time_zone, subject_id)

    async def load_day(self, day: DayWindow, subject_id: str = "") -> DayShifts:
        try:
            shifts = await self.fetcher.fetch_day(day, subject_id)
        except FetchError as exc:
            logger.warning("Day view failed for %s: %s", day.iso_date(), exc)
            return DayShifts(dayIndex=0, dateISO=day.iso_date(), status="error", error=str(exc))
        shifts.sort(key=lambda shift: shift.start)
        return DayShifts(dayIndex=0, dateISO=day.iso_date(), shifts=shifts)
