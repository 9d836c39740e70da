from __future__ import annotations

import asyncio
import logging
from typing import List

from .days import DayWindow
from .errors import FetchError
from .fetcher import ShiftsService
from .models import DayShifts

logger = logging.getLogger(__name__)


async def fetch_week(
    fetcher: ShiftsService, week_start: DayWindow, subject_id: str = ""
) -> List[DayShifts]:
    """Fetch the 7 days starting at ``week_start`` concurrently.

    A day whose fetch fails is returned with ``status="error"`` and no shifts;
    the remaining days are unaffected. Results are in day order regardless of
    which fetch finished first.
    """
    days = week_start.week()
    results = await asyncio.gather(
        *(fetcher.fetch_day(day, subject_id) for day in days),
        return_exceptions=True,
    )

    week: List[DayShifts] = []
    for index, (day, result) in enumerate(zip(days, results)):
        if isinstance(result, FetchError):
            logger.warning("Skipping %s: %s", day.iso_date(), result)
            week.append(
                DayShifts(dayIndex=index, dateISO=day.iso_date(), status="error", error=str(result))
            )
            continue
        if isinstance(result, BaseException):
            raise result
        week.append(DayShifts(dayIndex=index, dateISO=day.iso_date(), shifts=list(result)))
    return week
