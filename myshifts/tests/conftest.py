from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Set, Tuple
from zoneinfo import ZoneInfo

from myshifts.cache import TTLCache
from myshifts.days import DayWindow
from myshifts.fetcher import ShiftsService
from myshifts.models import RawShift, SchedulingGroupInfo, SharedShift, ShiftFragment, TeamInfo

TZ = ZoneInfo("Europe/Copenhagen")
# A Monday in summer time (UTC+2) with no DST change in the week.
WEEK_START = date(2025, 6, 2)
USER_ID = "109996fd-2223-4e1e-a61c-8f68b6e32c58"
OTHER_USER_ID = "5a1d3c9e-0b7f-4c2a-9e61-3f2b8d4a7c10"


def local(day_offset: int, hour: int = 0, minute: int = 0, base: date = WEEK_START) -> datetime:
    day = base + timedelta(days=day_offset)
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=TZ)


def make_week(base: date = WEEK_START) -> List[DayWindow]:
    return DayWindow(base, TZ).week()


def make_shift(
    shift_id: str,
    start: datetime,
    end: datetime,
    *,
    team: Optional[str] = "Team A",
    group: Optional[str] = None,
    theme: Optional[str] = None,
    user_id: Optional[str] = USER_ID,
) -> RawShift:
    return RawShift(
        id=shift_id,
        teamId="team-1",
        userId=user_id,
        teamInfo=TeamInfo(teamId="team-1", displayName=team) if team else None,
        schedulingGroupInfo=SchedulingGroupInfo(displayName=group) if group else None,
        sharedShift=SharedShift(
            startDateTime=start.astimezone(timezone.utc),
            endDateTime=end.astimezone(timezone.utc),
            theme=theme,
        ),
    )


def make_fragment(
    fragment_id: str, start_hour: float, end_hour: float, day_index: int = 0
) -> ShiftFragment:
    return ShiftFragment(
        id=fragment_id,
        shiftId=fragment_id,
        part="part1",
        dayIndex=day_index,
        startHour=start_hour,
        endHour=end_hour,
        teamName="Team A",
        theme="blue",
        variant="shift-blue",
        timeRange="00:00–00:00",
    )


class FakeClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2025, 6, 4, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeSource:
    """In-memory query source that records every call."""

    def __init__(self, shifts: Optional[List[RawShift]] = None, delay: float = 0.0):
        self.shifts = list(shifts or [])
        self.calls: List[Tuple[datetime, datetime, Optional[str]]] = []
        self.failing_starts: Set[datetime] = set()
        self.delays: Dict[datetime, float] = {}
        self.delay = delay

    def fail_for(self, day: DayWindow) -> None:
        # The padded query for ``day`` starts at the previous local midnight.
        self.failing_starts.add(day.shift(-1).start_utc)

    async def query(
        self,
        start_utc: datetime,
        end_utc: datetime,
        subject_id: Optional[str] = None,
    ) -> List[RawShift]:
        self.calls.append((start_utc, end_utc, subject_id))
        await asyncio.sleep(self.delays.get(start_utc, self.delay))
        if start_utc in self.failing_starts:
            raise ConnectionError("Graph throttled the request")
        return [
            shift
            for shift in self.shifts
            if shift.start < end_utc
            and shift.end > start_utc
            and (subject_id is None or shift.userId == subject_id)
        ]


class FakeGraphClient:
    def __init__(self, responses: Optional[Dict[str, object]] = None):
        self.responses = responses or {}
        self.calls: List[Tuple[str, str, Optional[Dict[str, str]]]] = []

    async def get(self, path: str, *, version: str, params: Optional[Dict[str, str]] = None):
        self.calls.append((path, version, params))
        response = self.responses.get(path)
        if isinstance(response, Exception):
            raise response
        if response is None:
            raise LookupError(f"404 {path}")
        return response


def make_fetcher(source: FakeSource, clock: Optional[FakeClock] = None) -> ShiftsService:
    clock = clock or FakeClock()
    return ShiftsService(source, TTLCache(clock), clock=clock)
