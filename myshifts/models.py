from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from .constants import UNKNOWN_TEAM_NAME

DayStatus = Literal["ok", "error"]
FragmentPart = Literal["part1", "part2"]
Weekday = Literal["mon", "tue", "wed", "thu", "fri", "sat", "sun"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class TeamInfo(_Frozen):
    teamId: Optional[str] = None
    displayName: str


class SchedulingGroupInfo(_Frozen):
    schedulingGroupId: Optional[str] = None
    displayName: str
    code: Optional[str] = None


class SharedShift(_Frozen):
    startDateTime: AwareDatetime
    endDateTime: AwareDatetime
    theme: Optional[str] = None
    displayName: Optional[str] = None
    notes: Optional[str] = None


class RawShift(_Frozen):
    """A shift record as returned by the query source. Never mutated."""

    id: str
    teamId: str = ""
    userId: Optional[str] = None
    teamInfo: Optional[TeamInfo] = None
    schedulingGroupInfo: Optional[SchedulingGroupInfo] = None
    sharedShift: SharedShift

    @property
    def start(self) -> datetime:
        return self.sharedShift.startDateTime.astimezone(timezone.utc)

    @property
    def end(self) -> datetime:
        return self.sharedShift.endDateTime.astimezone(timezone.utc)

    @property
    def team_name(self) -> str:
        if self.schedulingGroupInfo and self.schedulingGroupInfo.displayName:
            return self.schedulingGroupInfo.displayName
        if self.teamInfo and self.teamInfo.displayName:
            return self.teamInfo.displayName
        return UNKNOWN_TEAM_NAME

    @property
    def group_name(self) -> Optional[str]:
        if self.schedulingGroupInfo:
            return self.schedulingGroupInfo.displayName or None
        return None


class ShiftFragment(_Frozen):
    """A piece of one RawShift bounded to a single local day."""

    id: str
    shiftId: str
    part: FragmentPart
    dayIndex: int = Field(ge=0, le=6)
    startHour: float = Field(ge=0.0, le=24.0)
    endHour: float = Field(ge=0.0, le=24.0)
    teamName: str
    groupName: Optional[str] = None
    theme: str
    variant: str
    timeRange: str  # source shift in local time, e.g. "22:00–06:00"


class TrackAssignment(_Frozen):
    trackIndex: int
    trackCount: int  # tracks in use when this fragment was placed


class PlacedFragment(ShiftFragment):
    trackIndex: int
    trackCount: int


class DayShifts(BaseModel):
    dayIndex: int
    dateISO: str
    status: DayStatus = "ok"
    error: Optional[str] = None
    shifts: List[RawShift] = Field(default_factory=list)


class DayView(BaseModel):
    dayIndex: int
    dateISO: str
    weekday: Weekday
    status: DayStatus = "ok"
    error: Optional[str] = None
    fragments: List[PlacedFragment] = Field(default_factory=list)
    maxTrackCount: int = 0


class WeekView(BaseModel):
    weekStartISO: str
    weekEndISO: str
    weekNumber: int
    timeZone: str
    subjectId: str
    days: List[DayView]
    allEmpty: bool
    hasErrors: bool


class CurrentUser(BaseModel):
    objectId: str
    name: Optional[str] = None
    superUser: bool = False
