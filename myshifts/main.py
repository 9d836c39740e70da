import logging
import os
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware

from .auth import _get_current_user
from .cache import TTLCache
from .constants import DEFAULT_TIMEZONE
from .days import DayWindow, current_week_start, parse_date_input, resolve_timezone
from .errors import SubjectResolutionError
from .fetcher import QuerySource, ShiftsService
from .graph import GraphClient, GraphShiftSource
from .models import CurrentUser, DayShifts, WeekView
from .subjects import effective_subject
from .week_view import WeekCalendarService

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="My Shifts API", version="0.1.0")

CORS_ALLOW_ORIGINS = os.environ.get("CORS_ALLOW_ORIGINS", "")
CORS_ALLOW_ORIGIN_REGEX = os.environ.get(
    "CORS_ALLOW_ORIGIN_REGEX", r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"
)
_allowed_origins = [origin.strip() for origin in CORS_ALLOW_ORIGINS.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_origin_regex=None if _allowed_origins else CORS_ALLOW_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def configure_app(
    target: FastAPI,
    source: Optional[QuerySource] = None,
    *,
    graph_client: Optional[GraphClient] = None,
    clock: Callable[[], datetime] = _utcnow,
) -> WeekCalendarService:
    """Wire the host-supplied query source (or Graph client) into ``target``.

    Each call creates a fresh cache owned by the app.
    """
    if source is None:
        if graph_client is None:
            raise ValueError("A query source or a Graph client is required.")
        source = GraphShiftSource(graph_client)
    fetcher = ShiftsService(source, TTLCache(clock), clock=clock)
    calendar = WeekCalendarService(fetcher)
    target.state.calendar = calendar
    target.state.graph_client = graph_client
    target.state.clock = clock
    return calendar


def _get_calendar(request: Request) -> WeekCalendarService:
    calendar = getattr(request.app.state, "calendar", None)
    if calendar is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Shift source not configured.",
        )
    return calendar


def _resolve_tz(tz: Optional[str]) -> Tuple[tzinfo, str]:
    name = (tz or DEFAULT_TIMEZONE).strip()
    try:
        return resolve_timezone(name), name
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _parse_day(request: Request, value: Optional[str], zone: tzinfo) -> date:
    try:
        parsed = parse_date_input(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if parsed is not None:
        return parsed
    clock = getattr(request.app.state, "clock", _utcnow)
    return clock().astimezone(zone).date()


async def _resolve_subject_id(
    request: Request, current_user: CurrentUser, user: Optional[str]
) -> str:
    if user and user.strip() and not current_user.superUser:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Super user required.")
    try:
        return await effective_subject(
            current_user, user, getattr(request.app.state, "graph_client", None)
        )
    except SubjectResolutionError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/v1/shifts/week", response_model=WeekView)
async def get_week(
    request: Request,
    start: Optional[str] = Query(default=None),
    tz: Optional[str] = Query(default=None),
    user: Optional[str] = Query(default=None),
    current_user: CurrentUser = Depends(_get_current_user),
    calendar: WeekCalendarService = Depends(_get_calendar),
):
    zone, zone_name = _resolve_tz(tz)
    subject_id = await _resolve_subject_id(request, current_user, user)
    if start:
        week_start = _parse_day(request, start, zone)
    else:
        clock = getattr(request.app.state, "clock", _utcnow)
        week_start = current_week_start(zone, clock()).date
    return await calendar.load_week(week_start, zone, zone_name, subject_id)


@app.post("/v1/shifts/week/refresh", response_model=WeekView)
async def refresh_week(
    request: Request,
    start: str = Query(..., min_length=8),
    tz: Optional[str] = Query(default=None),
    user: Optional[str] = Query(default=None),
    current_user: CurrentUser = Depends(_get_current_user),
    calendar: WeekCalendarService = Depends(_get_calendar),
):
    zone, zone_name = _resolve_tz(tz)
    subject_id = await _resolve_subject_id(request, current_user, user)
    week_start = _parse_day(request, start, zone)
    return await calendar.refresh(week_start, zone, zone_name, subject_id)


@app.get("/v1/shifts/day", response_model=DayShifts)
async def get_day(
    request: Request,
    date_input: Optional[str] = Query(default=None, alias="date"),
    tz: Optional[str] = Query(default=None),
    user: Optional[str] = Query(default=None),
    current_user: CurrentUser = Depends(_get_current_user),
    calendar: WeekCalendarService = Depends(_get_calendar),
):
    zone, _zone_name = _resolve_tz(tz)
    subject_id = await _resolve_subject_id(request, current_user, user)
    day = DayWindow(_parse_day(request, date_input, zone), zone)
    return await calendar.load_day(day, subject_id)
