from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError

from .constants import GRAPH_SHIFTS_PATH, GRAPH_SHIFTS_VERSION, QUERY_PAGE_SIZE
from .models import RawShift

logger = logging.getLogger(__name__)


class GraphClient(Protocol):
    """The authenticated Graph client supplied by the host."""

    async def get(
        self, path: str, *, version: str, params: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]: ...


def _format_filter_instant(dt: datetime) -> str:
    utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_shift_filter(start_utc: datetime, end_utc: datetime, subject_id: Optional[str]) -> str:
    parts = [
        f"sharedShift/startDateTime ge {_format_filter_instant(start_utc)}",
        f"sharedShift/endDateTime le {_format_filter_instant(end_utc)}",
    ]
    # Without a userId clause Graph scopes the query to the signed-in user.
    if subject_id:
        parts.append(f"userId eq '{subject_id}'")
    return " and ".join(parts)


def parse_shifts(payload: Dict[str, Any]) -> List[RawShift]:
    shifts: List[RawShift] = []
    for item in payload.get("value") or []:
        try:
            shifts.append(RawShift.model_validate(item))
        except ValidationError as exc:
            shift_id = item.get("id") if isinstance(item, dict) else None
            logger.warning("Skipping malformed shift %s: %s", shift_id, exc.errors()[0]["msg"])
    return shifts


class GraphShiftSource:
    """Query source backed by ``/me/joinedTeams/getShifts``."""

    def __init__(self, client: GraphClient, *, page_size: int = QUERY_PAGE_SIZE):
        self.client = client
        self.page_size = page_size

    async def query(
        self,
        start_utc: datetime,
        end_utc: datetime,
        subject_id: Optional[str] = None,
    ) -> List[RawShift]:
        params = {
            "$filter": build_shift_filter(start_utc, end_utc, subject_id),
            "$top": str(self.page_size),
        }
        payload = await self.client.get(GRAPH_SHIFTS_PATH, version=GRAPH_SHIFTS_VERSION, params=params)
        shifts = parse_shifts(payload)
        if len(shifts) >= self.page_size:
            logger.warning("Shift query returned a full page (%d); results may be truncated", self.page_size)
        return shifts
