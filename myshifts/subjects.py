from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import quote

from .constants import GRAPH_USERS_PATH, GRAPH_USERS_VERSION
from .errors import SubjectResolutionError
from .graph import GraphClient
from .models import CurrentUser

logger = logging.getLogger(__name__)

GUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def is_object_id(value: str) -> bool:
    return bool(GUID_PATTERN.match(value))


async def resolve_subject(client: Optional[GraphClient], value: str) -> str:
    """Turn a UPN or object id into the object id the shift query expects."""
    trimmed = value.strip()
    if not trimmed:
        raise SubjectResolutionError(value, "User required.")
    if is_object_id(trimmed):
        return trimmed
    if client is None:
        raise SubjectResolutionError(trimmed, "No directory available to look up users.")
    try:
        user = await client.get(
            f"{GRAPH_USERS_PATH}/{quote(trimmed)}",
            version=GRAPH_USERS_VERSION,
            params={"$select": "id"},
        )
    except Exception as exc:
        logger.warning("Could not find user for %r: %s", trimmed, exc)
        raise SubjectResolutionError(trimmed) from exc
    object_id = user.get("id") if isinstance(user, dict) else None
    if not object_id:
        raise SubjectResolutionError(trimmed)
    return str(object_id)


async def effective_subject(
    current_user: CurrentUser,
    selected: Optional[str],
    client: Optional[GraphClient],
) -> str:
    """Selected user's id for super users, otherwise the signed-in user's id."""
    if selected and selected.strip() and current_user.superUser:
        return await resolve_subject(client, selected)
    return current_user.objectId
