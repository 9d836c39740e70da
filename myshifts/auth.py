import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

from fastapi import Header, HTTPException, status
from jose import JWTError, jwt

from .models import CurrentUser

JWT_SECRET = os.environ.get("JWT_SECRET", "dev-secret")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.environ.get("JWT_AUDIENCE") or None
JWT_EXPIRE_MINUTES = int(os.environ.get("JWT_EXPIRE_MINUTES", "720"))
SUPERUSER_ROLE = os.environ.get("SHIFTS_SUPERUSER_ROLE", "superuser")


def _has_superuser_role(roles: Any) -> bool:
    if isinstance(roles, str):
        roles = [roles]
    if not isinstance(roles, Iterable):
        return False
    return any(str(role).strip().lower() == SUPERUSER_ROLE.lower() for role in roles)


def _claims_to_user(payload: Dict[str, Any]) -> Optional[CurrentUser]:
    object_id = payload.get("oid") or payload.get("sub")
    if not object_id:
        return None
    return CurrentUser(
        objectId=str(object_id),
        name=payload.get("name") or payload.get("upn") or payload.get("preferred_username"),
        superUser=_has_superuser_role(payload.get("roles") or []),
    )


def _create_access_token(user: CurrentUser, expires_minutes: int = JWT_EXPIRE_MINUTES) -> str:
    expires = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload: Dict[str, Any] = {"oid": user.objectId, "exp": expires}
    if user.name:
        payload["name"] = user.name
    if user.superUser:
        payload["roles"] = [SUPERUSER_ROLE]
    if JWT_AUDIENCE:
        payload["aud"] = JWT_AUDIENCE
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def _get_current_user(authorization: Optional[str] = Header(default=None)) -> CurrentUser:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token.")
    token = _extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            options={"verify_aud": JWT_AUDIENCE is not None},
        )
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token.",
        ) from exc
    user = _claims_to_user(payload)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")
    return user
