from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from core.config import settings

ADMIN_ROLE = "admin"


def create_access_token(sub: str, extra: Dict[str, Any] | None = None, minutes: int | None = None) -> str:
    """Issue an access token; the auth service and tests use this shape."""
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"iat": int(now.timestamp()), "exp": int(exp.timestamp()), "sub": sub, "type": "access"}
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def create_admin_token(admin_id: str) -> str:
    return create_access_token(admin_id, {"role": ADMIN_ROLE})


def decode_access(token: str) -> Dict[str, Any]:
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Not an access token")
    return payload
