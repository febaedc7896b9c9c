"""JWT helpers for bearer tokens."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from planbee.core.config import get_settings


class InvalidTokenError(Exception):
    """Raised for any token that fails signature, expiry or payload checks."""


def create_access_token(
    account_id: str,
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    settings = get_settings()
    issued_at = issued_at or datetime.now(timezone.utc)
    expire_delta = expires_delta or timedelta(days=settings.access_token_expire_days)
    payload = {
        "sub": account_id,
        "iat": issued_at,
        "exp": issued_at + expire_delta,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> str:
    """Return the account id carried by ``token``."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise InvalidTokenError("Invalid token") from exc

    account_id = payload.get("sub")
    if not account_id or not isinstance(account_id, str):
        raise InvalidTokenError("Invalid token")
    return account_id


__all__ = ["InvalidTokenError", "create_access_token", "decode_access_token"]
