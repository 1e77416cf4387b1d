from __future__ import annotations

import hmac
from typing import Optional

from fastapi import HTTPException, status

from storeadmin.config import get_settings


def load_api_keys() -> set[str]:
    settings = get_settings()
    if not settings.API_KEYS:
        return set()
    return {value.strip() for value in settings.API_KEYS.split(",") if value.strip()}


def _matches_any(candidate: str, keys: set[str]) -> bool:
    return any(hmac.compare_digest(candidate, key) for key in keys)


def authenticate_request(api_key: Optional[str]) -> Optional[dict]:
    keys = load_api_keys()
    if not keys:
        return None
    if api_key and _matches_any(api_key.strip(), keys):
        return {"auth_type": "api_key"}
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )


__all__ = ["authenticate_request", "load_api_keys"]
