from typing import Optional

from fastapi import Request

from storeadmin.config import get_settings
from storeadmin.core.security import authenticate_request
from storeadmin.database.session import get_db


def require_auth(request: Request):
    # Header name is configurable, so it is read off the request directly.
    api_key: Optional[str] = request.headers.get(get_settings().API_KEY_HEADER)
    return authenticate_request(api_key=api_key)


__all__ = ["get_db", "require_auth"]
