from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from api.cookies import ACCESS_COOKIE
from utils.exceptions import Unauthorized


def _access_token_from_request() -> str | None:
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def jwt_required():
    """
    Resolve the current user from the access token (cookie first, then
    Authorization header) and attach it as g.current_user.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _access_token_from_request()
            if not token:
                raise Unauthorized("unauthorized request")
            tokens = current_app.extensions["session_tokens"]
            decoded = tokens.verify_access_token(token)

            user = current_app.extensions["identity_store"].find_by_id(decoded["sub"])
            if not user:
                raise Unauthorized("invalid access token")
            g.current_user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator
