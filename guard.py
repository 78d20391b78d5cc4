"""
guard.py
Route guard: request-level token check, page-level admin check and path routing.

Both levels evaluate the same capability(); the request level only needs a
token, the page level needs an admin. A non-admin token therefore gets past
the first check and is turned away by the second.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Mapping

import config
from models import User


class Capability(IntEnum):
    ANONYMOUS = 0
    TOKEN_ONLY = 1
    ADMIN = 2


def capability(token: str | None, user: User | None = None) -> Capability:
    if not token:
        return Capability.ANONYMOUS
    if user is not None and user.is_admin:
        return Capability.ADMIN
    return Capability.TOKEN_ONLY


def bearer_token(headers: Mapping[str, str]) -> str | None:
    for key, value in headers.items():
        if key.lower() == "authorization" and value:
            token = value.replace("Bearer ", "", 1).strip()
            return token or None
    return None


def is_protected(path: str, prefixes=config.PROTECTED_PATHS) -> bool:
    return any(path.startswith(p) for p in prefixes)


def edge_redirect(
    path: str,
    cookies: Mapping[str, str],
    headers: Mapping[str, str],
    prefixes=config.PROTECTED_PATHS,
    session_token: str | None = None,
) -> str | None:
    """
    Return the path to redirect to, or None to let the request through.

    session_token is the token this browser session signed in with; it is
    accepted alongside the cookie and the Authorization header.
    """
    if is_protected(path, prefixes):
        token = cookies.get("token") or bearer_token(headers) or session_token
        if capability(token) < Capability.TOKEN_ONLY:
            return config.LOGIN_PATH

    if path == config.LOGIN_PATH and capability(cookies.get("token") or session_token) >= Capability.TOKEN_ONLY:
        return config.DASHBOARD_PATH

    return None


def require_admin(store) -> str | None:
    """Page-level check; returns the login path when the stored session is not an admin."""
    if capability(store.get_token(), store.get_user()) < Capability.ADMIN:
        return config.LOGIN_PATH
    return None


def resolve_route(path: str) -> str:
    path = "/" + (path or "").strip("/")
    if path == "/":
        return config.DASHBOARD_PATH
    if path in (config.LOGIN_PATH, config.DASHBOARD_PATH):
        return path
    return "not_found"
