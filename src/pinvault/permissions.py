# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Auth gate: every protected route depends on :func:`require_session`."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

from pinvault.auth.session import SessionData
from pinvault.context import get_context
from pinvault.errors import AuthError

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Token"
_BEARER_PREFIX = "Bearer "


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    """Return the candidate session token; first match wins.

    Order: ``Authorization: Bearer``, then ``X-Session-Token``, then the
    session cookie.
    """
    auth = request.headers.get("authorization")
    if auth and auth.startswith(_BEARER_PREFIX):
        return auth[len(_BEARER_PREFIX):]

    header = request.headers.get(SESSION_HEADER)
    if header:
        return header

    return request.cookies.get(cookie_name) or None


def load_session(request: Request) -> Optional[SessionData]:
    ctx = get_context(request)
    token = extract_token(request, ctx.settings.cookie_name)
    if not token:
        return None
    return ctx.codec.decode(token)


def require_session(request: Request) -> SessionData:
    sess = load_session(request)
    if sess is None:
        logger.debug("Rejected unauthenticated request to %s", request.url.path)
        raise AuthError("Unauthorized")
    return sess
