# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON envelope shared by every route: ``{success, message?, data?, error?}``."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pinvault.errors import DependencyError, VaultError

logger = logging.getLogger(__name__)


def success_response(data: Any = None, message: Optional[str] = None, status: int = 200) -> JSONResponse:
    body = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return JSONResponse(body, status_code=status)


def error_response(
    message: str, status: int = 400, error: Optional[str] = None, field: Optional[str] = None
) -> JSONResponse:
    body = {"success": False, "message": message, "error": error or message}
    if field:
        body["field"] = field
    return JSONResponse(body, status_code=status)


@contextmanager
def failure_message(message: str) -> Iterator[None]:
    """Give backend failures inside the block a route-level message.

    Known errors pass through untouched except DependencyError, which takes
    ``message``; anything unexpected is logged and becomes a DependencyError.
    """
    try:
        yield
    except DependencyError as exc:
        exc.message = message
        raise
    except VaultError:
        raise
    except Exception as exc:
        logger.exception("%s", message)
        raise DependencyError(message, detail=str(exc)) from exc


async def vault_error_handler(request: Request, exc: VaultError) -> JSONResponse:
    if isinstance(exc, DependencyError):
        return error_response(exc.message, exc.status_code, exc.detail or exc.message)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return error_response(exc.message, exc.status_code, field=exc.field)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response("Invalid request body", 400)
