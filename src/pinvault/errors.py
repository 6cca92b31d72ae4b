# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to, so routes never pick status
codes themselves: they raise, and the exception handler in ``pinvault.app``
renders the envelope.
"""

from __future__ import annotations

from typing import Optional


class VaultError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)


class ValidationError(VaultError):
    """Malformed client input. ``field`` names the offending field."""

    status_code = 400
    default_message = "Invalid request"


class AuthError(VaultError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(VaultError):
    status_code = 404
    default_message = "Resource not found"


class ConfigError(VaultError):
    """Required external configuration is absent."""

    status_code = 500
    default_message = "Server is not configured"


class DependencyError(VaultError):
    """The document store or the object store failed.

    ``detail`` is the underlying error text, returned to the caller for
    diagnostics. It must never contain a credential.
    """

    status_code = 500
    default_message = "Backend dependency failed"

    def __init__(self, message: Optional[str] = None, *, detail: str = "") -> None:
        super().__init__(message)
        self.detail = detail
