# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Stateless session tokens.

A token carries ``{"authenticated": true, "timestamp": <ms since epoch>}``
and nothing is stored server-side: validity is decided by decoding the token
and checking its age. Tokens are never revoked.

Two encodings exist:

- ``signed`` (default): itsdangerous ``URLSafeSerializer`` keyed with the
  session secret, so a token cannot be forged without the secret.
- ``legacy``: plain base64 of the JSON payload, as issued by earlier
  deployments. Anyone can construct one; it is only kept so those tokens
  keep working when explicitly enabled.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from itsdangerous import BadData, URLSafeSerializer

from pinvault.errors import ConfigError

MODE_SIGNED = "signed"
MODE_LEGACY = "legacy"
TOKEN_MODES = (MODE_SIGNED, MODE_LEGACY)

DEFAULT_MAX_AGE_SECONDS = 24 * 60 * 60
SESSION_SALT = "pinvault.session.v1"


@dataclass(frozen=True)
class SessionData:
    authenticated: bool
    timestamp: float  # ms since epoch


def _now_ms() -> float:
    return time.time() * 1000


class SessionCodec:
    def __init__(
        self,
        *,
        mode: str = MODE_SIGNED,
        secret: Optional[str] = None,
        max_age: int = DEFAULT_MAX_AGE_SECONDS,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        if mode not in TOKEN_MODES:
            raise ConfigError(f"Unknown session token mode: {mode!r}")
        if mode == MODE_SIGNED and not secret:
            raise ConfigError("SESSION_SECRET is not configured")
        self.mode = mode
        self.max_age = max_age
        self._clock = clock
        self._serializer = URLSafeSerializer(secret, salt=SESSION_SALT) if secret else None

    def issue(self) -> str:
        payload = {"authenticated": True, "timestamp": int(self._clock())}
        if self.mode == MODE_LEGACY:
            raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
            return base64.b64encode(raw).decode("ascii")
        return self._serializer.dumps(payload)

    def decode(self, token: Optional[str]) -> Optional[SessionData]:
        """Return the session carried by ``token`` or ``None``; never raises."""
        if not token or not isinstance(token, str):
            return None
        data = self._loads_legacy(token) if self.mode == MODE_LEGACY else self._loads_signed(token)
        if not isinstance(data, dict):
            return None

        authenticated = data.get("authenticated")
        ts = data.get("timestamp")
        if authenticated is not True:
            return None
        if isinstance(ts, bool) or not isinstance(ts, (int, float)) or not math.isfinite(ts):
            return None
        if self._clock() - ts > self.max_age * 1000:
            return None
        return SessionData(authenticated=True, timestamp=ts)

    def validate(self, token: Optional[str]) -> bool:
        return self.decode(token) is not None

    def _loads_signed(self, token: str) -> Any:
        try:
            return self._serializer.loads(token)
        except BadData:
            return None

    @staticmethod
    def _loads_legacy(token: str) -> Any:
        try:
            raw = base64.b64decode(token.encode("ascii"), validate=True)
            return json.loads(raw.decode("utf-8"))
        except (binascii.Error, UnicodeError, ValueError, RecursionError):
            return None
