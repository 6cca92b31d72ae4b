# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_TRUTHY = {"1", "true", "yes", "y"}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_opt(name: str) -> Optional[str]:
    v = (os.getenv(name) or "").strip()
    return v or None


@dataclass(frozen=True)
class Settings:
    mongodb_uri: Optional[str] = None
    db_name: Optional[str] = None

    aws_region: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_bucket_name: Optional[str] = None
    aws_endpoint_url: Optional[str] = None

    default_password: str = "1234"
    session_secret: Optional[str] = None
    token_mode: str = "signed"
    session_max_age: int = 24 * 60 * 60
    cookie_name: str = "session_token"
    cookie_secure: bool = False

    presign_expires: int = 3600
    bcrypt_rounds: int = 10
    bootstrap_on_startup: bool = True
    api_prefix: str = "/api"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mongodb_uri=_env_opt("MONGODB_URI"),
            db_name=_env_opt("VAULT_DB_NAME"),
            aws_region=_env_opt("AWS_REGION"),
            aws_access_key_id=_env_opt("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=_env_opt("AWS_SECRET_ACCESS_KEY"),
            aws_bucket_name=_env_opt("AWS_BUCKET_NAME"),
            aws_endpoint_url=_env_opt("AWS_S3_ENDPOINT_URL"),
            default_password=os.getenv("DEFAULT_PASSWORD", "1234"),
            session_secret=_env_opt("SESSION_SECRET") or _env_opt("VAULT_SECRET_KEY"),
            token_mode=os.getenv("VAULT_TOKEN_MODE", "signed").strip().lower(),
            session_max_age=int(os.getenv("VAULT_SESSION_MAX_AGE", str(24 * 60 * 60))),
            cookie_name=os.getenv("VAULT_COOKIE_NAME", "session_token"),
            cookie_secure=_env_bool("VAULT_COOKIE_SECURE", "false"),
            presign_expires=int(os.getenv("VAULT_PRESIGN_EXPIRES", "3600")),
            bcrypt_rounds=int(os.getenv("VAULT_BCRYPT_ROUNDS", "10")),
            bootstrap_on_startup=_env_bool("VAULT_BOOTSTRAP_ON_STARTUP", "true"),
            api_prefix=os.getenv("VAULT_API_PREFIX", "/api").rstrip("/"),
            log_level=os.getenv("VAULT_LOG_LEVEL", "INFO").upper(),
        )

    def cookie_settings(self) -> dict:
        return {"httponly": True, "samesite": "lax", "secure": self.cookie_secure}
