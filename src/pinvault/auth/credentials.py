# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""The single shared PIN.

There is exactly one credential record. It is created from the configured
default PIN by an idempotent upsert, either explicitly at startup
(:meth:`CredentialStore.ensure_credential`) or on the first verification
attempt if startup bootstrap did not run.
"""

from __future__ import annotations

import logging

from pinvault.auth.passwords import DEFAULT_ROUNDS, hash_password, verify_password
from pinvault.errors import AuthError, ConfigError, ValidationError
from pinvault.infra.password_repo import PasswordRepo
from pinvault.validation import is_valid_pin, validate_pin

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, repo: PasswordRepo, *, default_password: str, rounds: int = DEFAULT_ROUNDS) -> None:
        self._repo = repo
        self._default_password = default_password
        self._rounds = rounds

    def ensure_credential(self) -> bool:
        """Create the credential from the default PIN if none exists.

        Safe to call any number of times, concurrently too. Returns True only
        for the call that actually created the record.
        """
        if not is_valid_pin(self._default_password):
            raise ConfigError("DEFAULT_PASSWORD must be exactly 4 digits")
        if self._repo.get_hash() is not None:
            return False
        created = self._repo.insert_if_absent(hash_password(self._default_password, rounds=self._rounds))
        if created:
            logger.info("Credential record bootstrapped from default password")
        return created

    def verify(self, candidate: str) -> bool:
        stored = self._repo.get_hash()
        if stored is None:
            self.ensure_credential()
            stored = self._repo.get_hash()
            if stored is None:
                raise ConfigError("Password not configured")
        return verify_password(stored, candidate)

    def change_password(self, current: str, new: str) -> None:
        validate_pin(current, field="currentPassword")
        validate_pin(new, field="newPassword")
        if current == new:
            raise ValidationError(
                "New password must be different from current password", field="newPassword"
            )

        stored = self._repo.get_hash()
        if stored is None:
            raise ConfigError("Password not configured")
        if not verify_password(stored, current):
            raise AuthError("Current password is incorrect")

        if not self._repo.replace_hash(hash_password(new, rounds=self._rounds)):
            # record vanished between the read and the write
            raise ConfigError("Password not configured")
        logger.info("Password changed")

    def reset_password(self, new: str) -> None:
        """Overwrite the PIN without knowing the current one (operator tool only)."""
        validate_pin(new, field="newPassword")
        hashed = hash_password(new, rounds=self._rounds)
        if not self._repo.replace_hash(hashed):
            self._repo.insert_if_absent(hashed)
        logger.warning("Password reset by operator")
