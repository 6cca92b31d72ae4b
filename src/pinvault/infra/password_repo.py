# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Persistence of the singleton credential record (``passwords`` collection)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo.errors import DuplicateKeyError

from pinvault.infra.db import MongoHandle, store_call

logger = logging.getLogger(__name__)

COLLECTION = "passwords"
# Fixed primary key: the collection can never hold a second credential.
CREDENTIAL_ID = "vault"


class PasswordRepo:
    def __init__(self, handle: MongoHandle) -> None:
        self._handle = handle

    @property
    def _col(self):
        return self._handle.database[COLLECTION]

    def get_hash(self) -> Optional[str]:
        with store_call(self._handle, "read password record"):
            doc = self._col.find_one({"_id": CREDENTIAL_ID})
        if not doc:
            doc = self._adopt_legacy_record()
        if not doc:
            return None
        return str(doc.get("password") or "") or None

    def _adopt_legacy_record(self) -> Optional[Dict[str, Any]]:
        """Move a record written under a generated ObjectId to the fixed id.

        Earlier deployments created the credential with an ordinary
        ``insert``. Its hash is copied under ``CREDENTIAL_ID`` (without
        overwriting one a concurrent caller already placed there) and the
        old documents are removed.
        """
        with store_call(self._handle, "migrate password record"):
            legacy = self._col.find_one({"_id": {"$ne": CREDENTIAL_ID}, "password": {"$exists": True}})
            if not legacy:
                return None
            now = datetime.now(timezone.utc)
            try:
                self._col.update_one(
                    {"_id": CREDENTIAL_ID},
                    {
                        "$setOnInsert": {
                            "password": legacy["password"],
                            "createdAt": legacy.get("createdAt", now),
                            "updatedAt": legacy.get("updatedAt", now),
                        }
                    },
                    upsert=True,
                )
            except DuplicateKeyError:
                # a concurrent adoption placed it first
                pass
            self._col.delete_many({"_id": {"$ne": CREDENTIAL_ID}})
            doc = self._col.find_one({"_id": CREDENTIAL_ID})
        logger.warning("Adopted legacy password record %s", legacy["_id"])
        return doc

    def insert_if_absent(self, password_hash: str) -> bool:
        """Create the record unless one exists. Returns True if this call created it."""
        now = datetime.now(timezone.utc)
        with store_call(self._handle, "create password record"):
            try:
                result = self._col.update_one(
                    {"_id": CREDENTIAL_ID},
                    {"$setOnInsert": {"password": password_hash, "createdAt": now, "updatedAt": now}},
                    upsert=True,
                )
            except DuplicateKeyError:
                # a concurrent upsert won the race
                return False
        return result.upserted_id is not None

    def replace_hash(self, password_hash: str) -> bool:
        if self._set_hash(password_hash):
            return True
        return self._adopt_legacy_record() is not None and self._set_hash(password_hash)

    def _set_hash(self, password_hash: str) -> bool:
        with store_call(self._handle, "update password record"):
            result = self._col.update_one(
                {"_id": CREDENTIAL_ID},
                {"$set": {"password": password_hash, "updatedAt": datetime.now(timezone.utc)}},
            )
        return result.matched_count > 0
