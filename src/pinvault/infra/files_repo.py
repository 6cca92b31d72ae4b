# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Persistence of file metadata records (``files`` collection).

Field names (``mimeType``, ``s3Key``, ``uploadedAt``) match the documents
written by earlier deployments, so existing catalogs load unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Union

from bson import ObjectId
from pymongo import DESCENDING

from pinvault.infra.db import MongoHandle, store_call

COLLECTION = "files"


@dataclass(frozen=True)
class FileRecord:
    id: str
    filename: str
    mime_type: str
    size: Union[int, float]
    storage_key: str
    uploaded_at: datetime

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "FileRecord":
        uploaded_at = doc.get("uploadedAt")
        if isinstance(uploaded_at, datetime) and uploaded_at.tzinfo is None:
            # BSON dates come back naive but are always UTC
            uploaded_at = uploaded_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(doc["_id"]),
            filename=doc.get("filename", ""),
            mime_type=doc.get("mimeType", ""),
            size=doc.get("size", 0),
            storage_key=doc.get("s3Key", ""),
            uploaded_at=uploaded_at,
        )

    def to_public(self) -> Dict[str, Any]:
        """Client-facing shape. The storage key is not exposed."""
        return {
            "id": self.id,
            "filename": self.filename,
            "size": self.size,
            "mimeType": self.mime_type,
            "uploadedAt": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }


class FilesRepo:
    def __init__(self, handle: MongoHandle) -> None:
        self._handle = handle

    @property
    def _col(self):
        return self._handle.database[COLLECTION]

    def list_newest_first(self) -> List[FileRecord]:
        with store_call(self._handle, "load files"):
            docs = list(self._col.find().sort([("uploadedAt", DESCENDING), ("_id", DESCENDING)]))
        return [FileRecord.from_doc(d) for d in docs]

    def insert(
        self,
        *,
        filename: str,
        size: Union[int, float],
        mime_type: str,
        storage_key: str,
        uploaded_at: datetime,
    ) -> FileRecord:
        doc = {
            "filename": filename,
            "mimeType": mime_type,
            "size": size,
            "s3Key": storage_key,
            "uploadedAt": uploaded_at,
            "updatedAt": uploaded_at,
        }
        with store_call(self._handle, "save file metadata"):
            result = self._col.insert_one(doc)
        doc["_id"] = result.inserted_id
        return FileRecord.from_doc(doc)

    def get(self, file_id: str) -> Optional[FileRecord]:
        with store_call(self._handle, "load file"):
            doc = self._col.find_one({"_id": ObjectId(file_id)})
        return FileRecord.from_doc(doc) if doc else None

    def delete(self, file_id: str) -> bool:
        with store_call(self._handle, "delete file record"):
            result = self._col.delete_one({"_id": ObjectId(file_id)})
        return result.deleted_count > 0

    def storage_keys(self) -> Set[str]:
        with store_call(self._handle, "load storage keys"):
            return {d["s3Key"] for d in self._col.find({}, {"s3Key": 1}) if d.get("s3Key")}
