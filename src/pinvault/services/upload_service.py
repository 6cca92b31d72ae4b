# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Presigned URL issuance.

Uploads are two-phase: the client asks for a presigned PUT URL here, sends
the bytes straight to the bucket, then registers the metadata through the
file catalog. Nothing checks that the uploaded object matches the declared
size or type; the catalog trusts the client's report.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pinvault.errors import NotFoundError
from pinvault.infra.files_repo import FilesRepo
from pinvault.infra.storage import ObjectStorage
from pinvault.validation import (
    MAX_FILE_SIZE,
    sanitize_filename,
    validate_file_size,
    validate_filename,
    validate_mime_type,
    validate_object_id,
)

UPLOAD_PREFIX = "uploads/"


@dataclass(frozen=True)
class PresignedUpload:
    url: str
    key: str


def build_storage_key(filename: str, *, now_ms: int) -> str:
    return f"{UPLOAD_PREFIX}{now_ms}-{sanitize_filename(filename)}"


class UploadBroker:
    def __init__(
        self,
        storage: ObjectStorage,
        files: FilesRepo,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._files = files
        self._clock = clock

    def presign_upload(self, filename: Any, mime_type: Any, size: Optional[Any] = None) -> PresignedUpload:
        self._storage.check_config()
        validate_filename(filename)
        validate_mime_type(mime_type)
        if size is not None:
            validate_file_size(size, max_size=MAX_FILE_SIZE)

        key = build_storage_key(filename, now_ms=int(self._clock() * 1000))
        return PresignedUpload(url=self._storage.presign_put(key, mime_type), key=key)

    def presign_download(self, file_id: Optional[str]) -> str:
        self._storage.check_config()
        validate_object_id(file_id)
        record = self._files.get(file_id)
        if record is None:
            raise NotFoundError("File not found")
        return self._storage.presign_get(record.storage_key, record.filename)
