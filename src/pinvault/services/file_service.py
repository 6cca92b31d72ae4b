# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""File catalog: metadata CRUD over uploaded objects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from pinvault.errors import ConfigError, DependencyError, NotFoundError
from pinvault.infra.files_repo import FileRecord, FilesRepo
from pinvault.infra.storage import ObjectStorage
from pinvault.validation import (
    validate_file_size,
    validate_filename,
    validate_mime_type,
    validate_object_id,
    validate_storage_key,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DeletionOutcome:
    record: FileRecord
    storage_deleted: bool
    storage_error: Optional[str] = None


class FileCatalog:
    def __init__(
        self,
        files: FilesRepo,
        storage: ObjectStorage,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._files = files
        self._storage = storage
        self._clock = clock

    def list(self) -> List[FileRecord]:
        return self._files.list_newest_first()

    def create(self, *, filename: Any, size: Any, mime_type: Any, s3_key: Any) -> FileRecord:
        validate_filename(filename)
        validate_file_size(size)
        validate_mime_type(mime_type)
        key = validate_storage_key(s3_key)

        record = self._files.insert(
            filename=filename.strip(),
            size=size,
            mime_type=mime_type,
            storage_key=key,
            uploaded_at=self._clock(),
        )
        logger.info("File record created: %s (%s)", record.id, record.storage_key)
        return record

    def delete(self, file_id: Optional[str]) -> DeletionOutcome:
        """Remove a file.

        Two steps with different weight:

        1. the object is deleted from storage, advisory: a failure here is
           logged and reported in the outcome, the object is left orphaned
           for ``cleanup_orphans`` to collect;
        2. the catalog record is deleted, authoritative: it always runs, so
           the catalog never keeps pointing at bytes that may be gone.
        """
        validate_object_id(file_id)
        record = self._files.get(file_id)
        if record is None:
            raise NotFoundError("File not found")

        storage_deleted = True
        storage_error = None
        try:
            self._storage.delete_object(record.storage_key)
        except (DependencyError, ConfigError) as exc:
            storage_deleted = False
            storage_error = getattr(exc, "detail", "") or exc.message
            logger.warning(
                "Storage delete failed for %s, removing catalog record anyway: %s",
                record.storage_key,
                storage_error,
            )

        self._files.delete(file_id)
        logger.info("File record deleted: %s", file_id)
        return DeletionOutcome(record=record, storage_deleted=storage_deleted, storage_error=storage_error)
