# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Out-of-band removal of orphaned objects.

An object becomes orphaned when its catalog record is deleted but the storage
delete failed, or when a client uploads and never registers the file.
Objects younger than ``min_age`` are skipped: they may belong to an upload
whose metadata has not been registered yet.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List

from pinvault.errors import DependencyError
from pinvault.infra.files_repo import FilesRepo
from pinvault.infra.storage import ObjectStorage
from pinvault.services.upload_service import UPLOAD_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_MIN_AGE = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CleanupReport:
    orphans: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def find_orphans(
    files: FilesRepo,
    storage: ObjectStorage,
    *,
    prefix: str = UPLOAD_PREFIX,
    min_age: timedelta = DEFAULT_MIN_AGE,
    clock: Callable[[], datetime] = _utcnow,
) -> List[str]:
    referenced = files.storage_keys()
    cutoff = clock() - min_age
    return sorted(
        key
        for key, last_modified in storage.iter_objects(prefix)
        if key not in referenced and last_modified <= cutoff
    )


def cleanup_orphans(
    files: FilesRepo,
    storage: ObjectStorage,
    *,
    dry_run: bool = False,
    prefix: str = UPLOAD_PREFIX,
    min_age: timedelta = DEFAULT_MIN_AGE,
    clock: Callable[[], datetime] = _utcnow,
) -> CleanupReport:
    report = CleanupReport(
        orphans=find_orphans(files, storage, prefix=prefix, min_age=min_age, clock=clock)
    )
    logger.info("Found %d orphaned objects under %r", len(report.orphans), prefix)
    if dry_run:
        return report

    for key in report.orphans:
        try:
            storage.delete_object(key)
        except DependencyError:
            report.failed.append(key)
            continue
        report.deleted.append(key)
    return report
