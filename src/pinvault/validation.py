# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Input validators.

Each ``validate_*`` helper raises :class:`ValidationError` naming the field it
was asked to check and returns the (possibly normalised) value otherwise.
``is_*`` variants return a bool for callers that only need a yes/no answer.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

from pinvault.errors import ValidationError

MAX_FILE_SIZE = 100 * 1024 * 1024  # 100 MiB
MAX_FILENAME_LENGTH = 255

_PIN_RE = re.compile(r"[0-9]{4}")
_OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")
_MIME_RE = re.compile(
    r"[a-zA-Z0-9][a-zA-Z0-9!#$&\-\^_.]*/[a-zA-Z0-9][a-zA-Z0-9!#$&\-\^_.]*"
)
_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9._-]")
_DOT_RUN_RE = re.compile(r"\.{2,}")


def is_valid_pin(value: Any) -> bool:
    return isinstance(value, str) and bool(_PIN_RE.fullmatch(value))


def validate_pin(value: Any, *, field: str = "password") -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError("PIN must be a string", field=field)
    if not _PIN_RE.fullmatch(value):
        raise ValidationError("PIN must be exactly 4 digits", field=field)
    return value


def validate_filename(value: Any, *, field: str = "filename") -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError("Filename must be a string", field=field)
    if not value.strip():
        raise ValidationError("Filename cannot be empty", field=field)
    if len(value) > MAX_FILENAME_LENGTH:
        raise ValidationError(
            f"Filename too long (max {MAX_FILENAME_LENGTH} characters)", field=field
        )
    if ".." in value or "/" in value or "\\" in value:
        raise ValidationError("Filename contains invalid characters", field=field)
    return value


def validate_file_size(value: Any, *, max_size: int = MAX_FILE_SIZE, field: str = "size") -> float:
    # bool is an int subclass; JSON true must not pass as size 1
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise ValidationError("File size must be a number", field=field)
    if value <= 0:
        raise ValidationError("File size must be greater than 0", field=field)
    if value > max_size:
        max_mb = max_size // (1024 * 1024)
        raise ValidationError(f"File size exceeds maximum of {max_mb}MB", field=field)
    return value


def validate_mime_type(value: Any, *, field: str = "mimeType") -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError("MIME type must be a string", field=field)
    if not _MIME_RE.fullmatch(value):
        raise ValidationError("Invalid MIME type format", field=field)
    return value


def validate_storage_key(value: Any, *, field: str = "s3Key") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Invalid S3 key", field=field)
    return value.strip()


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.fullmatch(value))


def validate_object_id(value: Optional[str], *, field: str = "id") -> str:
    if not value:
        raise ValidationError("File ID is required", field=field)
    if not is_valid_object_id(value):
        raise ValidationError("Invalid ID format", field=field)
    return value


def sanitize_filename(filename: str) -> str:
    """Reduce ``filename`` to a storage-safe name matching ``[A-Za-z0-9._-]+``.

    Directory components are dropped, anything outside the allowed set becomes
    ``_`` and runs of dots are collapsed so the result never contains ``..``.
    Long names are cut to 255 characters, keeping the extension.
    """
    name = re.sub(r"^.*[\\/]", "", filename or "")
    name = _UNSAFE_CHARS_RE.sub("_", name)
    name = _DOT_RUN_RE.sub("_", name)

    if len(name) > MAX_FILENAME_LENGTH:
        dot = name.rfind(".")
        ext = name[dot:] if 0 < dot and len(name) - dot <= 16 else ""
        head = name[: MAX_FILENAME_LENGTH - len(ext)]
        name = (head.rstrip(".") if ext else head) + ext

    return name or "file"
