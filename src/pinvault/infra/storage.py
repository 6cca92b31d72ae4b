# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""S3 object store access.

Only URL presigning, deletion and listing happen server-side: file bytes go
straight between the client and the bucket through presigned URLs.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Iterator, List, Optional, Tuple
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from pinvault.errors import ConfigError, DependencyError
from pinvault.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_SECONDS = 3600

_STORAGE_ERRORS = (BotoCoreError, ClientError)
# characters encodeURIComponent leaves alone on top of quote()'s defaults
_URI_COMPONENT_SAFE = "!~*'()"


def content_disposition(filename: str) -> str:
    encoded = quote(filename, safe=_URI_COMPONENT_SAFE)
    return f'attachment; filename="{encoded}"'


class ObjectStorage:
    def __init__(
        self,
        *,
        region: Optional[str],
        access_key_id: Optional[str],
        secret_access_key: Optional[str],
        bucket: Optional[str],
        endpoint_url: Optional[str] = None,
        expires: int = DEFAULT_EXPIRES_SECONDS,
        client_factory: Callable[..., Any] = boto3.client,
    ) -> None:
        self.region = region
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.expires = expires
        self._client_factory = client_factory
        self._client: Any = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStorage":
        return cls(
            region=settings.aws_region,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
            bucket=settings.aws_bucket_name,
            endpoint_url=settings.aws_endpoint_url,
            expires=settings.presign_expires,
        )

    def check_config(self) -> None:
        """Raise ConfigError naming the first missing setting."""
        for name, value in (
            ("AWS_REGION", self.region),
            ("AWS_ACCESS_KEY_ID", self.access_key_id),
            ("AWS_SECRET_ACCESS_KEY", self.secret_access_key),
            ("AWS_BUCKET_NAME", self.bucket),
        ):
            if not value:
                raise ConfigError(f"{name} is not configured")

    @property
    def client(self) -> Any:
        if self._client is None:
            self.check_config()
            with self._lock:
                if self._client is None:
                    try:
                        self._client = self._client_factory(
                            "s3",
                            region_name=self.region,
                            aws_access_key_id=self.access_key_id,
                            aws_secret_access_key=self.secret_access_key,
                            endpoint_url=self.endpoint_url,
                        )
                    except (BotoCoreError, ValueError) as exc:
                        # botocore raises ValueError for a malformed endpoint URL
                        logger.exception("Failed to create object storage client")
                        raise ConfigError(f"Invalid object storage configuration: {exc}") from exc
        return self._client

    def presign_put(self, key: str, content_type: str) -> str:
        try:
            return self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=self.expires,
            )
        except _STORAGE_ERRORS as exc:
            logger.exception("Failed to presign upload for %s", key)
            raise DependencyError("Failed to create upload URL", detail=str(exc)) from exc

    def presign_get(self, key: str, filename: str) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ResponseContentDisposition": content_disposition(filename),
                },
                ExpiresIn=self.expires,
            )
        except _STORAGE_ERRORS as exc:
            logger.exception("Failed to presign download for %s", key)
            raise DependencyError("Failed to create download URL", detail=str(exc)) from exc

    def delete_object(self, key: str) -> None:
        try:
            logger.info("Deleting object from storage: %s", key)
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except _STORAGE_ERRORS as exc:
            logger.exception("Failed to delete object from storage: %s", key)
            raise DependencyError("Failed to delete object", detail=str(exc)) from exc

    def iter_objects(self, prefix: str = "") -> Iterator[Tuple[str, datetime]]:
        """Yield (key, last_modified) for every object under ``prefix``."""
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    yield obj["Key"], obj["LastModified"]
        except _STORAGE_ERRORS as exc:
            logger.exception("Failed to list objects under %r", prefix)
            raise DependencyError("Failed to list objects", detail=str(exc)) from exc

    def list_keys(self, prefix: str = "") -> List[str]:
        return [key for key, _ in self.iter_objects(prefix)]
