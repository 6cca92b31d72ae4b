# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Process-wide collaborators and the FastAPI dependencies that hand them out.

The document-store handle and the object-store client are created once per
process and stored on ``app.state.vault``; routes receive services built on
top of them through ``Depends`` instead of importing globals.
"""

from __future__ import annotations

import threading
from typing import Optional

from fastapi import Request

from pinvault.auth.credentials import CredentialStore
from pinvault.auth.session import SessionCodec
from pinvault.infra.db import MongoHandle
from pinvault.infra.files_repo import FilesRepo
from pinvault.infra.password_repo import PasswordRepo
from pinvault.infra.storage import ObjectStorage
from pinvault.services.file_service import FileCatalog
from pinvault.services.upload_service import UploadBroker
from pinvault.settings import Settings


class VaultContext:
    def __init__(
        self,
        settings: Settings,
        *,
        mongo: Optional[MongoHandle] = None,
        storage: Optional[ObjectStorage] = None,
        codec: Optional[SessionCodec] = None,
    ) -> None:
        self.settings = settings
        self.mongo = mongo or MongoHandle(settings.mongodb_uri, db_name=settings.db_name)
        self.storage = storage or ObjectStorage.from_settings(settings)
        self._codec = codec
        self._lock = threading.Lock()

    @property
    def codec(self) -> SessionCodec:
        # built lazily: a missing secret is reported per request, not at import
        if self._codec is None:
            with self._lock:
                if self._codec is None:
                    self._codec = SessionCodec(
                        mode=self.settings.token_mode,
                        secret=self.settings.session_secret,
                        max_age=self.settings.session_max_age,
                    )
        return self._codec

    def credentials(self) -> CredentialStore:
        return CredentialStore(
            PasswordRepo(self.mongo),
            default_password=self.settings.default_password,
            rounds=self.settings.bcrypt_rounds,
        )

    def catalog(self) -> FileCatalog:
        return FileCatalog(FilesRepo(self.mongo), self.storage)

    def broker(self) -> UploadBroker:
        return UploadBroker(self.storage, FilesRepo(self.mongo))


def get_context(request: Request) -> VaultContext:
    return request.app.state.vault


def get_credentials(request: Request) -> CredentialStore:
    return get_context(request).credentials()


def get_catalog(request: Request) -> FileCatalog:
    return get_context(request).catalog()


def get_broker(request: Request) -> UploadBroker:
    return get_context(request).broker()
