# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError

from pinvault.auth.credentials import CredentialStore
from pinvault.auth.session import SessionData
from pinvault.context import VaultContext, get_broker, get_catalog, get_context, get_credentials
from pinvault.errors import AuthError, VaultError
from pinvault.permissions import SESSION_HEADER, require_session
from pinvault.responses import (
    failure_message,
    request_validation_handler,
    success_response,
    vault_error_handler,
)
from pinvault.services.file_service import FileCatalog
from pinvault.services.upload_service import UploadBroker
from pinvault.settings import Settings
from pinvault.validation import validate_pin

logger = logging.getLogger("pinvault")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)


router = APIRouter()


# ------------------ Auth ------------------


@router.get("/health")
def health():
    return success_response({"status": "ok"})


@router.post("/auth/verify")
def auth_verify(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    credentials: CredentialStore = Depends(get_credentials),
):
    settings = get_context(request).settings
    password = payload.get("password")
    validate_pin(password)

    with failure_message("Authentication failed"):
        if not credentials.verify(password):
            logger.info("Rejected PIN verification attempt")
            raise AuthError("Invalid password")
        token = get_context(request).codec.issue()

    resp = success_response({"token": token}, "Authentication successful")
    resp.set_cookie(
        settings.cookie_name,
        token,
        max_age=settings.session_max_age,
        **settings.cookie_settings(),
    )
    resp.headers[SESSION_HEADER] = token
    return resp


@router.post("/auth/logout")
def auth_logout(request: Request):
    # Tokens are stateless: this only drops the cookie, the token itself stays valid.
    resp = success_response(message="Logged out")
    resp.delete_cookie(get_context(request).settings.cookie_name)
    return resp


@router.post("/auth/change-password")
def auth_change_password(
    payload: Dict[str, Any] = Body(...),
    _session: SessionData = Depends(require_session),
    credentials: CredentialStore = Depends(get_credentials),
):
    with failure_message("Failed to change password"):
        credentials.change_password(payload.get("currentPassword"), payload.get("newPassword"))
    return success_response(message="Password changed successfully")


# ------------------ Files ------------------


@router.get("/files")
def files_list(
    _session: SessionData = Depends(require_session),
    catalog: FileCatalog = Depends(get_catalog),
):
    with failure_message("Failed to load files"):
        records = catalog.list()
    return success_response({"files": [r.to_public() for r in records]})


@router.post("/files")
def files_create(
    payload: Dict[str, Any] = Body(...),
    _session: SessionData = Depends(require_session),
    catalog: FileCatalog = Depends(get_catalog),
):
    with failure_message("Failed to save file metadata"):
        record = catalog.create(
            filename=payload.get("filename"),
            size=payload.get("size"),
            mime_type=payload.get("mimeType"),
            s3_key=payload.get("s3Key"),
        )
    return success_response(record.to_public(), "File metadata saved successfully", 201)


@router.delete("/files")
def files_delete(
    id: Optional[str] = None,
    _session: SessionData = Depends(require_session),
    catalog: FileCatalog = Depends(get_catalog),
):
    with failure_message("Failed to delete file"):
        catalog.delete(id)
    return success_response(message="File deleted successfully")


@router.post("/files/presign-upload")
def files_presign_upload(
    payload: Dict[str, Any] = Body(...),
    _session: SessionData = Depends(require_session),
    broker: UploadBroker = Depends(get_broker),
):
    with failure_message("Failed to create upload URL"):
        upload = broker.presign_upload(
            payload.get("filename"), payload.get("mimeType"), payload.get("size")
        )
    return success_response({"url": upload.url, "key": upload.key}, "Upload URL created successfully")


@router.get("/files/download-url")
def files_download_url(
    id: Optional[str] = None,
    _session: SessionData = Depends(require_session),
    broker: UploadBroker = Depends(get_broker),
):
    with failure_message("Failed to create download URL"):
        url = broker.presign_download(id)
    return success_response({"url": url}, "Download URL created successfully")


# ------------------ App factory ------------------


def create_app(settings: Optional[Settings] = None, *, context: Optional[VaultContext] = None) -> FastAPI:
    if context is None:
        context = VaultContext(settings or Settings.from_env())
    settings = context.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.bootstrap_on_startup:
            try:
                if context.credentials().ensure_credential():
                    logger.info("Credential created at startup")
            except VaultError as exc:
                # verification falls back to bootstrapping on first use
                logger.warning("Startup credential bootstrap skipped: %s", exc.message)
        yield
        context.mongo.close()

    app = FastAPI(title="pinvault", lifespan=lifespan)
    app.state.vault = context
    app.add_exception_handler(VaultError, vault_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
