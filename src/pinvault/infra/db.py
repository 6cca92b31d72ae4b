# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Document-store connection handle.

One :class:`MongoHandle` lives for the whole process (on ``app.state``) and is
handed to repositories explicitly. The client is created on first use and
dropped when a connection failure is seen, so the next call reconnects.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

from pinvault.errors import ConfigError, DependencyError

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "vault"
SERVER_SELECTION_TIMEOUT_MS = 5000


class MongoHandle:
    def __init__(
        self,
        uri: Optional[str],
        *,
        db_name: Optional[str] = None,
        client_factory: Callable[..., Any] = MongoClient,
    ) -> None:
        self._uri = uri
        self._db_name = db_name
        self._client_factory = client_factory
        self._client: Any = None
        self._lock = threading.Lock()

    @property
    def database(self) -> Database:
        client = self._client
        if client is None:
            client = self._connect()
        if self._db_name:
            return client[self._db_name]
        return client.get_default_database(default=DEFAULT_DB_NAME)

    def _connect(self) -> Any:
        if not self._uri:
            raise ConfigError("MONGODB_URI environment variable is required")
        with self._lock:
            if self._client is None:
                logger.info("Connecting to document store")
                self._client = self._client_factory(
                    self._uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS
                )
            return self._client

    def reset(self) -> None:
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            logger.warning("Dropping cached document-store connection")
            try:
                client.close()
            except PyMongoError:
                logger.debug("Ignoring error while closing stale client", exc_info=True)

    def close(self) -> None:
        self.reset()


@contextmanager
def store_call(handle: MongoHandle, action: str) -> Iterator[None]:
    """Translate driver errors raised inside the block into DependencyError."""
    try:
        yield
    except ConnectionFailure as exc:
        logger.exception("Document store unreachable while trying to %s", action)
        handle.reset()
        raise DependencyError(f"Failed to {action}", detail=str(exc)) from exc
    except PyMongoError as exc:
        logger.exception("Document store error while trying to %s", action)
        raise DependencyError(f"Failed to {action}", detail=str(exc)) from exc
