"""Shared test fixtures and configuration.

Provides an in-memory SQLite store with the real schema and a fake remote
sync server plugged into httpx through MockTransport.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from tasksync.adapters.sqlite.connection import configure_connection
from tasksync.adapters.sqlite.outbox_repository import SqliteOutboxRepository
from tasksync.adapters.sqlite.task_repository import SqliteTaskRepository
from tasksync.api.batch import RemoteSyncClient
from tasksync.api.client import APIClient
from tasksync.config import APIConfig, SyncConfig
from tasksync.services.sync_service import SyncService
from tasksync.utils import logger as logger_mod
from tasksync.utils.logger import file_handlers, get_logger


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def log_to_tmp(tmp_path_factory):
    """Send the tasksync log file to a temporary directory for the whole run."""
    app_logger = logging.getLogger("tasksync")
    for handler in file_handlers(app_logger):
        app_logger.removeHandler(handler)
        handler.close()

    log_dir = tmp_path_factory.mktemp("logs")
    with patch("tasksync.utils.logger.user_log_dir", return_value=str(log_dir)):
        logger_mod._logger = None
        get_logger()
        yield log_dir


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture()
def isolated_dirs(tmp_path):
    """Point config and data directories at tmp_path."""
    tmpdir = str(tmp_path)
    with patch("tasksync.config.user_config_dir", return_value=tmpdir):
        with patch("tasksync.config.user_data_dir", return_value=tmpdir):
            yield tmp_path


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture()
def db():
    """Fresh in-memory database with all migrations applied."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    configure_connection(conn)
    yield conn
    conn.close()


@pytest.fixture()
def outbox(db) -> SqliteOutboxRepository:
    return SqliteOutboxRepository(connection=db)


@pytest.fixture()
def task_repo(db, outbox) -> SqliteTaskRepository:
    repo = SqliteTaskRepository(connection=db)
    repo.attach_outbox(outbox)
    return repo


# ---------------------------------------------------------------------------
# Fake remote server
# ---------------------------------------------------------------------------


class FakeSyncServer:
    """In-process stand-in for the remote batch endpoint.

    Attributes:
        online: When False the health check answers 503
        reject_tasks: Task IDs reported as failed, mapped to the error message
        fail_batches: 1-based batch numbers answered with HTTP 500
        drop_batches: 1-based batch numbers raising a connection error
        batches: Decoded bodies of every batch received
        checksums: X-Checksum header of every batch received
    """

    def __init__(self) -> None:
        self.online = True
        self.reject_tasks: dict[str, str] = {}
        self.fail_batches: set[int] = set()
        self.drop_batches: set[int] = set()
        self.batches: list[dict[str, Any]] = []
        self.checksums: list[str | None] = []
        self.health_checks = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/health"):
            self.health_checks += 1
            if not self.online:
                return httpx.Response(503, json={"status": "down"})
            return httpx.Response(200, json={"status": "ok"})

        if request.url.path.endswith("/batch"):
            number = len(self.batches) + 1
            body = json.loads(request.content)
            self.batches.append(body)
            self.checksums.append(request.headers.get("X-Checksum"))

            if number in self.drop_batches:
                raise httpx.ConnectError("connection refused", request=request)
            if number in self.fail_batches:
                return httpx.Response(500, json={"error": "internal"})

            results = []
            for item in body["items"]:
                error = self.reject_tasks.get(item["task_id"])
                if error is None:
                    results.append(
                        {
                            "client_id": item["client_id"],
                            "task_id": item["task_id"],
                            "success": True,
                            "server_id": f"srv-{item['task_id'][:8]}",
                        }
                    )
                else:
                    results.append(
                        {
                            "client_id": item["client_id"],
                            "task_id": item["task_id"],
                            "success": False,
                            "error": error,
                        }
                    )
            return httpx.Response(200, json={"results": results})

        return httpx.Response(404)

    @property
    def sent_client_ids(self) -> list[str]:
        return [item["client_id"] for batch in self.batches for item in batch["items"]]


@pytest.fixture()
def server() -> FakeSyncServer:
    return FakeSyncServer()


@pytest.fixture()
def api_config() -> APIConfig:
    return APIConfig(endpoint="http://sync.test/api", timeout=5, retry=0)


@pytest.fixture()
def remote(server, api_config) -> RemoteSyncClient:
    transport = httpx.MockTransport(server.handler)
    return RemoteSyncClient(APIClient(api_config, transport=transport))


@pytest.fixture()
def sync_service(task_repo, outbox, remote) -> SyncService:
    return SyncService(task_repo, outbox, remote, config=SyncConfig(batch_size=10))
