"""Service factory wiring repositories, the remote client and services.

The task repository and the outbox share one SQLite connection so that a
task write and its outbox entry commit together. The outbox is attached to
the task repository after both exist, which keeps the two independent of
each other at construction time.
"""

from __future__ import annotations

import sqlite3

import httpx

from tasksync.adapters.sqlite import (
    SqliteOutboxRepository,
    SqliteTaskRepository,
    get_connection,
)
from tasksync.api import APIClient, RemoteSyncClient
from tasksync.config import Config, ConfigManager, get_config_manager
from tasksync.services.sync_service import SyncService
from tasksync.services.task_service import TaskService


class ServiceFactory:
    """Builds and caches the object graph for one profile.

    Uses lazy initialization - components are only created when first accessed.
    """

    def __init__(
        self,
        config_manager: ConfigManager | None = None,
        connection: sqlite3.Connection | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the factory.

        Args:
            config_manager: Optional ConfigManager. If None, uses the global one.
            connection: Optional pre-configured SQLite connection.
            transport: Optional httpx transport for the remote client.
        """
        self.config_manager = config_manager or get_config_manager()
        self._connection = connection
        self._transport = transport

        self._task_repo: SqliteTaskRepository | None = None
        self._outbox: SqliteOutboxRepository | None = None
        self._remote: RemoteSyncClient | None = None
        self._task_service: TaskService | None = None
        self._sync_service: SyncService | None = None

    @property
    def config(self) -> Config:
        return self.config_manager.config

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = get_connection(self.config_manager.db_path)
        return self._connection

    @property
    def outbox(self) -> SqliteOutboxRepository:
        if self._outbox is None:
            self._outbox = SqliteOutboxRepository(connection=self.connection)
        return self._outbox

    @property
    def task_repository(self) -> SqliteTaskRepository:
        if self._task_repo is None:
            self._task_repo = SqliteTaskRepository(connection=self.connection)
            self._task_repo.attach_outbox(self.outbox)
        return self._task_repo

    @property
    def remote(self) -> RemoteSyncClient:
        if self._remote is None:
            self._remote = RemoteSyncClient(
                APIClient(self.config.api, transport=self._transport)
            )
        return self._remote

    @property
    def task_service(self) -> TaskService:
        if self._task_service is None:
            self._task_service = TaskService(self.task_repository)
        return self._task_service

    @property
    def sync_service(self) -> SyncService:
        if self._sync_service is None:
            self._sync_service = SyncService(
                self.task_repository,
                self.outbox,
                self.remote,
                config=self.config.sync,
            )
        return self._sync_service

    async def close(self) -> None:
        """Release the HTTP client; the SQLite connection is closed at exit."""
        if self._remote is not None:
            await self._remote.close()
            self._remote = None
            self._sync_service = None


def get_factory(profile: str = "default") -> ServiceFactory:
    """Build a factory for the given configuration profile."""
    return ServiceFactory(get_config_manager(profile))
