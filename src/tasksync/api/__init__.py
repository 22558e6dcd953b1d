"""Remote server access: HTTP client and batch endpoint contract."""

from tasksync.api.batch import RemoteSyncClient, compute_checksum
from tasksync.api.client import APIClient

__all__ = ["APIClient", "RemoteSyncClient", "compute_checksum"]
