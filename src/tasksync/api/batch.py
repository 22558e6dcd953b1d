"""Remote batch endpoint client.

Contract with the server:

    POST {endpoint}/batch
    X-Checksum: sha256 hex digest of the canonical JSON of "items"
    {"items": [{"client_id", "task_id", "operation", "data"}], "client_timestamp"}

    200 {"results": [{"client_id", "task_id", "success", "server_id"?, "error"?}]}

A batch is all-or-nothing from the transport's point of view: any failure
to obtain a usable per-item result list raises BatchTransmissionError.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from tasksync.api.client import APIClient
from tasksync.exceptions import BatchTransmissionError
from tasksync.models import BatchItem, BatchRequest, ItemOutcome, OutboxEntry
from tasksync.utils.logger import get_logger

CHECKSUM_HEADER = "X-Checksum"
MISSING_RESULT_ERROR = "No result returned for item"

logger = get_logger("api.batch")


def compute_checksum(items: Sequence[dict[str, Any]]) -> str:
    """SHA-256 hex digest of the canonical JSON form of the item list."""
    canonical = json.dumps(
        list(items), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class RemoteSyncClient:
    """Sends outbox batches to the remote server and reports per-item outcomes."""

    def __init__(self, client: APIClient):
        self.client = client

    def build_request(self, batch: Sequence[OutboxEntry]) -> tuple[BatchRequest, str]:
        """Build the batch envelope and its integrity checksum."""
        items = [
            BatchItem(
                client_id=entry.id,
                task_id=entry.task_id,
                operation=entry.operation,
                data=entry.payload(),
            )
            for entry in batch
        ]
        request = BatchRequest(items=items, client_timestamp=datetime.now(UTC))
        checksum = compute_checksum(
            [item.model_dump(mode="json") for item in request.items]
        )
        return request, checksum

    async def send(self, batch: Sequence[OutboxEntry]) -> list[ItemOutcome]:
        """Transmit one batch and return one outcome per entry, in batch order.

        Raises:
            BatchTransmissionError: If the server could not be reached, answered
                with an error status, or rejected the batch as a whole
        """
        request, checksum = self.build_request(batch)

        try:
            response = await self.client.post(
                "/batch",
                json=request.model_dump(mode="json"),
                headers={CHECKSUM_HEADER: checksum},
            )
        except httpx.HTTPStatusError as e:
            raise BatchTransmissionError(
                f"Server rejected batch: HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise BatchTransmissionError("Timed out sending batch") from e
        except httpx.RequestError as e:
            raise BatchTransmissionError(f"Could not reach server: {e}") from e

        return self._parse_outcomes(batch, response)

    def _parse_outcomes(
        self, batch: Sequence[OutboxEntry], response: httpx.Response
    ) -> list[ItemOutcome]:
        try:
            body = response.json()
        except ValueError as e:
            raise BatchTransmissionError("Server returned an invalid response") from e

        if not isinstance(body, dict) or not isinstance(body.get("results"), list):
            message = "Server returned no results"
            if isinstance(body, dict) and body.get("error"):
                message = f"Server rejected batch: {body['error']}"
            raise BatchTransmissionError(message)

        try:
            reported = [ItemOutcome(**result) for result in body["results"]]
        except (TypeError, ValidationError) as e:
            raise BatchTransmissionError("Server returned malformed results") from e

        by_client_id = {outcome.client_id: outcome for outcome in reported}
        outcomes = []
        for entry in batch:
            outcome = by_client_id.get(entry.id)
            if outcome is None:
                logger.warning("no result for queue entry %s (task %s)", entry.id, entry.task_id)
                outcome = ItemOutcome(
                    client_id=entry.id,
                    task_id=entry.task_id,
                    success=False,
                    error=MISSING_RESULT_ERROR,
                )
            elif not outcome.success and not outcome.error:
                outcome = outcome.model_copy(update={"error": "Rejected by server"})
            outcomes.append(outcome)
        return outcomes

    async def check_connectivity(self) -> bool:
        """Return True when the server's health endpoint answers with 2xx."""
        try:
            await self.client.get("/health", retry=0)
        except httpx.HTTPError as e:
            logger.info("server unreachable: %s", e)
            return False
        return True

    async def close(self) -> None:
        await self.client.close()
