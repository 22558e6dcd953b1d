"""Tests for the remote batch client."""

import hashlib
import json
from datetime import UTC, datetime

import httpx
import pytest

from tasksync.api.batch import (
    MISSING_RESULT_ERROR,
    RemoteSyncClient,
    compute_checksum,
)
from tasksync.api.client import APIClient
from tasksync.config import APIConfig
from tasksync.exceptions import BatchTransmissionError
from tasksync.models import Operation, OutboxEntry


def make_entry(n: int, task_id: str | None = None) -> OutboxEntry:
    task_id = task_id or f"task-{n}"
    return OutboxEntry(
        id=f"entry-{n}",
        task_id=task_id,
        operation=Operation.UPDATE,
        data=json.dumps({"id": task_id, "title": f"Task {n}"}),
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
    )


def remote_for(handler) -> RemoteSyncClient:
    config = APIConfig(endpoint="http://sync.test/api", timeout=5, retry=0)
    return RemoteSyncClient(APIClient(config, transport=httpx.MockTransport(handler)))


def respond(payload, status: int = 200):
    def handler(request):
        return httpx.Response(status, json=payload)

    return handler


class TestChecksum:
    def test_matches_canonical_sha256(self):
        items = [{"b": 1, "a": "x"}]
        expected = hashlib.sha256(b'[{"a":"x","b":1}]').hexdigest()

        assert compute_checksum(items) == expected

    def test_independent_of_key_order(self):
        assert compute_checksum([{"a": 1, "b": 2}]) == compute_checksum([{"b": 2, "a": 1}])

    def test_depends_on_item_order(self):
        first, second = {"id": 1}, {"id": 2}

        assert compute_checksum([first, second]) != compute_checksum([second, first])


class TestBuildRequest:
    def test_items_carry_entry_fields_and_parsed_snapshot(self):
        remote = remote_for(respond({}))

        request, checksum = remote.build_request([make_entry(1), make_entry(2)])

        assert [item.client_id for item in request.items] == ["entry-1", "entry-2"]
        assert request.items[0].task_id == "task-1"
        assert request.items[0].operation == Operation.UPDATE
        assert request.items[0].data == {"id": "task-1", "title": "Task 1"}
        assert request.client_timestamp.tzinfo is not None
        assert checksum == compute_checksum(
            [item.model_dump(mode="json") for item in request.items]
        )


class TestSend:
    @pytest.mark.asyncio
    async def test_posts_batch_with_checksum_header(self, remote, server):
        batch = [make_entry(1), make_entry(2)]

        await remote.send(batch)

        assert len(server.batches) == 1
        body = server.batches[0]
        assert [item["client_id"] for item in body["items"]] == ["entry-1", "entry-2"]
        assert "client_timestamp" in body
        assert server.checksums[0] == compute_checksum(body["items"])

    @pytest.mark.asyncio
    async def test_returns_outcomes_in_batch_order(self):
        results = [
            {"client_id": "entry-2", "task_id": "task-2", "success": False, "error": "Invalid title"},
            {"client_id": "entry-1", "task_id": "task-1", "success": True, "server_id": "srv-1"},
        ]
        remote = remote_for(respond({"results": results}))

        outcomes = await remote.send([make_entry(1), make_entry(2)])

        assert [o.client_id for o in outcomes] == ["entry-1", "entry-2"]
        assert outcomes[0].success is True
        assert outcomes[0].server_id == "srv-1"
        assert outcomes[1].success is False
        assert outcomes[1].error == "Invalid title"

    @pytest.mark.asyncio
    async def test_missing_result_is_a_failure(self):
        results = [{"client_id": "entry-1", "task_id": "task-1", "success": True}]
        remote = remote_for(respond({"results": results}))

        outcomes = await remote.send([make_entry(1), make_entry(2)])

        assert outcomes[1].success is False
        assert outcomes[1].task_id == "task-2"
        assert outcomes[1].error == MISSING_RESULT_ERROR

    @pytest.mark.asyncio
    async def test_failure_without_message_gets_default(self):
        results = [{"client_id": "entry-1", "task_id": "task-1", "success": False}]
        remote = remote_for(respond({"results": results}))

        outcomes = await remote.send([make_entry(1)])

        assert outcomes[0].error == "Rejected by server"

    @pytest.mark.asyncio
    async def test_http_error_status_raises(self):
        remote = remote_for(respond({"error": "boom"}, status=500))

        with pytest.raises(BatchTransmissionError, match="HTTP 500"):
            await remote.send([make_entry(1)])

    @pytest.mark.asyncio
    async def test_explicit_rejection_raises(self):
        remote = remote_for(respond({"success": False, "error": "checksum mismatch"}))

        with pytest.raises(BatchTransmissionError, match="checksum mismatch"):
            await remote.send([make_entry(1)])

    @pytest.mark.asyncio
    async def test_body_without_results_raises(self):
        remote = remote_for(respond({"ok": True}))

        with pytest.raises(BatchTransmissionError, match="no results"):
            await remote.send([make_entry(1)])

    @pytest.mark.asyncio
    async def test_malformed_results_raise(self):
        remote = remote_for(respond({"results": [{"client_id": "entry-1"}]}))

        with pytest.raises(BatchTransmissionError, match="malformed"):
            await remote.send([make_entry(1)])

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        remote = remote_for(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(BatchTransmissionError, match="invalid response"):
            await remote.send([make_entry(1)])

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        remote = remote_for(handler)

        with pytest.raises(BatchTransmissionError, match="Could not reach server"):
            await remote.send([make_entry(1)])

    @pytest.mark.asyncio
    async def test_transport_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        remote = remote_for(handler)

        with pytest.raises(BatchTransmissionError, match="Timed out"):
            await remote.send([make_entry(1)])


class TestConnectivity:
    @pytest.mark.asyncio
    async def test_online(self, remote, server):
        assert await remote.check_connectivity() is True
        assert server.health_checks == 1

    @pytest.mark.asyncio
    async def test_offline_status(self, remote, server):
        server.online = False

        assert await remote.check_connectivity() is False

    @pytest.mark.asyncio
    async def test_offline_transport(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert await remote_for(handler).check_connectivity() is False