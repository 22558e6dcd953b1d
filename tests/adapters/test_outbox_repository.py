"""Tests for SqliteOutboxRepository."""

import pytest
import pytest_asyncio

from tasksync.models import Operation, TaskCreate


@pytest_asyncio.fixture
async def task_id(task_repo):
    task = await task_repo.add(TaskCreate(title="Queued"))
    return task.id


def insert_task(db, task_id: str, status: str = "pending") -> None:
    db.execute(
        """INSERT INTO tasks (id, title, description, completed, created_at, updated_at,
                              is_deleted, sync_status)
           VALUES (?, ?, '', 0, '2024-01-01T00:00:00+00:00', '2024-01-01T00:00:00+00:00', 0, ?)""",
        (task_id, task_id, status),
    )
    db.commit()


class TestEnqueue:
    @pytest.mark.asyncio
    async def test_enqueue_defaults(self, db, outbox):
        insert_task(db, "t1")

        entry = await outbox.enqueue("t1", Operation.CREATE, {"id": "t1", "title": "A"})

        assert entry.task_id == "t1"
        assert entry.operation == Operation.CREATE
        assert entry.retry_count == 0
        assert entry.error_message is None
        assert entry.payload() == {"id": "t1", "title": "A"}

    @pytest.mark.asyncio
    async def test_enqueue_accepts_operation_string(self, db, outbox):
        insert_task(db, "t1")

        entry = await outbox.enqueue("t1", "update", {"id": "t1"})

        assert entry.operation == Operation.UPDATE

    @pytest.mark.asyncio
    async def test_enqueue_does_not_deduplicate(self, db, outbox):
        insert_task(db, "t1")

        await outbox.enqueue("t1", Operation.CREATE, {"title": "A"})
        await outbox.enqueue("t1", Operation.UPDATE, {"title": "B"})
        await outbox.enqueue("t1", Operation.UPDATE, {"title": "C"})

        assert len(await outbox.list_for_task("t1")) == 3

    @pytest.mark.asyncio
    async def test_enqueue_without_commit_can_be_rolled_back(self, db, outbox):
        insert_task(db, "t1")

        await outbox.enqueue("t1", Operation.CREATE, {}, commit=False)
        db.rollback()

        assert await outbox.drain_all() == []

    @pytest.mark.asyncio
    async def test_entries_removed_with_their_task(self, db, outbox):
        insert_task(db, "t1")
        await outbox.enqueue("t1", Operation.CREATE, {})

        db.execute("DELETE FROM tasks WHERE id = 't1'")
        db.commit()

        assert await outbox.drain_all() == []


class TestDrain:
    @pytest.mark.asyncio
    async def test_drain_all_is_fifo_across_tasks(self, db, outbox):
        for task_id in ("a", "b", "c"):
            insert_task(db, task_id)

        order = [("a", "create"), ("b", "create"), ("a", "update"), ("c", "create"), ("b", "delete")]
        created = [await outbox.enqueue(t, op, {"task": t}) for t, op in order]

        drained = await outbox.drain_all()

        assert [e.id for e in drained] == [e.id for e in created]

    @pytest.mark.asyncio
    async def test_drain_all_breaks_timestamp_ties_by_insertion(self, db, outbox):
        insert_task(db, "t1")
        for n in range(3):
            db.execute(
                """INSERT INTO sync_queue (id, task_id, operation, data, created_at)
                   VALUES (?, 't1', 'update', '{}', '2024-01-01T00:00:00.000000+00:00')""",
                (f"entry-{n}",),
            )
        db.commit()

        drained = await outbox.drain_all()

        assert [e.id for e in drained] == ["entry-0", "entry-1", "entry-2"]

    @pytest.mark.asyncio
    async def test_drain_all_does_not_remove(self, db, outbox):
        insert_task(db, "t1")
        await outbox.enqueue("t1", Operation.CREATE, {})

        await outbox.drain_all()

        assert len(await outbox.drain_all()) == 1

    @pytest.mark.asyncio
    async def test_drain_all_empty(self, outbox):
        assert await outbox.drain_all() == []


class TestRemoveAndMarkError:
    @pytest.mark.asyncio
    async def test_remove_by_task_only_touches_that_task(self, db, outbox):
        insert_task(db, "a")
        insert_task(db, "b")
        await outbox.enqueue("a", Operation.CREATE, {})
        await outbox.enqueue("a", Operation.UPDATE, {})
        other = await outbox.enqueue("b", Operation.CREATE, {})

        removed = await outbox.remove_by_task("a")

        assert removed == 2
        assert [e.id for e in await outbox.drain_all()] == [other.id]

    @pytest.mark.asyncio
    async def test_remove_by_task_up_to_keeps_newer_entries(self, db, outbox):
        insert_task(db, "a")
        first = await outbox.enqueue("a", Operation.CREATE, {})
        second = await outbox.enqueue("a", Operation.UPDATE, {})
        third = await outbox.enqueue("a", Operation.UPDATE, {})

        removed = await outbox.remove_by_task("a", up_to=second.id)

        assert removed == 2
        assert [e.id for e in await outbox.drain_all()] == [third.id]
        assert await outbox.remove_by_task("a", up_to=first.id) == 0

    @pytest.mark.asyncio
    async def test_remove_single_entry(self, db, outbox):
        insert_task(db, "a")
        first = await outbox.enqueue("a", Operation.CREATE, {})
        second = await outbox.enqueue("a", Operation.UPDATE, {})

        assert await outbox.remove(first.id) is True
        assert await outbox.remove(first.id) is False
        assert [e.id for e in await outbox.drain_all()] == [second.id]

    @pytest.mark.asyncio
    async def test_mark_error_keeps_entries_and_bumps_retry(self, db, outbox):
        insert_task(db, "a")
        await outbox.enqueue("a", Operation.CREATE, {})
        await outbox.enqueue("a", Operation.UPDATE, {})

        assert await outbox.mark_error("a", "Server rejected batch: HTTP 500") == 2
        await outbox.mark_error("a", "Timed out sending batch")

        entries = await outbox.list_for_task("a")
        assert len(entries) == 2
        assert all(e.retry_count == 2 for e in entries)
        assert all(e.error_message == "Timed out sending batch" for e in entries)


class TestCountPending:
    @pytest.mark.asyncio
    async def test_counts_entries_of_pending_and_error_tasks(self, db, outbox):
        insert_task(db, "pending-task", "pending")
        insert_task(db, "error-task", "error")
        insert_task(db, "synced-task", "synced")
        await outbox.enqueue("pending-task", Operation.CREATE, {})
        await outbox.enqueue("pending-task", Operation.UPDATE, {})
        await outbox.enqueue("error-task", Operation.CREATE, {})
        await outbox.enqueue("synced-task", Operation.UPDATE, {})

        assert await outbox.count_pending() == 3

    @pytest.mark.asyncio
    async def test_count_follows_task_mutations(self, task_repo, outbox, task_id):
        assert await outbox.count_pending() == 1

        await task_repo.delete(task_id)

        assert await outbox.count_pending() == 2
