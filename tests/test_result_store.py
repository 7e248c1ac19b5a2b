"""Tests for the result store contract across all backends.

Covers:
- put/get round trip and replace-on-write
- lazy expiry on get, expired entries omitted from list
- sweep() and the background sweeper task
- best-effort put (StoreWrite instead of raising)
- id validation
- S3 backend against a mocked boto3 client
"""

from __future__ import annotations

import asyncio
import io
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from app.repositories import build_result_store
from app.repositories.base import is_valid_result_id
from app.repositories.filesystem import FileResultStore
from app.repositories.memory import MemoryResultStore
from app.repositories.s3 import S3ResultStore
from app.repositories.sweeper import ResultSweeper
from converter.envelopes import PROCESSING
from tests.helpers import FakeClock

FIELDS = {"html": '{"componentName": "Hero", "html": "<div/>"}', "sitecoreFields": PROCESSING, "component": PROCESSING}
HOUR = 3600


# ---------------------------------------------------------------------------
# Shared contract (memory + filesystem)
# ---------------------------------------------------------------------------


@pytest.fixture(params=["memory", "filesystem"])
def store(request, clock, tmp_path):
    if request.param == "memory":
        return MemoryResultStore(clock=clock)
    return FileResultStore(tmp_path / "storage", clock=clock)


class TestStoreContract:

    @pytest.mark.asyncio
    async def test_generate_id_is_unique_uuid(self, store):
        ids = {store.generate_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(is_valid_result_id(i) for i in ids)

    @pytest.mark.asyncio
    async def test_get_after_put(self, store, clock):
        result_id = store.generate_id()
        write = await store.put(result_id, FIELDS)

        assert write.ok
        record = await store.get(result_id)
        assert record.html == FIELDS["html"]
        assert record.sitecoreFields == PROCESSING
        assert record.timestamp >= int(clock() * 1000)

    @pytest.mark.asyncio
    async def test_put_replaces_record(self, store, clock):
        result_id = store.generate_id()
        await store.put(result_id, {"html": PROCESSING, "sitecoreFields": PROCESSING, "component": PROCESSING})
        clock.advance(5)
        await store.put(result_id, FIELDS)

        record = await store.get(result_id)
        assert record.html == FIELDS["html"]
        assert record.timestamp == int(clock() * 1000)

    @pytest.mark.asyncio
    async def test_missing_id(self, store):
        assert await store.get(store.generate_id()) is None

    @pytest.mark.asyncio
    async def test_invalid_id_reads_absent(self, store):
        assert await store.get("../../etc/passwd") is None
        write = await store.put("../escape", FIELDS)
        assert not write.ok

    @pytest.mark.asyncio
    async def test_expired_record_is_absent_and_deleted(self, store, clock):
        result_id = store.generate_id()
        await store.put(result_id, FIELDS)

        clock.advance(HOUR + 1)

        assert await store.get(result_id) is None
        assert await store._read(result_id) is None
        assert await store.list() == []

    @pytest.mark.asyncio
    async def test_record_within_hour_is_kept(self, store, clock):
        result_id = store.generate_id()
        await store.put(result_id, FIELDS)
        clock.advance(HOUR - 1)
        assert await store.get(result_id) is not None

    @pytest.mark.asyncio
    async def test_list_returns_live_records(self, store, clock):
        old_id = store.generate_id()
        await store.put(old_id, FIELDS)
        clock.advance(HOUR + 10)
        new_id = store.generate_id()
        await store.put(new_id, FIELDS)

        summaries = await store.list()

        assert [s.id for s in summaries] == [new_id]
        assert summaries[0].timestamp == int(clock() * 1000)

    @pytest.mark.asyncio
    async def test_sweep_deletes_expired(self, store, clock):
        expired = [store.generate_id() for _ in range(3)]
        for result_id in expired:
            await store.put(result_id, FIELDS)
        clock.advance(HOUR + 1)
        live_id = store.generate_id()
        await store.put(live_id, FIELDS)

        assert await store.sweep() == 3
        assert [s.id for s in await store._list_summaries()] == [live_id]


# ---------------------------------------------------------------------------
# Backend specifics
# ---------------------------------------------------------------------------


class TestFileResultStore:

    @pytest.mark.asyncio
    async def test_writes_one_json_file_per_id(self, tmp_path, clock):
        store = FileResultStore(tmp_path, clock=clock)
        result_id = store.generate_id()
        await store.put(result_id, FIELDS)

        data = json.loads((tmp_path / f"{result_id}.json").read_text())
        assert set(data) == {"html", "sitecoreFields", "component", "timestamp"}

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_absent(self, tmp_path, clock):
        store = FileResultStore(tmp_path, clock=clock)
        result_id = store.generate_id()
        (tmp_path / f"{result_id}.json").write_text("{not json")

        assert await store.get(result_id) is None

    @pytest.mark.asyncio
    async def test_write_failure_returns_status(self, tmp_path, clock):
        store = FileResultStore(tmp_path / "gone", clock=clock)
        (tmp_path / "gone").rmdir()

        write = await store.put(store.generate_id(), FIELDS)

        assert not write.ok
        assert write.error

    @pytest.mark.asyncio
    async def test_ignores_foreign_files(self, tmp_path, clock):
        store = FileResultStore(tmp_path, clock=clock)
        (tmp_path / "notes.json").write_text("{}")
        assert await store.list() == []


class TestMemoryResultStore:

    @pytest.mark.asyncio
    async def test_instances_do_not_share_state(self, clock):
        a, b = MemoryResultStore(clock=clock), MemoryResultStore(clock=clock)
        result_id = a.generate_id()
        await a.put(result_id, FIELDS)
        assert await b.get(result_id) is None

    @pytest.mark.asyncio
    async def test_write_exception_becomes_status(self, clock):
        store = MemoryResultStore(clock=clock)

        async def broken_write(result_id, record):
            raise RuntimeError("boom")

        store._write = broken_write
        write = await store.put(store.generate_id(), FIELDS)
        assert not write.ok
        assert write.error == "boom"


# ---------------------------------------------------------------------------
# S3 backend (boto3 client mocked)
# ---------------------------------------------------------------------------


class FakeS3:
    """Minimal in-memory stand-in for the boto3 S3 client methods used."""

    def __init__(self):
        self.objects = {}
        self.last_modified = {}
        self.put_object = MagicMock(side_effect=self._put)
        self.get_object = MagicMock(side_effect=self._get)
        self.delete_object = MagicMock(side_effect=self._delete)

    def _put(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = Body
        self.last_modified[Key] = datetime.now(timezone.utc)

    def _get(self, Bucket, Key):
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": io.BytesIO(self.objects[Key])}

    def _delete(self, Bucket, Key):
        self.objects.pop(Key, None)

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        paginator = MagicMock()
        paginator.paginate = lambda Bucket, Prefix: [{
            "Contents": [
                {"Key": key, "LastModified": self.last_modified[key]}
                for key in self.objects if key.startswith(Prefix)
            ]
        }]
        return paginator


class TestS3ResultStore:

    @pytest.mark.asyncio
    async def test_put_get_uses_prefixed_key(self):
        s3 = FakeS3()
        store = S3ResultStore("bucket", prefix="results", client=s3)
        result_id = store.generate_id()

        write = await store.put(result_id, FIELDS)

        assert write.ok
        assert f"results/{result_id}.json" in s3.objects
        assert (await store.get(result_id)).html == FIELDS["html"]

    @pytest.mark.asyncio
    async def test_missing_object_is_absent(self):
        store = S3ResultStore("bucket", client=FakeS3())
        assert await store.get(store.generate_id()) is None

    @pytest.mark.asyncio
    async def test_expired_object_deleted_on_get(self):
        s3 = FakeS3()
        clock = FakeClock()
        store = S3ResultStore("bucket", client=s3, clock=clock)
        result_id = store.generate_id()
        await store.put(result_id, FIELDS)

        clock.advance(HOUR + 1)

        assert await store.get(result_id) is None
        assert s3.objects == {}

    @pytest.mark.asyncio
    async def test_list_uses_last_modified(self):
        s3 = FakeS3()
        store = S3ResultStore("bucket", client=s3)
        result_id = store.generate_id()
        await store.put(result_id, FIELDS)
        s3.objects["results/readme.txt"] = b"x"
        s3.last_modified["results/readme.txt"] = datetime.now(timezone.utc)

        summaries = await store.list()

        assert [s.id for s in summaries] == [result_id]
        key = f"results/{result_id}.json"
        assert summaries[0].timestamp == int(s3.last_modified[key].timestamp() * 1000)

    @pytest.mark.asyncio
    async def test_client_error_on_put_becomes_status(self):
        s3 = FakeS3()
        s3.put_object = MagicMock(side_effect=ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        ))
        store = S3ResultStore("bucket", client=s3)

        write = await store.put(store.generate_id(), FIELDS)

        assert not write.ok
        assert "AccessDenied" in write.error

    def test_requires_bucket(self):
        with pytest.raises(ValueError, match="S3_BUCKET"):
            S3ResultStore("", client=FakeS3())


# ---------------------------------------------------------------------------
# Sweeper + factory
# ---------------------------------------------------------------------------


class TestSweeper:

    @pytest.mark.asyncio
    async def test_sweeps_at_start_and_close_cancels(self, memory_store, clock):
        result_id = memory_store.generate_id()
        await memory_store.put(result_id, FIELDS)
        clock.advance(HOUR + 1)

        sweeper = memory_store.start_sweeper(interval=3600)
        await asyncio.sleep(0.05)

        assert await memory_store._list_summaries() == []
        assert sweeper.running

        await memory_store.close()
        assert not sweeper.running

    @pytest.mark.asyncio
    async def test_sweep_errors_do_not_stop_loop(self, memory_store):
        calls = []

        async def flaky_sweep():
            calls.append(1)
            raise RuntimeError("storage down")

        memory_store.sweep = flaky_sweep
        sweeper = ResultSweeper(memory_store, interval=0.01)
        sweeper.start()
        await asyncio.sleep(0.1)
        await sweeper.stop()

        assert len(calls) >= 2


class TestBuildResultStore:

    def test_memory(self):
        assert isinstance(build_result_store("memory"), MemoryResultStore)

    def test_filesystem(self, tmp_path, monkeypatch):
        monkeypatch.setattr("converter.config.RESULTS_DIR", str(tmp_path / "results"))
        store = build_result_store("filesystem")
        assert isinstance(store, FileResultStore)
        assert store.directory == tmp_path / "results"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown STORAGE_BACKEND"):
            build_result_store("redis")
