"""Tests for chunked file uploads and failure aggregation."""

import asyncio
import io
import sys
import time
from contextlib import contextmanager

import httpx
import pytest

from wt_sdk.core.errors import (
    AggregatedFileError,
    AggregatedTransferError,
    CancellationError,
    SignedURLError,
    SourceReadError,
    ValidationError,
    cancellation_reason,
)
from wt_sdk.schemas.common import Multipart
from wt_sdk.schemas.transfers import RemoteFile, Transfer
from wt_sdk.uploads.chunks import ChunkUploader
from wt_sdk.uploads.descriptor import FileTransfer
from wt_sdk.uploads.orchestrator import UploadOrchestrator
from wt_sdk.uploads.resolver import SignedURLResolver
from wt_sdk.uploads.sources import Buffer, Uploadable
from tests.conftest import error_response, json_response, storage_sink

TARGET = Transfer(id="t1").upload_target()


def file_transfer(source, file_id, part_numbers, chunk_size):
    remote = RemoteFile(
        id=file_id,
        name=source.name,
        size=source.size,
        multipart=Multipart(part_numbers=part_numbers, chunk_size=chunk_size)
    )
    return FileTransfer(source=source, remote=remote)


def serve_chunk(server, received, file_id, ordinal):
    """Answer the upload-url call of one chunk with a storage URL that records the bytes."""
    url = storage_sink(server, received, f"{file_id}/{ordinal}")
    server.on(
        "POST",
        f"transfers/t1/files/{file_id}/upload-url/{ordinal}",
        json_response({"success": True, "url": url})
    )


class BrokenSource(Uploadable):
    """A source whose stream fails on read."""

    class _Stream(io.RawIOBase):
        def read(self, size=-1):
            raise OSError("disk on fire")

    @contextmanager
    def open(self):
        stream = self._Stream()
        try:
            yield stream
        finally:
            stream.close()


class SlowSource(Uploadable):
    """An in-memory source whose reads block the calling thread."""

    class _Stream(io.BytesIO):
        def read(self, size=-1):
            time.sleep(0.2)
            return super().read(size)

    def __init__(self, name, data):
        super().__init__(name, len(data))
        self.data = data

    @contextmanager
    def open(self):
        with self._Stream(self.data) as stream:
            yield stream


async def test_upload_splits_into_chunks(client, server):
    received = {}
    for ordinal in (1, 2, 3):
        serve_chunk(server, received, "fa", ordinal)

    await client.orchestrator.upload(TARGET, file_transfer(Buffer("a.txt", b"abcdefghijkl"), "fa", 3, 5))

    assert received == {"fa/1": b"abcde", "fa/2": b"fghij", "fa/3": b"kl"}


async def test_single_chunk_file(client, server):
    received = {}
    serve_chunk(server, received, "fa", 1)

    await client.orchestrator.upload(TARGET, file_transfer(Buffer("pony.txt", b"yeehaaa"), "fa", 1, 5242880))

    assert received == {"fa/1": b"yeehaaa"}


@pytest.mark.parametrize("part_numbers", [0, None])
async def test_zero_parts_makes_no_calls(client, server, part_numbers):
    ft = file_transfer(Buffer("a.txt", b"abc"), "fa", part_numbers, 5)

    await client.orchestrator.upload(TARGET, ft)

    assert server.requests == []


async def test_failed_chunk_does_not_stop_siblings(client, server):
    received = {}
    serve_chunk(server, received, "fa", 1)
    server.on("POST", "transfers/t1/files/fa/upload-url/2", error_response("Invalid transfer or file id.", 404))
    serve_chunk(server, received, "fa", 3)

    with pytest.raises(AggregatedFileError) as exc_info:
        await client.orchestrator.upload(TARGET, file_transfer(Buffer("a.txt", b"abcdefghijkl"), "fa", 3, 5))

    err = exc_info.value
    assert len(err) == 1
    assert isinstance(err.errors[0], SignedURLError)
    assert err.errors[0].ordinal == 2
    assert err.owner_id == "t1"
    assert err.file_id == "fa"
    assert received == {"fa/1": b"abcde", "fa/3": b"kl"}


async def test_read_failure_aborts_immediately(client, server):
    source = BrokenSource("broken.bin", 10)

    with pytest.raises(SourceReadError) as exc_info:
        await client.orchestrator.upload(TARGET, file_transfer(source, "fa", 2, 5))

    assert exc_info.value.name == "broken.bin"
    assert server.requests == []


async def test_short_source_stops_early(client, server):
    received = {}
    serve_chunk(server, received, "fa", 1)

    await client.orchestrator.upload(TARGET, file_transfer(Buffer("a.txt", b"abc"), "fa", 3, 5))

    assert received == {"fa/1": b"abc"}
    assert server.calls("POST", "transfers/t1/files/fa/upload-url/2") == []


async def test_cancellation_mid_file(client, server):
    received = {}
    serve_chunk(server, received, "fa", 1)
    serve_chunk(server, received, "fa", 3)

    def cancelled(request):
        raise asyncio.CancelledError("stop")

    server.on("POST", "transfers/t1/files/fa/upload-url/2", json_response({"success": True, "url": "https://s3.test/fa/2"}))
    server.on("PUT", "https://s3.test/fa/2", cancelled)

    with pytest.raises(CancellationError) as exc_info:
        await client.orchestrator.upload(TARGET, file_transfer(Buffer("a.txt", b"abcdefghijkl"), "fa", 3, 5))

    assert cancellation_reason(exc_info.value) == "stop"
    assert received == {"fa/1": b"abcde"}
    assert server.calls("POST", "transfers/t1/files/fa/upload-url/3") == []


async def test_upload_all_reports_only_broken_files(client, server):
    received = {}
    server.on("POST", "transfers/t1/files/fa/upload-url/1", error_response("Invalid transfer or file id.", 404))
    serve_chunk(server, received, "fb", 1)

    with pytest.raises(AggregatedTransferError) as exc_info:
        await client.orchestrator.upload_all(TARGET, [
            file_transfer(Buffer("a.txt", b"aaa"), "fa", 1, 5),
            file_transfer(Buffer("b.txt", b"bbb"), "fb", 1, 5),
        ])

    err = exc_info.value
    assert len(err) == 1
    assert err.errors[0].file_id == "fa"
    assert len(err.errors[0]) == 1
    assert "upload t1 file fa failed with 1 error(s)" in str(err)
    assert received == {"fb/1": b"bbb"}


async def test_upload_all_runs_files_concurrently(client, server):
    received = {}
    b_started = asyncio.Event()

    async def slow_a(request):
        await asyncio.wait_for(b_started.wait(), timeout=1)
        received["fa/1"] = request.content
        return json_response({})

    def fast_b(request):
        b_started.set()
        received["fb/1"] = request.content
        return json_response({})

    server.on("POST", "transfers/t1/files/fa/upload-url/1", json_response({"success": True, "url": "https://s3.test/fa/1"}))
    server.on("POST", "transfers/t1/files/fb/upload-url/1", json_response({"success": True, "url": "https://s3.test/fb/1"}))
    server.on("PUT", "https://s3.test/fa/1", slow_a)
    server.on("PUT", "https://s3.test/fb/1", fast_b)

    orchestrator = UploadOrchestrator(
        SignedURLResolver(client.api),
        ChunkUploader(client.storage),
        max_concurrent_files=2
    )
    await orchestrator.upload_all(TARGET, [
        file_transfer(Buffer("a.txt", b"aaa"), "fa", 1, 5),
        file_transfer(Buffer("b.txt", b"bbb"), "fb", 1, 5),
    ])

    assert received == {"fa/1": b"aaa", "fb/1": b"bbb"}


async def test_default_runs_files_in_order(client, server):
    received = {}
    serve_chunk(server, received, "fa", 1)
    serve_chunk(server, received, "fb", 1)

    await client.orchestrator.upload_all(TARGET, [
        file_transfer(Buffer("a.txt", b"aaa"), "fa", 1, 5),
        file_transfer(Buffer("b.txt", b"bbb"), "fb", 1, 5),
    ])

    assert client.orchestrator.max_concurrent_files == 1
    assert [p.split(" ")[1] for p in server.paths()] == [
        "https://api.test/v2/transfers/t1/files/fa/upload-url/1",
        "https://s3.test/fa/1",
        "https://api.test/v2/transfers/t1/files/fb/upload-url/1",
        "https://s3.test/fb/1",
    ]


def serve_hanging_chunk(server, started):
    """Resolve chunk 1 of file fa to a storage URL whose PUT never finishes."""
    async def hang(request):
        started.set()
        await asyncio.sleep(5)
        return httpx.Response(200)

    server.on("POST", "transfers/t1/files/fa/upload-url/1", json_response({"success": True, "url": "https://s3.test/fa/1"}))
    server.on("PUT", "https://s3.test/fa/1", hang)


@pytest.mark.skipif(sys.version_info < (3, 11), reason="asyncio.timeout needs Python 3.11")
async def test_caller_deadline_becomes_timeout_error(client, server):
    serve_hanging_chunk(server, asyncio.Event())

    with pytest.raises(TimeoutError):
        async with asyncio.timeout(0.1):
            await client.orchestrator.upload(TARGET, file_transfer(Buffer("a.txt", b"abc"), "fa", 1, 5))


async def test_wait_for_deadline_becomes_timeout_error(client, server):
    serve_hanging_chunk(server, asyncio.Event())

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(
            client.orchestrator.upload(TARGET, file_transfer(Buffer("a.txt", b"abc"), "fa", 1, 5)),
            timeout=0.1
        )


async def test_task_cancel_keeps_its_message(client, server):
    started = asyncio.Event()
    serve_hanging_chunk(server, started)

    task = asyncio.create_task(
        client.orchestrator.upload(TARGET, file_transfer(Buffer("a.txt", b"abc"), "fa", 1, 5))
    )
    await started.wait()
    task.cancel("user abort")

    with pytest.raises(asyncio.CancelledError) as exc_info:
        await task

    assert task.cancelled()
    assert cancellation_reason(exc_info.value) == "user abort"


async def test_reads_do_not_block_event_loop(client, server):
    received = {}
    serve_chunk(server, received, "fa", 1)
    ticks = 0

    async def ticker():
        nonlocal ticks
        while True:
            await asyncio.sleep(0.01)
            ticks += 1

    ticking = asyncio.create_task(ticker())
    try:
        await client.orchestrator.upload(TARGET, file_transfer(SlowSource("a.txt", b"abc"), "fa", 1, 5))
    finally:
        ticking.cancel()

    assert received == {"fa/1": b"abc"}
    assert ticks >= 5


@pytest.mark.parametrize("max_concurrent_files", [0, -1])
async def test_rejects_invalid_concurrency(client, max_concurrent_files):
    with pytest.raises(ValidationError):
        UploadOrchestrator(
            SignedURLResolver(client.api),
            ChunkUploader(client.storage),
            max_concurrent_files=max_concurrent_files
        )
