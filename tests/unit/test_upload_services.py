"""Tests for upload services."""
import asyncio
import json
import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from chunkup.core.exceptions import CancellationError, ChunkTransportError, HandshakeError
from chunkup.core.transport import TransportResponse
from chunkup.core.upload.models import ChunkInfo, Session
from chunkup.core.upload.services import (
    BytesFile,
    ChunkQueue,
    ChunkUploader,
    ConnectionRegistry,
    FileValidator,
    LocalFile,
    ProgressAggregator,
    SessionHandshake
)


class TestFileValidator:
    """Test suite for FileValidator."""

    @pytest.fixture
    def validator(self):
        """Create validator instance."""
        return FileValidator()

    @pytest.fixture
    def temp_file(self):
        """Create temporary file for testing."""
        fd, path = tempfile.mkstemp()
        os.write(fd, b"test content")
        os.close(fd)
        yield Path(path)
        os.unlink(path)

    def test_validate_existing_file(self, validator, temp_file):
        """Test validating existing file."""
        path, size = validator.validate(temp_file)

        assert path == temp_file
        assert size == 12  # "test content"

    def test_validate_string_path(self, validator, temp_file):
        """Test validating string path."""
        path, size = validator.validate(str(temp_file))

        assert path == temp_file

    def test_validate_nonexistent_file(self, validator):
        """Test validating non-existent file."""
        with pytest.raises(FileNotFoundError):
            validator.validate(Path("/nonexistent/file.txt"))

    def test_validate_directory(self, validator):
        """Test validating directory raises error."""
        with pytest.raises(ValueError):
            validator.validate(Path(tempfile.gettempdir()))


class TestLocalFile:
    """Test suite for LocalFile."""

    @pytest.fixture
    def temp_file(self, tmp_path):
        """Create file with known content."""
        path = tmp_path / "sample.bin"
        path.write_bytes(b"0123456789ABCDEFGHIJ")  # 20 bytes
        return path

    def test_metadata(self, temp_file):
        """Test name and size."""
        file = LocalFile(temp_file)

        assert file.name == "sample.bin"
        assert file.size == 20
        assert file.path == temp_file

    def test_custom_name(self, temp_file):
        """Test overriding the name sent to the server."""
        assert LocalFile(temp_file, name="renamed.bin").name == "renamed.bin"

    def test_missing_file(self, tmp_path):
        """Test missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            LocalFile(tmp_path / "missing.bin")

    @pytest.mark.asyncio
    async def test_read_range(self, temp_file):
        """Test reading a range."""
        file = LocalFile(temp_file)

        assert await file.read(0, 10) == b"0123456789"
        assert await file.read(5, 15) == b"56789ABCDE"
        assert await file.read(15, 20) == b"FGHIJ"

    @pytest.mark.asyncio
    async def test_concurrent_reads(self, temp_file):
        """Test concurrent reads do not share a file position."""
        file = LocalFile(temp_file)

        results = await asyncio.gather(*(file.read(i, i + 5) for i in (0, 5, 10, 15)))

        assert b"".join(results) == b"0123456789ABCDEFGHIJ"


class TestBytesFile:
    """Test suite for BytesFile."""

    @pytest.mark.asyncio
    async def test_read(self):
        """Test slicing in-memory data."""
        file = BytesFile("mem.bin", b"abcdef")

        assert file.size == 6
        assert file.name == "mem.bin"
        assert await file.read(2, 4) == b"cd"


class TestChunkQueue:
    """Test suite for ChunkQueue."""

    def test_initial_order(self):
        """Test ids are popped highest first."""
        queue = ChunkQueue(4)

        assert len(queue) == 4
        assert queue.pending == [3, 2, 1, 0]
        assert [queue.pop() for _ in range(4)] == [3, 2, 1, 0]
        assert not queue

    def test_empty(self):
        """Test empty queue."""
        queue = ChunkQueue(0)

        assert len(queue) == 0
        with pytest.raises(IndexError):
            queue.pop()

    def test_negative_quantity(self):
        """Test negative quantity raises ValueError."""
        with pytest.raises(ValueError):
            ChunkQueue(-1)

    def test_push_requeues_next(self):
        """Test a requeued id is popped next."""
        queue = ChunkQueue(3)
        chunk_id = queue.pop()

        queue.push(chunk_id)

        assert chunk_id in queue
        assert queue.pop() == chunk_id

    def test_push_duplicate(self):
        """Test pushing a pending id raises ValueError."""
        queue = ChunkQueue(3)

        with pytest.raises(ValueError):
            queue.push(1)


class TestConnectionRegistry:
    """Test suite for ConnectionRegistry."""

    @pytest.mark.asyncio
    async def test_register_unregister(self):
        """Test tracking a transmission."""
        registry = ConnectionRegistry()
        task = asyncio.ensure_future(asyncio.sleep(10))

        registry.register(4, task)
        assert 4 in registry
        assert len(registry) == 1
        assert registry.active_ids == [4]

        registry.unregister(4)
        assert 4 not in registry
        assert len(registry) == 0

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_register_twice(self):
        """Test a chunk cannot have two live transmissions."""
        registry = ConnectionRegistry()
        task = asyncio.ensure_future(asyncio.sleep(10))
        registry.register(1, task)

        with pytest.raises(ValueError):
            registry.register(1, task)

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        """Test every registered task receives cancellation."""
        registry = ConnectionRegistry()
        tasks = [asyncio.ensure_future(asyncio.sleep(10)) for _ in range(3)]
        for chunk_id, task in enumerate(tasks):
            registry.register(chunk_id, task)

        assert registry.cancel_all() == 3
        await asyncio.gather(*tasks, return_exceptions=True)

        assert all(task.cancelled() for task in tasks)
        # Entries stay until their owner unregisters them
        assert len(registry) == 3

    def test_unregister_unknown(self):
        """Test unregistering an unknown id is a no-op."""
        ConnectionRegistry().unregister(99)


class TestProgressAggregator:
    """Test suite for ProgressAggregator."""

    def test_update_overwrites(self):
        """Test per-chunk progress is cumulative, not additive."""
        aggregator = ProgressAggregator(100)

        aggregator.update(0, 10)
        progress = aggregator.update(0, 25)

        assert progress.loaded == 25
        assert progress.total == 100

    def test_sum_of_in_flight(self):
        """Test in-flight chunks are summed."""
        aggregator = ProgressAggregator(100)
        aggregator.update(0, 10)
        aggregator.update(1, 20)

        assert aggregator.snapshot().loaded == 30
        assert aggregator.in_flight == {0: 10, 1: 20}

    def test_finish_folds_once(self):
        """Test a finished chunk counts exactly once."""
        aggregator = ProgressAggregator(100)
        aggregator.update(3, 40)

        aggregator.finish(3)
        progress = aggregator.finish(3)

        assert aggregator.uploaded_size == 40
        assert progress.loaded == 40
        assert aggregator.in_flight == {}

    def test_finish_without_progress(self):
        """Test a chunk that never reported adds nothing."""
        aggregator = ProgressAggregator(100)

        assert aggregator.finish(5).loaded == 0

    def test_clamped_to_file_size(self):
        """Test overshoot is clamped."""
        aggregator = ProgressAggregator(50)
        aggregator.update(0, 40)
        aggregator.update(1, 40)

        assert aggregator.snapshot().loaded == 50

    def test_reset(self):
        """Test reset to a floor."""
        aggregator = ProgressAggregator(100)
        aggregator.update(0, 40)
        aggregator.finish(0)
        aggregator.update(1, 5)

        aggregator.reset(30)

        assert aggregator.uploaded_size == 30
        assert aggregator.snapshot().loaded == 30


class TestSessionHandshake:
    """Test suite for SessionHandshake."""

    URL = "https://example.com/upload/init"

    def make_transport(self, status=200, payload=None, body=None):
        """Create a mocked transport answering the init request."""
        if body is None:
            body = json.dumps(payload).encode()
        transport = AsyncMock()
        transport.post = AsyncMock(return_value=TransportResponse(status=status, body=body))
        return transport

    @pytest.mark.asyncio
    async def test_open(self):
        """Test a valid response opens a session."""
        transport = self.make_transport(payload={'fileId': 'abc', 'totalChunks': 10})

        session = await SessionHandshake(transport, self.URL).open(10)

        assert session == Session(file_id='abc', total_chunks=10)
        transport.post.assert_awaited_once_with(self.URL, headers={'X-Chunks-Quantity': '10'})

    @pytest.mark.asyncio
    @pytest.mark.parametrize('payload', [
        {'fileId': '', 'totalChunks': 10},
        {'fileId': 'abc', 'totalChunks': 0},
        {'fileId': 'abc', 'totalChunks': -2},
        {'fileId': 'abc', 'totalChunks': '10'},
        {'fileId': 'abc', 'totalChunks': True},
        {'totalChunks': 10},
        {'fileId': 'abc'},
        [],
    ])
    async def test_invalid_session(self, payload):
        """Test missing or empty fields raise HandshakeError."""
        transport = self.make_transport(payload=payload)

        with pytest.raises(HandshakeError, match="Can't create file id"):
            await SessionHandshake(transport, self.URL).open(10)

    @pytest.mark.asyncio
    async def test_bad_status(self):
        """Test non-200 status raises HandshakeError."""
        transport = self.make_transport(status=503, payload={'fileId': 'abc', 'totalChunks': 1})

        with pytest.raises(HandshakeError) as exc_info:
            await SessionHandshake(transport, self.URL).open(1)

        assert exc_info.value.error_code == 503

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """Test undecodable body raises HandshakeError."""
        transport = self.make_transport(body=b"<html>")

        with pytest.raises(HandshakeError, match="JSON"):
            await SessionHandshake(transport, self.URL).open(1)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test transport errors are chained."""
        transport = AsyncMock()
        cause = OSError("unreachable")
        transport.post = AsyncMock(side_effect=cause)

        with pytest.raises(HandshakeError) as exc_info:
            await SessionHandshake(transport, self.URL).open(1)

        assert exc_info.value.__cause__ is cause


class TestChunkUploader:
    """Test suite for ChunkUploader."""

    @pytest.fixture
    def file(self):
        return BytesFile("movie.mp4", b"x" * 25)

    def make_uploader(self, file, status=201, side_effect=None):
        """Create uploader over a mocked transport."""
        transport = AsyncMock()
        transport.post = AsyncMock(
            return_value=TransportResponse(status=status),
            side_effect=side_effect
        )
        uploader = ChunkUploader(
            transport,
            "https://example.com/upload",
            file,
            Session(file_id="abc", total_chunks=3)
        )
        return uploader, transport

    def test_build_headers(self, file):
        """Test chunk request headers."""
        uploader, _ = self.make_uploader(file)

        headers = uploader.build_headers(ChunkInfo(index=2, start=20, end=25), number=1)

        assert headers == {
            'Content-Type': 'application/octet-stream',
            'X-Chunk-Number': '1',
            'X-Content-Id': 'abc',
            'X-Chunk-Id': '2',
            'X-Chunks-Quantity': '3',
            'X-Content-Name': 'movie.mp4',
        }

    @pytest.mark.asyncio
    async def test_upload_chunk_sends_range(self, file):
        """Test the chunk body is the chunk's byte range."""
        uploader, transport = self.make_uploader(file)
        chunk = ChunkInfo(index=2, start=20, end=25)

        await uploader.upload_chunk(chunk, number=1)

        _, kwargs = transport.post.call_args
        assert kwargs['body'] == b"x" * 5
        assert transport.post.call_args.args[0] == "https://example.com/upload"

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status', [200, 204, 400, 500])
    async def test_non_201_fails(self, file, status):
        """Test every status other than 201 is a failure."""
        uploader, _ = self.make_uploader(file, status=status)

        with pytest.raises(ChunkTransportError) as exc_info:
            await uploader.upload_chunk(ChunkInfo(index=0, start=0, end=10), number=1)

        assert exc_info.value.status == status
        assert exc_info.value.chunk_id == 0

    @pytest.mark.asyncio
    async def test_network_error(self, file):
        """Test network errors are wrapped."""
        cause = ConnectionError("boom")
        uploader, _ = self.make_uploader(file, side_effect=cause)

        with pytest.raises(ChunkTransportError) as exc_info:
            await uploader.upload_chunk(ChunkInfo(index=1, start=10, end=20), number=2)

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_cancellation(self, file):
        """Test cancelling the task surfaces CancellationError."""
        gate = asyncio.Event()

        async def hang(*args, **kwargs):
            await gate.wait()

        uploader, _ = self.make_uploader(file, side_effect=hang)
        task = asyncio.ensure_future(
            uploader.upload_chunk(ChunkInfo(index=1, start=10, end=20), number=2)
        )
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(CancellationError) as exc_info:
            await task

        assert exc_info.value.chunk_id == 1
        assert str(exc_info.value) == "Upload canceled by user"
