"""Tests for upload models."""
import pytest
from chunkup.core.upload.models import (
    ChunkInfo,
    ChunkStates,
    Session,
    UploadOptions,
    UploadProgress,
    UploadResult
)


class TestChunkInfo:
    """Test suite for ChunkInfo."""

    def test_create(self):
        """Test basic creation."""
        chunk = ChunkInfo(index=0, start=0, end=1024)

        assert chunk.index == 0
        assert chunk.start == 0
        assert chunk.end == 1024

    def test_size_property(self):
        """Test size calculation."""
        chunk = ChunkInfo(index=0, start=100, end=500)

        assert chunk.size == 400

    def test_immutable(self):
        """Test chunk info is immutable."""
        chunk = ChunkInfo(index=0, start=0, end=100)

        with pytest.raises(AttributeError):
            chunk.start = 50


class TestUploadOptions:
    """Test suite for UploadOptions."""

    def test_defaults(self):
        """Test default chunk size and concurrency."""
        options = UploadOptions(url="https://example.com/upload")

        assert options.chunk_size == 1024 * 1024
        assert options.concurrency == 5

    def test_init_url(self):
        """Test handshake endpoint."""
        options = UploadOptions(url="https://example.com/upload/")

        assert options.url == "https://example.com/upload"
        assert options.init_url == "https://example.com/upload/init"

    @pytest.mark.parametrize('kwargs', [
        {'chunk_size': 0},
        {'chunk_size': -5},
        {'concurrency': 0},
    ])
    def test_invalid_values(self, kwargs):
        """Test non-positive sizes raise ValueError."""
        with pytest.raises(ValueError):
            UploadOptions(url="https://example.com", **kwargs)

    def test_url_optional(self):
        """Test options can be created before the url is known."""
        assert UploadOptions().url is None


class TestUploadProgress:
    """Test suite for UploadProgress."""

    def test_percentage(self):
        """Test percentage calculation."""
        progress = UploadProgress(loaded=250, total=1000)

        assert progress.percentage == 25.0
        assert progress.is_complete is False

    def test_percentage_empty_file(self):
        """Test percentage of an empty file."""
        assert UploadProgress(loaded=0, total=0).percentage == 0.0

    def test_complete(self):
        """Test completion flag."""
        assert UploadProgress(loaded=1000, total=1000).is_complete is True

    def test_to_dict(self):
        """Test dict form matches the callback payload."""
        assert UploadProgress(loaded=5, total=10).to_dict() == {'loaded': 5, 'total': 10}


class TestSessionAndResult:
    """Test suite for Session, ChunkStates and UploadResult."""

    def test_session_immutable(self):
        """Test session is immutable."""
        session = Session(file_id="abc", total_chunks=10)

        with pytest.raises(AttributeError):
            session.file_id = "other"

    def test_chunk_states_default_empty(self):
        """Test empty states."""
        states = ChunkStates()

        assert states.pending == frozenset()
        assert states.in_flight == frozenset()
        assert states.done == frozenset()

    def test_result(self):
        """Test result fields."""
        result = UploadResult(file_id="abc", file_name="a.bin", file_size=10, total_chunks=1)

        assert result.elapsed == 0.0
        assert result.file_name == "a.bin"
