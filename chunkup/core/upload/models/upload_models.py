"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional


DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MiB
DEFAULT_CONCURRENCY = 5


@dataclass(frozen=True)
class ChunkInfo:
    """
    Information about a file chunk.

    Attributes:
        index: Chunk index (zero-based chunk id)
        start: Start position in bytes
        end: End position in bytes (exclusive)
        size: Chunk size in bytes
    """
    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        """Returns chunk size."""
        return self.end - self.start


@dataclass
class UploadOptions:
    """
    Configuration for a chunked upload.

    Attributes:
        url: Upload endpoint base; the handshake goes to ``{url}/init``
        chunk_size: Size of each chunk in bytes
        concurrency: Maximum simultaneous in-flight chunk uploads
    """
    url: Optional[str] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    concurrency: int = DEFAULT_CONCURRENCY

    def __post_init__(self):
        """Validate and normalize options."""
        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        if self.concurrency <= 0:
            raise ValueError("Concurrency must be positive")
        if self.url is not None:
            self.url = self.url.rstrip('/')

    @property
    def init_url(self) -> str:
        """Returns the handshake endpoint."""
        return f"{self.url}/init"


@dataclass(frozen=True)
class Session:
    """
    Server-issued session of one upload attempt.

    Attributes:
        file_id: Identifier the server assigned to the upload
        total_chunks: Authoritative chunk count, echoed on every chunk request
    """
    file_id: str
    total_chunks: int


@dataclass(frozen=True)
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        loaded: Bytes sent so far (never more than total)
        total: File size in bytes
    """
    loaded: int
    total: int

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        if self.total == 0:
            return 0.0
        return (self.loaded / self.total) * 100

    @property
    def is_complete(self) -> bool:
        """Returns True once every byte has been reported."""
        return self.loaded >= self.total

    def to_dict(self) -> dict:
        return {'loaded': self.loaded, 'total': self.total}


@dataclass(frozen=True)
class ChunkStates:
    """
    Snapshot of where every chunk id currently is.

    The three sets partition ``range(chunks_quantity)``.
    """
    pending: FrozenSet[int] = field(default_factory=frozenset)
    in_flight: FrozenSet[int] = field(default_factory=frozenset)
    done: FrozenSet[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a successful upload.

    Attributes:
        file_id: Server-side identifier of the uploaded file
        file_name: Name sent with every chunk
        file_size: Size of uploaded file
        total_chunks: Chunk count reported by the server
        elapsed: Seconds from start to completion
    """
    file_id: str
    file_name: str
    file_size: int
    total_chunks: int
    elapsed: float = 0.0
