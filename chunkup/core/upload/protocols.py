"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
Following Interface Segregation Principle (ISP) and Dependency Inversion Principle (DIP).
"""
from typing import Protocol, Dict, List, Tuple, Optional, Callable

from ..transport.models import TransportResponse
from .models import ChunkInfo


class ChunkingStrategy(Protocol):
    """
    Protocol for file chunking strategies.

    Allows different chunking algorithms to be plugged in.
    """

    def count(self, file_size: int) -> int:
        """Returns the number of chunks a file of this size is split into."""
        ...

    def chunk(self, chunk_id: int, file_size: int) -> ChunkInfo:
        """Returns the byte range of one chunk."""
        ...

    def calculate_chunks(self, file_size: int) -> List[Tuple[int, int]]:
        """
        Calculate chunk boundaries for a file.

        Args:
            file_size: Total file size in bytes

        Returns:
            List of (start, end) tuples representing chunk boundaries
        """
        ...


class UploadFile(Protocol):
    """
    Protocol for the file being uploaded.

    The engine only reads it; slices are produced on demand.
    """

    @property
    def name(self) -> str:
        """Returns the file name sent to the server."""
        ...

    @property
    def size(self) -> int:
        """Returns the file size in bytes."""
        ...

    async def read(self, start: int, end: int) -> bytes:
        """
        Read the byte range [start, end).

        Args:
            start: Start position in bytes
            end: End position in bytes (exclusive)

        Returns:
            Chunk data
        """
        ...


class TransportProtocol(Protocol):
    """Protocol for the HTTP transport performing one request at a time."""

    async def post(
        self,
        url: str,
        headers: Dict[str, str],
        body: bytes = b'',
        on_progress: Optional[Callable[[int], None]] = None
    ) -> TransportResponse:
        """
        Send a POST request.

        Args:
            url: Target URL
            headers: Request headers
            body: Request body
            on_progress: Called with the cumulative number of body bytes sent

        Returns:
            Response with status and body
        """
        ...


class LoggerProtocol(Protocol):
    """Protocol for logger objects."""

    def debug(self, msg: str) -> None: ...
    def info(self, msg: str) -> None: ...
    def warning(self, msg: str) -> None: ...
    def error(self, msg: str) -> None: ...
    def exception(self, msg: str) -> None: ...
