"""
Chunking strategies for file uploads.

Implements Strategy Pattern for different chunking algorithms.
Open for extension (new strategies), closed for modification.
"""
from abc import ABC, abstractmethod
from typing import List, Tuple

from ..models import ChunkInfo, DEFAULT_CHUNK_SIZE


class BaseChunkingStrategy(ABC):
    """Abstract base class for chunking strategies."""

    @abstractmethod
    def count(self, file_size: int) -> int:
        """Number of chunks for a file size."""
        pass

    @abstractmethod
    def chunk(self, chunk_id: int, file_size: int) -> ChunkInfo:
        """Byte range of one chunk."""
        pass

    def calculate_chunks(self, file_size: int) -> List[Tuple[int, int]]:
        """
        Calculate chunk boundaries for a file.

        Args:
            file_size: Total file size in bytes

        Returns:
            List of (start, end) tuples
        """
        chunks = []
        for chunk_id in range(self.count(file_size)):
            info = self.chunk(chunk_id, file_size)
            chunks.append((info.start, info.end))
        return chunks


class FixedSizeChunkingStrategy(BaseChunkingStrategy):
    """
    Fixed-size chunking strategy.

    Chunk ``i`` covers ``[i * chunk_size, min(file_size, (i + 1) * chunk_size))``,
    so only the last chunk may be shorter.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize with chunk size.

        Args:
            chunk_size: Size of each chunk in bytes
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.chunk_size = chunk_size

    def count(self, file_size: int) -> int:
        """Returns ceil(file_size / chunk_size)."""
        if file_size < 0:
            raise ValueError("File size cannot be negative")
        return -(-file_size // self.chunk_size)

    def chunk(self, chunk_id: int, file_size: int) -> ChunkInfo:
        """
        Get the byte range of a chunk.

        Args:
            chunk_id: Zero-based chunk index
            file_size: Total file size in bytes

        Returns:
            ChunkInfo for the chunk

        Raises:
            IndexError: If the chunk id is outside the file
        """
        if not 0 <= chunk_id < self.count(file_size):
            raise IndexError(f"Chunk {chunk_id} out of range for {file_size} bytes")
        start = chunk_id * self.chunk_size
        end = min(file_size, start + self.chunk_size)
        return ChunkInfo(index=chunk_id, start=start, end=end)
