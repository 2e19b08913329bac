"""
Progress aggregation service.

Combines the progress of concurrently in-flight chunks with the bytes of
chunks that already ended into one loaded/total figure.
"""
from typing import Dict

from ..models import UploadProgress


class ProgressAggregator:
    """
    Aggregates per-chunk progress.

    Transports report cumulative progress per request, so updates overwrite
    the chunk's entry instead of adding to it. When a chunk ends, whatever
    it last reported is folded into ``uploaded_size`` exactly once.
    """

    def __init__(self, file_size: int):
        """
        Initialize aggregator.

        Args:
            file_size: Total file size in bytes
        """
        self._file_size = file_size
        self._uploaded_size = 0
        self._cache: Dict[int, int] = {}

    @property
    def uploaded_size(self) -> int:
        """Returns the bytes of chunks that already ended."""
        return self._uploaded_size

    @property
    def in_flight(self) -> Dict[int, int]:
        """Returns a copy of the per-chunk in-flight byte counts."""
        return dict(self._cache)

    def update(self, chunk_id: int, loaded: int) -> UploadProgress:
        """Record the bytes sent so far for an in-flight chunk."""
        self._cache[chunk_id] = loaded
        return self.snapshot()

    def finish(self, chunk_id: int) -> UploadProgress:
        """Fold a chunk's last known progress into the uploaded total."""
        self._uploaded_size += self._cache.pop(chunk_id, 0)
        return self.snapshot()

    def reset(self, floor: int = 0) -> None:
        """Start over from ``floor`` bytes with no chunk in flight."""
        self._uploaded_size = floor
        self._cache.clear()

    def snapshot(self) -> UploadProgress:
        """Returns the current progress, clamped to the file size."""
        loaded = min(self._uploaded_size + sum(self._cache.values()), self._file_size)
        return UploadProgress(loaded=loaded, total=self._file_size)
