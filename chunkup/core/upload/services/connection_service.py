"""
Connection registry.

Tracks the chunk transmissions currently in flight so they can be cancelled.
"""
from typing import Dict, List
import asyncio

from ...logging import get_logger


class ConnectionRegistry:
    """
    Maps chunk ids to their live transmission tasks.

    An entry exists exactly while that chunk's request is outstanding.
    """

    def __init__(self):
        self._connections: Dict[int, asyncio.Future] = {}
        self._logger = get_logger('chunkup.upload.connections')

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, chunk_id: int) -> bool:
        return chunk_id in self._connections

    @property
    def active_ids(self) -> List[int]:
        return list(self._connections)

    @property
    def tasks(self) -> List[asyncio.Future]:
        return list(self._connections.values())

    def register(self, chunk_id: int, task: asyncio.Future) -> None:
        """
        Register a transmission.

        Raises:
            ValueError: If the chunk already has a live transmission
        """
        if chunk_id in self._connections:
            raise ValueError(f"Chunk {chunk_id} is already in flight")
        self._connections[chunk_id] = task

    def unregister(self, chunk_id: int) -> None:
        """Drop a transmission that reached a terminal outcome."""
        self._connections.pop(chunk_id, None)

    def cancel_all(self) -> int:
        """
        Request cancellation of every registered transmission.

        Does not wait for the transmissions to stop; each one still reports
        its outcome through its own completion path.

        Returns:
            Number of transmissions cancellation was requested for
        """
        cancelled = 0
        for chunk_id, task in list(self._connections.items()):
            if task.cancel():
                cancelled += 1
                self._logger.debug(f"Cancellation requested for chunk {chunk_id}")
        return cancelled
