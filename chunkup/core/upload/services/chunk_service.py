"""
Chunk queue and chunk upload services.

Holds the pending chunk ids and sends single chunks to the server.
"""
from typing import Callable, List, Optional
import time
import asyncio

from ...exceptions import ChunkTransportError, CancellationError
from ...logging import get_logger
from ..models import ChunkInfo, Session
from ..protocols import TransportProtocol, UploadFile


class ChunkQueue:
    """
    Ids of the chunks not yet dispatched.

    Built with ids ascending and drained from the tail, so chunks are
    dispatched in descending order. Requeued ids go back to the tail and
    are dispatched next.
    """

    def __init__(self, quantity: int):
        """
        Initialize queue.

        Args:
            quantity: Number of chunks; the queue holds 0 .. quantity-1
        """
        if quantity < 0:
            raise ValueError("Chunk quantity cannot be negative")
        self._ids: List[int] = list(range(quantity))

    def __len__(self) -> int:
        return len(self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __contains__(self, chunk_id: int) -> bool:
        return chunk_id in self._ids

    @property
    def pending(self) -> List[int]:
        """Returns pending ids in dispatch order."""
        return list(reversed(self._ids))

    def pop(self) -> int:
        """
        Take the next chunk id to dispatch.

        Raises:
            IndexError: If the queue is empty
        """
        return self._ids.pop()

    def push(self, chunk_id: int) -> None:
        """
        Return a chunk id to the queue.

        Raises:
            ValueError: If the id is already pending
        """
        if chunk_id in self._ids:
            raise ValueError(f"Chunk {chunk_id} is already pending")
        self._ids.append(chunk_id)


class ChunkUploader:
    """
    Uploads single chunks of one session.

    Responsibilities:
    - Read the chunk's bytes from the file
    - Build the chunk request headers
    - Map the response status to success or ChunkTransportError
    """

    SUCCESS_STATUS = 201

    def __init__(
        self,
        transport: TransportProtocol,
        url: str,
        file: UploadFile,
        session: Session
    ):
        """
        Initialize chunk uploader.

        Args:
            transport: HTTP transport
            url: Upload endpoint
            file: File the chunks are read from
            session: Session returned by the handshake
        """
        self._transport = transport
        self._url = url
        self._file = file
        self._session = session
        self._logger = get_logger('chunkup.upload.chunk')

    def build_headers(self, chunk: ChunkInfo, number: int) -> dict:
        """
        Build the headers of a chunk request.

        Args:
            chunk: Chunk being sent
            number: 1-based sequence number among chunks sent so far
        """
        return {
            'Content-Type': 'application/octet-stream',
            'X-Chunk-Number': str(number),
            'X-Content-Id': self._session.file_id,
            'X-Chunk-Id': str(chunk.index),
            'X-Chunks-Quantity': str(self._session.total_chunks),
            'X-Content-Name': self._file.name,
        }

    async def upload_chunk(
        self,
        chunk: ChunkInfo,
        number: int,
        on_progress: Optional[Callable[[int], None]] = None
    ) -> None:
        """
        Upload a single chunk.

        Args:
            chunk: Chunk to send
            number: Value of the X-Chunk-Number header
            on_progress: Called with cumulative bytes sent for this chunk

        Raises:
            ChunkTransportError: If the server does not answer 201 or the
                request fails
            CancellationError: If the upload task is cancelled
        """
        chunk_size_kb = chunk.size / 1024
        upload_start = time.time()
        self._logger.debug(f"Uploading chunk {chunk.index} at position {chunk.start} ({chunk_size_kb:.1f} KB)")

        try:
            data = await self._file.read(chunk.start, chunk.end)
            response = await self._transport.post(
                self._url,
                headers=self.build_headers(chunk, number),
                body=data,
                on_progress=on_progress
            )
        except asyncio.CancelledError:
            self._logger.debug(f"Chunk {chunk.index} cancelled")
            raise CancellationError(chunk_id=chunk.index)
        except Exception as e:
            upload_time = time.time() - upload_start
            self._logger.error(f"Chunk {chunk.index} upload failed after {upload_time:.2f}s: {e}")
            raise ChunkTransportError(
                f"Failed chunk upload: chunk {chunk.index}: {e}",
                chunk_id=chunk.index
            ) from e

        upload_time = time.time() - upload_start
        if response.status != self.SUCCESS_STATUS:
            self._logger.error(f"Chunk {chunk.index} rejected with HTTP {response.status} after {upload_time:.2f}s")
            raise ChunkTransportError(
                f"Failed chunk upload: chunk {chunk.index} returned HTTP {response.status}",
                chunk_id=chunk.index,
                status=response.status
            )

        speed_kbps = (chunk_size_kb / upload_time) if upload_time > 0 else 0
        self._logger.debug(f"Chunk {chunk.index} uploaded successfully in {upload_time:.2f}s ({speed_kbps:.1f} KB/s)")
