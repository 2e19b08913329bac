"""
Upload facade.

Provides a simplified, chainable interface for chunked uploads.
Follows Facade Pattern - hides complexity of the upload subsystem.
"""
from pathlib import Path
from typing import Callable, List, Optional, Union
import asyncio
import logging

from ..exceptions import UploadStateError
from ..transport import AiohttpTransport
from .coordinator import UploadEngine
from .models import UploadOptions, UploadProgress, UploadResult, DEFAULT_CHUNK_SIZE, DEFAULT_CONCURRENCY
from .protocols import ChunkingStrategy, TransportProtocol, UploadFile
from .services import LocalFile


def _noop(*args, **kwargs) -> None:
    pass


class Uploader:
    """
    Simplified interface for chunked uploads.

    Each instance drives one upload; create a new one per file.

    Example:
        >>> from chunkup import Uploader
        >>> uploader = (Uploader()
        ...     .options(url="https://example.com/upload", chunk_size=1024 * 1024)
        ...     .send("video.mp4")
        ...     .on_progress(lambda p: print(f"{p.percentage:.1f}%")))
        >>> result = await uploader.start()
        >>> print(f"Uploaded: {result.file_id}")
    """

    def __init__(
        self,
        transport: Optional[TransportProtocol] = None,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        log_level: Optional[int] = None
    ):
        """
        Initialize uploader.

        Args:
            transport: HTTP transport (an AiohttpTransport is created and
                closed by the uploader when omitted)
            chunking_strategy: Optional custom chunking strategy
            concurrency: Maximum simultaneous chunk uploads
            log_level: Optional level for the 'chunkup.upload' logger
        """
        self._logger = logging.getLogger('chunkup.upload')
        if log_level is not None:
            self._logger.setLevel(log_level)

        self._transport = transport
        self._owns_transport = transport is None
        self._chunking = chunking_strategy
        self._options = UploadOptions(concurrency=concurrency)
        self._file: Optional[UploadFile] = None
        self._progress_callbacks: List[Callable[[UploadProgress], None]] = []
        self._end_callbacks: List[Callable[[Optional[BaseException]], None]] = []
        self._engine: Optional[UploadEngine] = None

    @property
    def engine(self) -> Optional[UploadEngine]:
        """Returns the engine of the started upload."""
        return self._engine

    @property
    def file(self) -> Optional[UploadFile]:
        return self._file

    def options(
        self,
        url: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> 'Uploader':
        """
        Set upload options.

        Args:
            url: Upload endpoint base
            chunk_size: Chunk size in bytes

        Raises:
            ValueError: If chunk size is not positive
        """
        self._options = UploadOptions(
            url=url,
            chunk_size=chunk_size,
            concurrency=self._options.concurrency
        )
        return self

    def send(self, file: Union[UploadFile, str, Path, None]) -> 'Uploader':
        """
        Attach the file to upload. ``None`` is ignored.

        Args:
            file: UploadFile, or a path to a file on disk
        """
        if file is None:
            return self
        if isinstance(file, (str, Path)):
            file = LocalFile(file)
        self._file = file
        return self

    def on_progress(self, callback: Callable[[UploadProgress], None]) -> 'Uploader':
        """Register a progress callback."""
        self._progress_callbacks.append(callback if callable(callback) else _noop)
        if self._engine:
            self._engine.on_progress(self._progress_callbacks[-1])
        return self

    def on_end(self, callback: Callable[[Optional[BaseException]], None]) -> 'Uploader':
        """Register a completion callback without starting the upload."""
        self._end_callbacks.append(callback if callable(callback) else _noop)
        if self._engine:
            self._engine.on_end(self._end_callbacks[-1])
        return self

    def end(self, callback: Callable[[Optional[BaseException]], None]) -> 'Uploader':
        """
        Register a completion callback and start the upload.

        Must be called from a running event loop.
        """
        self.on_end(callback)
        self.start()
        return self

    def start(self) -> asyncio.Future:
        """
        Start the upload.

        Returns:
            Future resolving to an UploadResult

        Raises:
            UploadStateError: If no file is attached, no url is set, or the
                upload was already started
        """
        if self._file is None:
            raise UploadStateError("Can't start uploading: file have not chosen")
        if self._engine is not None:
            raise UploadStateError("Upload already started")

        if self._transport is None:
            self._transport = AiohttpTransport()

        engine = UploadEngine(
            transport=self._transport,
            options=self._options,
            file=self._file,
            chunking_strategy=self._chunking,
            logger=self._logger
        )
        for callback in self._progress_callbacks:
            engine.on_progress(callback)
        for callback in self._end_callbacks:
            engine.on_end(callback)
        self._engine = engine
        return engine.start()

    def abort(self) -> None:
        """Cancel every in-flight chunk; completion reports a CancellationError."""
        if self._engine:
            self._engine.abort()

    async def resume(self) -> UploadResult:
        """
        Continue a failed upload with the chunks that were not delivered.

        Waits for chunks still in flight from the failed attempt first.

        Raises:
            UploadStateError: If there is nothing to resume
        """
        if self._engine is None:
            raise UploadStateError("Upload has not been started")
        await self._engine.wait_idle()
        return await self._engine.resume()

    async def wait(self) -> UploadResult:
        """
        Wait for the current attempt to finish.

        Raises:
            UploadStateError: If the upload has not been started
            UploadError: The error the attempt ended with
        """
        if self._engine is None or self._engine.done is None:
            raise UploadStateError("Upload has not been started")
        return await self._engine.done

    async def upload(
        self,
        file: Union[UploadFile, str, Path],
        progress_callback: Optional[Callable[[UploadProgress], None]] = None
    ) -> UploadResult:
        """
        Upload a file and wait for the result.

        Args:
            file: UploadFile or path to upload
            progress_callback: Optional progress callback

        Returns:
            UploadResult with the server file id

        Example:
            >>> async with Uploader().options(url=url) as uploader:
            ...     result = await uploader.upload("backup.tar")
        """
        self.send(file)
        if progress_callback:
            self.on_progress(progress_callback)
        self.start()
        return await self.wait()

    async def close(self) -> None:
        """Close the transport if the uploader created it."""
        if self._owns_transport and self._transport is not None:
            await self._transport.close()

    async def __aenter__(self) -> 'Uploader':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
