"""
Upload engine.

Orchestrates one chunked upload: session handshake, concurrency-limited
dispatch of chunks, progress aggregation and abort.
Follows Dependency Inversion Principle - depends on abstractions, not concretions.
"""
import asyncio
import time
from functools import partial
from typing import Callable, Optional, Set

from ..events import EventEmitter
from ..exceptions import CancellationError, ChunkTransportError, UploadStateError
from ..logging import get_logger
from .models import ChunkStates, Session, UploadOptions, UploadProgress, UploadResult
from .protocols import ChunkingStrategy, LoggerProtocol, TransportProtocol, UploadFile
from .services import (
    ChunkQueue,
    ChunkUploader,
    ConnectionRegistry,
    ProgressAggregator,
    SessionHandshake
)
from .strategies import FixedSizeChunkingStrategy

PROGRESS_EVENT = 'progress'
END_EVENT = 'end'


class UploadEngine:
    """
    Runs a single upload attempt of a single file.

    Every chunk id is in exactly one place at a time: the pending queue,
    the connection registry (in flight) or the done set. All state is
    mutated from the event loop thread only, so no locks are needed.

    Completion fires exactly once per attempt, either through the ``end``
    event (``None`` or the first error) or through the :attr:`done` future.
    Any chunk failure ends the attempt; chunks already in flight are left
    to finish on their own and never dispatch new chunks.
    """

    def __init__(
        self,
        transport: TransportProtocol,
        options: UploadOptions,
        file: UploadFile,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        logger: Optional[LoggerProtocol] = None
    ):
        """
        Initialize upload engine.

        Args:
            transport: HTTP transport
            options: Upload options (url, chunk size, concurrency)
            file: File to upload
            chunking_strategy: Strategy for chunking files
            logger: Logger instance
        """
        if not options.url:
            raise UploadStateError("Can't start uploading: upload url is not set")

        self._transport = transport
        self._options = options
        self._file = file
        self._chunking = chunking_strategy or FixedSizeChunkingStrategy(options.chunk_size)
        self._logger = logger or get_logger('chunkup.upload.engine')
        self._events = EventEmitter()

        self._chunks_quantity = self._chunking.count(file.size)
        self._queue = ChunkQueue(self._chunks_quantity)
        self._connections = ConnectionRegistry()
        self._progress = ProgressAggregator(file.size)
        self._done_ids: Set[int] = set()

        self._session: Optional[Session] = None
        self._uploader: Optional[ChunkUploader] = None
        self._handshake_task: Optional[asyncio.Task] = None
        self._done: Optional[asyncio.Future] = None
        self._started_at: Optional[float] = None
        self._finished = False
        self._aborted = False
        self._error: Optional[BaseException] = None

    # -- subscriptions -----------------------------------------------------

    def on_progress(self, callback: Callable[[UploadProgress], None]) -> 'UploadEngine':
        """Subscribe to progress updates. Any number of subscribers."""
        self._events.on(PROGRESS_EVENT, callback)
        return self

    def on_end(self, callback: Callable[[Optional[BaseException]], None]) -> 'UploadEngine':
        """Subscribe to completion; called once with None or the error."""
        self._events.on(END_EVENT, callback)
        return self

    # -- state ---------------------------------------------------------------

    @property
    def file(self) -> UploadFile:
        return self._file

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def chunks_quantity(self) -> int:
        return self._chunks_quantity

    @property
    def concurrency(self) -> int:
        return self._options.concurrency

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def error(self) -> Optional[BaseException]:
        """Returns the error the last attempt ended with."""
        return self._error

    @property
    def done(self) -> Optional[asyncio.Future]:
        """Future of the current attempt; None before start."""
        return self._done

    @property
    def progress(self) -> UploadProgress:
        return self._progress.snapshot()

    def chunk_states(self) -> ChunkStates:
        """Returns which chunk ids are pending, in flight and done."""
        return ChunkStates(
            pending=frozenset(self._queue.pending),
            in_flight=frozenset(self._connections.active_ids),
            done=frozenset(self._done_ids)
        )

    # -- lifecycle -------------------------------------------------------------

    def start(self) -> asyncio.Future:
        """
        Start the upload. Must be called from a running event loop.

        Returns:
            Future resolving to an UploadResult, or raising the first error

        Raises:
            UploadStateError: If the engine was already started or aborted
        """
        if self._done is not None:
            raise UploadStateError("Upload already started")
        if self._aborted:
            raise UploadStateError("Upload was aborted")

        self._done = self._new_future()
        self._started_at = time.time()

        size_mb = self._file.size / (1024 * 1024)
        self._logger.info(
            f"Starting upload: {self._file.name} ({size_mb:.2f} MB, "
            f"{self._chunks_quantity} chunks, max {self.concurrency} parallel uploads)"
        )
        self._handshake_task = asyncio.ensure_future(self._open_session())
        self._handshake_task.add_done_callback(self._on_handshake_done)
        return self._done

    def abort(self) -> None:
        """
        Cancel every in-flight transmission and stop dispatching.

        Does not wait for transmissions to stop: each cancelled chunk ends
        through the normal failure path with a CancellationError.
        """
        if self._aborted:
            return
        self._aborted = True

        if self._handshake_task is not None and not self._handshake_task.done():
            self._handshake_task.cancel()

        cancelled = self._connections.cancel_all()
        self._logger.info(f"Upload aborted: {cancelled} chunk transmissions cancelled")

    def resume(self) -> asyncio.Future:
        """
        Start a new attempt after a chunk failure.

        Requeued chunks are dispatched again on the same session; chunks
        already done are not resent.

        Returns:
            Future of the new attempt

        Raises:
            UploadStateError: If the last attempt did not end with a chunk
                failure, the upload was aborted, or chunks are still in flight
        """
        if self._aborted:
            raise UploadStateError("Can't resume an aborted upload")
        if not self._finished or self._session is None:
            raise UploadStateError("Nothing to resume: upload has not failed")
        if not isinstance(self._error, ChunkTransportError):
            raise UploadStateError(f"Can't resume after {type(self._error).__name__}")
        if len(self._connections):
            raise UploadStateError("Can't resume while chunks are still in flight")

        floor = sum(
            self._chunking.chunk(chunk_id, self._file.size).size
            for chunk_id in self._done_ids
        )
        self._progress.reset(floor)
        self._finished = False
        self._error = None
        self._done = self._new_future()
        self._started_at = time.time()

        self._logger.info(f"Resuming upload {self._session.file_id}: {len(self._queue)} chunks pending")
        self._send_next()
        return self._done

    async def wait_idle(self) -> None:
        """Wait until no chunk transmission is in flight."""
        while len(self._connections):
            pending = [task for task in self._connections.tasks if not task.done()]
            if pending:
                await asyncio.wait(pending)
            else:
                # Done callbacks have not run yet
                await asyncio.sleep(0)

    # -- handshake -------------------------------------------------------------

    async def _open_session(self) -> None:
        handshake = SessionHandshake(self._transport, self._options.init_url)
        try:
            session = await handshake.open(self._chunks_quantity)
        except Exception as e:
            self._complete(e)
            return

        self._session = session
        self._uploader = ChunkUploader(self._transport, self._options.url, self._file, session)
        self._logger.info(f"Session {session.file_id} opened ({session.total_chunks} chunks)")
        self._send_next()

    def _on_handshake_done(self, task: asyncio.Future) -> None:
        self._handshake_task = None
        if task.cancelled():
            self._complete(CancellationError("Upload canceled by user"))
        elif task.exception() is not None:
            self._complete(task.exception())

    # -- dispatch loop ---------------------------------------------------------

    def _send_next(self) -> None:
        """Fill free capacity with pending chunks."""
        while self._dispatch_one():
            pass

    def _dispatch_one(self) -> bool:
        """
        Dispatch at most one chunk.

        Returns:
            True when a chunk was dispatched and more capacity may be free
        """
        if self._finished or self._aborted:
            return False

        active = len(self._connections)
        if active >= self.concurrency:
            return False

        if not self._queue:
            if not active:
                self._complete(None)
            return False

        chunk_id = self._queue.pop()
        chunk = self._chunking.chunk(chunk_id, self._file.size)
        number = self._session.total_chunks - len(self._queue)

        task = asyncio.ensure_future(
            self._uploader.upload_chunk(
                chunk,
                number,
                on_progress=partial(self._handle_progress, chunk_id)
            )
        )
        self._connections.register(chunk_id, task)
        task.add_done_callback(partial(self._on_chunk_done, chunk_id))
        self._logger.debug(f"Dispatched chunk {chunk_id} as number {number} ({active + 1} in flight)")
        return True

    def _handle_progress(self, chunk_id: int, loaded: int) -> None:
        if chunk_id not in self._connections:
            return
        self._emit_progress(self._progress.update(chunk_id, loaded))

    def _on_chunk_done(self, chunk_id: int, task: asyncio.Future) -> None:
        self._connections.unregister(chunk_id)

        if task.cancelled():
            # Cancelled before its first step; the coroutine never ran
            error = CancellationError(chunk_id=chunk_id)
        else:
            error = task.exception()

        if error is None:
            self._done_ids.add(chunk_id)
        else:
            self._queue.push(chunk_id)

        self._emit_progress(self._progress.finish(chunk_id))

        if error is None:
            self._send_next()
            return

        if self._aborted:
            self._logger.debug(f"Chunk {chunk_id} stopped by abort")
        else:
            self._logger.error(f"Chunk {chunk_id} failed: {error}")
        self._complete(error)

    # -- completion ------------------------------------------------------------

    def _complete(self, error: Optional[BaseException]) -> None:
        if self._finished:
            self._logger.debug(f"Upload already finished, ignoring outcome: {error}")
            return
        self._finished = True
        self._error = error

        elapsed = time.time() - self._started_at if self._started_at else 0.0
        if error is None:
            self._logger.info(f"Upload completed in {elapsed:.2f}s: {self._file.name}")
            self._done.set_result(UploadResult(
                file_id=self._session.file_id,
                file_name=self._file.name,
                file_size=self._file.size,
                total_chunks=self._session.total_chunks,
                elapsed=elapsed
            ))
        else:
            self._logger.warning(f"Upload ended after {elapsed:.2f}s: {error}")
            self._done.set_exception(error)

        self._notify(END_EVENT, error)

    def _emit_progress(self, progress: UploadProgress) -> None:
        self._notify(PROGRESS_EVENT, progress)

    def _notify(self, event: str, *args) -> None:
        """Call every subscriber of an event; subscriber errors are logged, never raised."""
        for callback in self._events.listeners(event):
            try:
                callback(*args)
            except Exception:
                self._logger.exception(f"Error in {event} callback {callback!r}")

    @staticmethod
    def _new_future() -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        # Errors also reach end subscribers, so an unawaited future is fine
        future.add_done_callback(lambda f: f.cancelled() or f.exception())
        return future
