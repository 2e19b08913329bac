"""
aiohttp transport.

Performs the HTTP requests of an upload and reports body progress.
"""
from typing import AsyncIterator, Callable, Dict, Optional
import time
import asyncio
import aiohttp

from .config import TransportConfig
from .models import TransportResponse
from ..logging import get_logger


class AiohttpTransport:
    """
    Sends requests through a shared aiohttp session.

    Reuses one HTTP session for every request (critical for performance);
    each request still gets its own connection from the pool.

    Responsibilities:
    - Send request bodies in blocks, reporting progress per block
    - Return status and body of the response
    - Own the session lifecycle when none is injected
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize transport.

        Args:
            config: Transport configuration
            session: Optional shared session (closed by its owner, not here)
        """
        self._config = config or TransportConfig.default()
        self._session = session
        self._owns_session = False
        self._logger = get_logger('chunkup.transport')

    @property
    def config(self) -> TransportConfig:
        """Returns the transport configuration."""
        return self._config

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(**self._config.get_connector_kwargs()),
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close session if we own it."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def __aenter__(self) -> 'AiohttpTransport':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _stream_body(
        self,
        body: bytes,
        on_progress: Optional[Callable[[int], None]]
    ) -> AsyncIterator[bytes]:
        """Yield the body in blocks, reporting the cumulative bytes sent."""
        block_size = self._config.block_size
        view = memoryview(body)
        sent = 0
        while sent < len(body):
            block = bytes(view[sent:sent + block_size])
            yield block
            sent += len(block)
            if on_progress:
                on_progress(sent)

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
            Response status, body and headers

        Raises:
            aiohttp.ClientError: If a network error occurs
            asyncio.TimeoutError: If a configured timeout expires
        """
        session = await self._get_session()
        request_headers = dict(headers)
        data = None
        if body:
            request_headers['Content-Length'] = str(len(body))
            data = self._stream_body(body, on_progress)

        started = time.time()
        try:
            async with session.post(
                url,
                data=data,
                headers=request_headers,
                proxy=self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None
            ) as response:
                payload = await response.read()
                elapsed = time.time() - started
                self._logger.debug(f"POST {url} -> {response.status} in {elapsed:.2f}s")
                return TransportResponse(
                    status=response.status,
                    body=payload,
                    headers=dict(response.headers)
                )
        except asyncio.TimeoutError:
            elapsed = time.time() - started
            self._logger.error(f"POST {url} timed out after {elapsed:.2f}s")
            raise
        except aiohttp.ClientError as e:
            elapsed = time.time() - started
            self._logger.error(f"POST {url} failed after {elapsed:.2f}s: {e}")
            raise
