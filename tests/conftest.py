"""Pytest fixtures for chunkup tests."""
import asyncio
import json
from typing import Callable, Dict, List, Optional

import pytest

from chunkup.core.transport import TransportResponse


def session_response(file_id='abc', total_chunks=10, status=200) -> TransportResponse:
    """Builds a handshake response."""
    body = json.dumps({'fileId': file_id, 'totalChunks': total_chunks}).encode()
    return TransportResponse(status=status, body=body)


async def settle(rounds: int = 20) -> None:
    """Lets scheduled tasks and callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeTransport:
    """
    Scriptable in-memory transport.

    Handshake requests get ``init_response`` (or raise it when it is an
    exception). Chunk requests report half of the body as progress, then
    either finish straight away or wait for ``release(chunk_id)`` when
    ``hold`` is set.
    """

    def __init__(self, init_response=None, hold: bool = False):
        self.init_response = init_response if init_response is not None else session_response()
        self.hold = hold
        self.statuses: Dict[int, int] = {}
        self.errors: Dict[int, BaseException] = {}
        self.requests: List[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._gates: Dict[int, asyncio.Event] = {}

    @property
    def init_requests(self) -> List[dict]:
        return [r for r in self.requests if r['url'].endswith('/init')]

    @property
    def chunk_requests(self) -> List[dict]:
        return [r for r in self.requests if not r['url'].endswith('/init')]

    @property
    def sent_chunk_ids(self) -> List[int]:
        return [int(r['headers']['X-Chunk-Id']) for r in self.chunk_requests]

    def _gate(self, chunk_id: int) -> asyncio.Event:
        if chunk_id not in self._gates:
            self._gates[chunk_id] = asyncio.Event()
        return self._gates[chunk_id]

    def release(self, chunk_id: int) -> None:
        self._gate(chunk_id).set()

    def release_all(self) -> None:
        for chunk_id in self.sent_chunk_ids:
            self.release(chunk_id)

    async def post(
        self,
        url: str,
        headers: Dict[str, str],
        body: bytes = b'',
        on_progress: Optional[Callable[[int], None]] = None
    ) -> TransportResponse:
        self.requests.append({'url': url, 'headers': dict(headers), 'body': body})

        if url.endswith('/init'):
            if isinstance(self.init_response, BaseException):
                raise self.init_response
            return self.init_response

        chunk_id = int(headers['X-Chunk-Id'])
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if on_progress:
                on_progress(len(body) // 2)
            if self.hold:
                await self._gate(chunk_id).wait()
            else:
                await asyncio.sleep(0)
            if chunk_id in self.errors:
                raise self.errors[chunk_id]
            status = self.statuses.get(chunk_id, 201)
            if status == 201 and on_progress:
                on_progress(len(body))
            return TransportResponse(status=status)
        finally:
            self.in_flight -= 1


@pytest.fixture
def transport():
    """Transport that answers every chunk with 201."""
    return FakeTransport()


@pytest.fixture
def held_transport():
    """Transport that keeps chunks in flight until released."""
    return FakeTransport(hold=True)
