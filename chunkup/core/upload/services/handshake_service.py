"""
Session handshake service.

Registers the upload with the server before any chunk is sent.
"""
import time

from ...exceptions import HandshakeError
from ...logging import get_logger
from ..models import Session
from ..protocols import TransportProtocol


class SessionHandshake:
    """
    Performs the one-time init exchange of an upload.

    Sends the locally computed chunk count and obtains the session id and
    the authoritative chunk count from the server.
    """

    SUCCESS_STATUS = 200

    def __init__(self, transport: TransportProtocol, init_url: str):
        """
        Initialize handshake.

        Args:
            transport: HTTP transport
            init_url: Handshake endpoint (``{url}/init``)
        """
        self._transport = transport
        self._init_url = init_url
        self._logger = get_logger('chunkup.upload.handshake')

    async def open(self, chunks_quantity: int) -> Session:
        """
        Open an upload session.

        Args:
            chunks_quantity: Number of chunks computed by the client

        Returns:
            Session with file id and total chunk count

        Raises:
            HandshakeError: If the request fails or the response is unusable
        """
        started = time.time()
        self._logger.debug(f"Opening session at {self._init_url} ({chunks_quantity} chunks)")

        try:
            response = await self._transport.post(
                self._init_url,
                headers={'X-Chunks-Quantity': str(chunks_quantity)}
            )
        except Exception as e:
            self._logger.error(f"Handshake request failed: {e}")
            raise HandshakeError(f"Handshake request failed: {e}") from e

        if response.status != self.SUCCESS_STATUS:
            raise HandshakeError(
                f"Handshake rejected with HTTP {response.status}",
                error_code=response.status
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise HandshakeError("Handshake response is not valid JSON") from e

        session = self.parse_session(payload)
        elapsed = time.time() - started
        self._logger.debug(f"Session {session.file_id} opened in {elapsed:.2f}s ({session.total_chunks} chunks)")
        return session

    @staticmethod
    def parse_session(payload) -> Session:
        """
        Build a session from the handshake response body.

        Raises:
            HandshakeError: If fileId is missing/empty or totalChunks is not
                a positive integer
        """
        if not isinstance(payload, dict):
            raise HandshakeError("Can't create file id")

        file_id = payload.get('fileId')
        total_chunks = payload.get('totalChunks')

        if not file_id or not isinstance(file_id, str):
            raise HandshakeError("Can't create file id")
        if isinstance(total_chunks, bool) or not isinstance(total_chunks, int) or total_chunks <= 0:
            raise HandshakeError("Can't create file id")

        return Session(file_id=file_id, total_chunks=total_chunks)
