"""
chunkup - Async chunked, concurrent file uploads.

Usage:
    >>> from chunkup import Uploader
    >>>
    >>> async with Uploader().options(url="https://example.com/upload") as uploader:
    ...     result = await uploader.upload("backup.tar")
    ...     print(result.file_id)
"""
import logging

from .core.upload import (
    Uploader,
    UploadEngine,
    LocalFile,
    BytesFile,
    ChunkInfo,
    ChunkStates,
    Session,
    UploadOptions,
    UploadProgress,
    UploadResult,
    FixedSizeChunkingStrategy,
    ChunkingStrategy,
    TransportProtocol,
    UploadFile
)

# Transport
from .core.transport import (
    AiohttpTransport,
    TransportConfig,
    TimeoutConfig,
    SSLConfig,
    ProxyConfig,
    TransportResponse
)

# Errors
from .core.exceptions import (
    UploadError,
    HandshakeError,
    ChunkTransportError,
    CancellationError,
    UploadStateError
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for chunkup modules.

    This ensures that all chunkup loggers are properly configured
    to show log messages at the specified level.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'chunkup',
        'chunkup.transport',
        'chunkup.upload',
        'chunkup.upload.engine',
        'chunkup.upload.chunk',
        'chunkup.upload.connections',
        'chunkup.upload.file',
        'chunkup.upload.handshake',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        # Ensure propagation is enabled
        logger.propagate = True


__all__ = [
    'Uploader',
    'UploadEngine',
    'LocalFile',
    'BytesFile',
    'ChunkInfo',
    'ChunkStates',
    'Session',
    'UploadOptions',
    'UploadProgress',
    'UploadResult',
    'FixedSizeChunkingStrategy',
    'ChunkingStrategy',
    'TransportProtocol',
    'UploadFile',
    'AiohttpTransport',
    'TransportConfig',
    'TimeoutConfig',
    'SSLConfig',
    'ProxyConfig',
    'TransportResponse',
    'UploadError',
    'HandshakeError',
    'ChunkTransportError',
    'CancellationError',
    'UploadStateError',
    'setup_logging',
]
