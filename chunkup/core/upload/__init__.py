"""
Upload module for chunked, concurrent file uploads.

This module splits a file into fixed-size chunks and sends several of them
at once, with pluggable transport and chunking strategies.
"""
from .facade import Uploader
from .coordinator import UploadEngine
from .models import (
    ChunkInfo,
    ChunkStates,
    Session,
    UploadOptions,
    UploadProgress,
    UploadResult
)
from .protocols import ChunkingStrategy, TransportProtocol, UploadFile
from .services import LocalFile, BytesFile
from .strategies import FixedSizeChunkingStrategy

__all__ = [
    # Main classes
    'Uploader',
    'UploadEngine',

    # Files
    'LocalFile',
    'BytesFile',

    # Models
    'ChunkInfo',
    'ChunkStates',
    'Session',
    'UploadOptions',
    'UploadProgress',
    'UploadResult',

    # Strategies
    'FixedSizeChunkingStrategy',

    # Protocols
    'ChunkingStrategy',
    'TransportProtocol',
    'UploadFile',
]
