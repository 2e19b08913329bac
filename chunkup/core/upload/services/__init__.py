"""Upload services module."""
from .file_service import FileValidator, LocalFile, BytesFile
from .chunk_service import ChunkQueue, ChunkUploader
from .connection_service import ConnectionRegistry
from .handshake_service import SessionHandshake
from .progress_service import ProgressAggregator

__all__ = [
    'FileValidator',
    'LocalFile',
    'BytesFile',
    'ChunkQueue',
    'ChunkUploader',
    'ConnectionRegistry',
    'SessionHandshake',
    'ProgressAggregator',
]
