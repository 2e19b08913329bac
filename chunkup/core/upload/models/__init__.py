"""Upload models."""
from .upload_models import (
    ChunkInfo,
    ChunkStates,
    Session,
    UploadOptions,
    UploadProgress,
    UploadResult,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONCURRENCY
)

__all__ = [
    'ChunkInfo',
    'ChunkStates',
    'Session',
    'UploadOptions',
    'UploadProgress',
    'UploadResult',
    'DEFAULT_CHUNK_SIZE',
    'DEFAULT_CONCURRENCY'
]
