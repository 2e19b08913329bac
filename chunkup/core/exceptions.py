"""
Custom exceptions for chunked upload operations.

This module defines exception classes raised (or delivered to completion
callbacks) by the upload engine.
"""
from typing import Optional


class UploadError(Exception):
    """Base exception for all upload-related errors."""

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class HandshakeError(UploadError):
    """Raised when the init exchange fails or returns an unusable session."""
    pass


class ChunkTransportError(UploadError):
    """Exception raised when a single chunk could not be delivered."""

    def __init__(
        self,
        message: str,
        chunk_id: Optional[int] = None,
        status: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            chunk_id: Index of the failed chunk
            status: HTTP status returned by the server (None for network errors)
        """
        self.chunk_id = chunk_id
        self.status = status
        super().__init__(message, error_code=status)


class CancellationError(ChunkTransportError):
    """Raised for a transmission cancelled by ``abort()``."""

    def __init__(self, message: str = "Upload canceled by user", chunk_id: Optional[int] = None) -> None:
        super().__init__(message, chunk_id=chunk_id)


class UploadStateError(UploadError):
    """Exception raised when an operation is invalid in the current state."""
    pass
