"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Tuple, Optional, Union
import aiofiles

from ...logging import get_logger


class FileValidator:
    """
    Validates files before upload.

    Responsibilities:
    - Check file existence
    - Verify file is not a directory
    - Get file size
    """

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (validated Path, file size in bytes)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")

        file_size = path.stat().st_size

        return path, file_size


class LocalFile:
    """
    File on disk, read range by range.

    Uses aiofiles for non-blocking I/O. Each read opens its own handle, so
    concurrent chunk reads never share a file position.
    """

    def __init__(self, file_path: Union[str, Path], name: Optional[str] = None):
        """
        Initialize local file.

        Args:
            file_path: Path to the file
            name: Name sent to the server (defaults to the file's base name)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        self._path, self._size = FileValidator().validate(file_path)
        self._name = name or self._path.name
        self._logger = get_logger('chunkup.upload.file')

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return self._size

    async def read(self, start: int, end: int) -> bytes:
        """
        Read a byte range from the file.

        Args:
            start: Start position in bytes
            end: End position in bytes (exclusive)

        Returns:
            Chunk data

        Raises:
            OSError: If the file cannot be read
        """
        async with aiofiles.open(self._path, 'rb') as f:
            await f.seek(start)
            data = await f.read(end - start)
        self._logger.debug(f"Read chunk: {start}-{end} ({len(data)} bytes)")
        return data

    def __repr__(self) -> str:
        return f"LocalFile({str(self._path)!r}, size={self._size})"


class BytesFile:
    """In-memory file."""

    def __init__(self, name: str, data: bytes):
        self._name = name
        self._data = bytes(data)

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return len(self._data)

    async def read(self, start: int, end: int) -> bytes:
        return self._data[start:end]

    def __repr__(self) -> str:
        return f"BytesFile({self._name!r}, size={len(self._data)})"
