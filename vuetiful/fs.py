"""Async filesystem facility.

All lookups used by discovery, parsing and the durable cache go through
``FileSystem``. Failures are raised as ``FileSystemError`` carrying a closed
``FsErrorKind`` so callers branch on the kind instead of sniffing errno
values or exception shapes.
"""

import errno
from enum import Enum

import aiofiles
import aiofiles.os


class FsErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


class FileSystemError(Exception):
    """A filesystem call failed.

    Attributes:
        kind: Which variant of failure this is.
        path: Path the call was made on.
    """

    kind = FsErrorKind.OTHER

    def __init__(self, path: str, message: str, kind: FsErrorKind | None = None):
        super().__init__(f"{message}: {path}")
        self.path = path
        if kind is not None:
            self.kind = kind


class PathNotFound(FileSystemError):
    kind = FsErrorKind.NOT_FOUND


class PathPermissionDenied(FileSystemError):
    kind = FsErrorKind.PERMISSION_DENIED


_NOT_FOUND_ERRNOS = {errno.ENOENT, errno.ENOTDIR}
_PERMISSION_ERRNOS = {errno.EACCES, errno.EPERM}


def translate_os_error(path: str, exc: OSError) -> FileSystemError:
    """Map an ``OSError`` onto the closed error variants."""
    message = exc.strerror or type(exc).__name__
    if isinstance(exc, FileNotFoundError) or exc.errno in _NOT_FOUND_ERRNOS:
        return PathNotFound(path, message)
    if isinstance(exc, PermissionError) or exc.errno in _PERMISSION_ERRNOS:
        return PathPermissionDenied(path, message)
    return FileSystemError(path, message)


class FileSystem:
    """Async wrapper around the local disk."""

    async def exists(self, path: str) -> bool:
        """Return True if ``path`` can be stat'ed. Never raises."""
        try:
            await aiofiles.os.stat(path)
        except (OSError, ValueError):
            return False
        return True

    async def is_dir(self, path: str) -> bool:
        try:
            return await aiofiles.os.path.isdir(path)
        except (OSError, ValueError):
            return False

    async def stat_size(self, path: str) -> int:
        try:
            result = await aiofiles.os.stat(path)
        except OSError as e:
            raise translate_os_error(path, e) from e
        return result.st_size

    async def read_bytes(self, path: str) -> bytes:
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise translate_os_error(path, e) from e

    async def read_text(self, path: str, encoding: str = "utf-8") -> str:
        data = await self.read_bytes(path)
        return data.decode(encoding)

    async def list_dir(self, path: str) -> list[str]:
        """Entry names of ``path`` sorted for deterministic probing order."""
        try:
            return sorted(await aiofiles.os.listdir(path))
        except OSError as e:
            raise translate_os_error(path, e) from e

    async def write_bytes(self, path: str, data: bytes) -> None:
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise translate_os_error(path, e) from e

    async def replace(self, src: str, dst: str) -> None:
        try:
            await aiofiles.os.replace(src, dst)
        except OSError as e:
            raise translate_os_error(dst, e) from e

    async def remove(self, path: str) -> None:
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            raise translate_os_error(path, e) from e

    async def make_dirs(self, path: str) -> None:
        try:
            await aiofiles.os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise translate_os_error(path, e) from e
