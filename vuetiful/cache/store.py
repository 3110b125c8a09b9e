"""Durable key-value storage backing the extraction cache."""

import os
import uuid
from typing import Protocol
from urllib.parse import quote, unquote

from vuetiful.fs import FileSystem, FsErrorKind, FileSystemError

_SUFFIX = ".json"


class KeyValueStore(Protocol):
    """Storage scoped to one workspace.

    Implementations may raise on I/O failure; the cache layer above decides
    how failures degrade.
    """

    async def read(self, key: str) -> bytes | None:
        """Stored bytes, or None when the key is absent."""
        ...

    async def write(self, key: str, data: bytes) -> None:
        ...

    async def delete(self, key: str) -> None:
        """Remove a key. Deleting an absent key is not an error."""
        ...

    async def list_keys(self, prefix: str = "") -> list[str]:
        ...


class FileStore:
    """One file per key inside a directory.

    Keys are percent-encoded into file names so any key text maps to a
    single flat file. Writes go to a temporary sibling first and are then
    renamed into place, so a reader never sees a half-written entry.
    """

    def __init__(self, directory: str, fs: FileSystem | None = None):
        self.directory = directory
        self.fs = fs or FileSystem()
        self._ready = False

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, quote(key, safe="") + _SUFFIX)

    async def _ensure_dir(self) -> None:
        if not self._ready:
            await self.fs.make_dirs(self.directory)
            self._ready = True

    async def read(self, key: str) -> bytes | None:
        try:
            return await self.fs.read_bytes(self._path(key))
        except FileSystemError as e:
            if e.kind is FsErrorKind.NOT_FOUND:
                return None
            raise

    async def write(self, key: str, data: bytes) -> None:
        await self._ensure_dir()
        target = self._path(key)
        tmp = f"{target}.{uuid.uuid4().hex}.tmp"
        await self.fs.write_bytes(tmp, data)
        try:
            await self.fs.replace(tmp, target)
        except FileSystemError:
            try:
                await self.fs.remove(tmp)
            except FileSystemError:
                pass
            raise

    async def delete(self, key: str) -> None:
        try:
            await self.fs.remove(self._path(key))
        except FileSystemError as e:
            if e.kind is not FsErrorKind.NOT_FOUND:
                raise

    async def list_keys(self, prefix: str = "") -> list[str]:
        try:
            names = await self.fs.list_dir(self.directory)
        except FileSystemError as e:
            if e.kind is FsErrorKind.NOT_FOUND:
                return []
            raise

        keys = []
        for name in names:
            if not name.endswith(_SUFFIX):
                continue
            key = unquote(name[: -len(_SUFFIX)])
            if key.startswith(prefix):
                keys.append(key)
        return keys
