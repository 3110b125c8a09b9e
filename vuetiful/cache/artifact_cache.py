"""Two-tier cache of extracted records (memory + durable store).

An entry is valid for a root only while both of these hold:

1. its version equals the version currently installed in that root, and
2. the SHA-256 of the stylesheet's current bytes equals the stored hash.

A package can be reinstalled at the same version with different contents,
so the version check alone is not enough.
"""

import hashlib
import json
import time
from collections.abc import Sequence

from vuetiful.cache.store import KeyValueStore
from vuetiful.cancellation import CancellationToken, check
from vuetiful.fs import FileSystem, FileSystemError
from vuetiful.models import CacheEntry, Record
from vuetiful.utils.constants import CACHE_KEY_PREFIX


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def root_digest(root: str) -> str:
    """Fixed-length identity of a root path for use inside storage keys."""
    return hashlib.sha256(root.encode("utf-8")).hexdigest()


def cache_key(root: str, version: str) -> str:
    return f"{CACHE_KEY_PREFIX}{root_digest(root)}-{version}"


def root_key_prefix(root: str) -> str:
    return f"{CACHE_KEY_PREFIX}{root_digest(root)}-"


class ArtifactCache:
    """Maps (root, version) to the records extracted from that root's stylesheet.

    The memory layer holds one entry per root. The durable layer holds one
    entry per (root, version) and survives restarts. Durable-layer failures
    are logged and counted but never raised; the memory layer alone keeps a
    session correct.
    """

    def __init__(self, store: KeyValueStore, fs: FileSystem, log_facility):
        self.store = store
        self.fs = fs
        self.log = log_facility.component("Cache")
        self._memory: dict[str, CacheEntry] = {}
        self._stats = {"hits": 0, "misses": 0, "writes": 0, "invalidations": 0, "errors": 0}

    async def get(
        self,
        root: str,
        version: str,
        artifact_path: str | None = None,
        token: CancellationToken | None = None,
    ) -> tuple[Record, ...] | None:
        """Cached records for ``root`` at ``version``, or None on a miss.

        When ``artifact_path`` is given the stored content hash is compared
        with the file's current bytes; a mismatch invalidates every entry of
        the root and reports a miss.
        """
        entry = self._memory.get(root)
        layer = "Memory"

        if entry is None or entry.version != version:
            entry = await self._read_durable(root, version)
            check(token)
            layer = "Disk"

        if entry is None or entry.version != version:
            self.log.debug("Cache miss for {root}", root=root)
            self._stats["misses"] += 1
            return None

        if artifact_path is not None:
            valid = await self._matches(entry, artifact_path)
            check(token)
            if valid is None:
                self._stats["misses"] += 1
                return None
            if not valid:
                self.log.debug("{layer} cache invalid for {root}, hash mismatch", layer=layer, root=root)
                await self.invalidate(root)
                self._stats["misses"] += 1
                return None

        self.log.debug("{layer} cache hit for {root}", layer=layer, root=root)
        self._memory[root] = entry
        self._stats["hits"] += 1
        return entry.records

    async def set(
        self,
        root: str,
        version: str,
        records: Sequence[Record],
        artifact_path: str,
        content: bytes | None = None,
    ) -> CacheEntry:
        """Store records for (root, version), replacing any previous entry.

        Args:
            content: The exact bytes the records were parsed from. Read from
                ``artifact_path`` when omitted.

        Raises:
            FileSystemError: ``content`` was omitted and the artifact could
                not be read for hashing.
        """
        if content is None:
            content = await self.fs.read_bytes(artifact_path)

        entry = CacheEntry(
            version=version,
            timestamp=time.time(),
            records=tuple(records),
            content_hash=content_hash(content),
        )
        self._memory[root] = entry

        key = cache_key(root, version)
        try:
            await self.store.write(key, json.dumps(entry.to_dict()).encode("utf-8"))
            self._stats["writes"] += 1
        except (FileSystemError, OSError) as e:
            self._stats["errors"] += 1
            self.log.warning("Could not persist cache entry {key}: {err}", key=key, err=e)

        self.log.debug(
            "Cached {count} utilities for {root} (v{version})", count=len(entry.records), root=root, version=version
        )
        return entry

    async def is_valid(self, root: str, version: str, artifact_path: str) -> bool:
        """True if a stored entry exists for (root, version) and its hash matches."""
        entry = self._memory.get(root)
        if entry is None or entry.version != version:
            entry = await self._read_durable(root, version)
        if entry is None:
            return False
        return bool(await self._matches(entry, artifact_path))

    async def invalidate(self, root: str) -> None:
        """Drop the memory entry and every durable entry of ``root``, all versions."""
        self._memory.pop(root, None)
        self._stats["invalidations"] += 1
        try:
            keys = await self.store.list_keys(root_key_prefix(root))
            for key in keys:
                await self.store.delete(key)
        except (FileSystemError, OSError) as e:
            self._stats["errors"] += 1
            self.log.warning("Could not remove stored entries for {root}: {err}", root=root, err=e)
            return

        self.log.debug("Invalidated cache for {root}", root=root)

    async def clear(self) -> None:
        """Empty the memory layer and remove every entry in this cache's namespace."""
        self._memory.clear()
        try:
            for key in await self.store.list_keys(CACHE_KEY_PREFIX):
                await self.store.delete(key)
        except (FileSystemError, OSError) as e:
            self._stats["errors"] += 1
            self.log.warning("Could not clear stored cache entries: {err}", err=e)
            return

        self.log.info("Cleared all caches")

    def get_stats(self) -> dict[str, int]:
        """Counters since construction, plus the number of roots held in memory."""
        stats = dict(self._stats)
        stats["memory_entries"] = len(self._memory)
        total = stats["hits"] + stats["misses"]
        stats["hit_rate"] = round(stats["hits"] / total * 100, 1) if total else 0
        return stats

    async def stored_keys(self) -> list[str]:
        """Keys of every durable entry in this cache's namespace."""
        try:
            return await self.store.list_keys(CACHE_KEY_PREFIX)
        except (FileSystemError, OSError) as e:
            self._stats["errors"] += 1
            self.log.warning("Could not list stored cache entries: {err}", err=e)
            return []

    @property
    def error_count(self) -> int:
        return self._stats["errors"]

    async def _read_durable(self, root: str, version: str) -> CacheEntry | None:
        key = cache_key(root, version)
        try:
            raw = await self.store.read(key)
        except (FileSystemError, OSError) as e:
            self._stats["errors"] += 1
            self.log.warning("Could not read cache entry {key}: {err}", key=key, err=e)
            return None

        if raw is None:
            return None

        try:
            return CacheEntry.from_dict(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, ValueError, KeyError, TypeError) as e:
            self._stats["errors"] += 1
            self.log.warning("Discarding corrupt cache entry {key}: {err}", key=key, err=e)
            return None

    async def _matches(self, entry: CacheEntry, artifact_path: str) -> bool | None:
        """Compare the entry's hash with the artifact. None if the file can't be read."""
        try:
            data = await self.fs.read_bytes(artifact_path)
        except FileSystemError as e:
            self.log.warning("Error calculating hash for {path}: {err}", path=artifact_path, err=e)
            return None
        return content_hash(data) == entry.content_hash
