"""Extraction cache package.

- ``store``: durable key-value storage (one file per key)
- ``artifact_cache``: two-tier record cache validated by version and content hash
"""

from .artifact_cache import ArtifactCache, cache_key, content_hash
from .store import FileStore, KeyValueStore

__all__ = [
    "ArtifactCache",
    "FileStore",
    "KeyValueStore",
    "cache_key",
    "content_hash",
]
