"""Tests for the two-tier extraction cache."""

import asyncio

import pytest

from vuetiful.cache import ArtifactCache, FileStore, cache_key, content_hash
from vuetiful.cache.artifact_cache import root_key_prefix
from vuetiful.fs import FileSystemError
from vuetiful.models import Category, Record
from vuetiful.utils.constants import CACHE_KEY_PREFIX

ROOT = "/work/site"
OTHER_ROOT = "/work/other"


@pytest.fixture
def records():
    return (
        Record("ma-2", ".ma-2", {"margin": "8px"}, Category.SPACING, "Apply margin 8px on all sides"),
        Record("d-flex", ".d-flex", {"display": "flex"}, Category.DISPLAY, "Set display: flex"),
    )


@pytest.fixture
def artifact(tmp_path):
    path = tmp_path / "vuetify.css"
    path.write_bytes(b".ma-2 { margin: 8px } .d-flex { display: flex }")
    return path


@pytest.fixture
def store(tmp_path, fs):
    return FileStore(str(tmp_path / "cache"), fs)


@pytest.fixture
def cache(store, fs, log_facility):
    return ArtifactCache(store, fs, log_facility)


class BrokenStore:
    """Store whose every operation fails."""

    async def read(self, key):
        raise FileSystemError(key, "disk unavailable")

    async def write(self, key, data):
        raise FileSystemError(key, "disk unavailable")

    async def delete(self, key):
        raise FileSystemError(key, "disk unavailable")

    async def list_keys(self, prefix=""):
        raise FileSystemError(prefix, "disk unavailable")


class TestKeys:
    """Storage keys."""

    def test_key_is_stable(self):
        assert cache_key(ROOT, "3.5.1") == cache_key(ROOT, "3.5.1")

    def test_key_distinguishes_root_and_version(self):
        assert cache_key(ROOT, "3.5.1") != cache_key(ROOT, "3.5.2")
        assert cache_key(ROOT, "3.5.1") != cache_key(OTHER_ROOT, "3.5.1")

    def test_key_layout(self):
        key = cache_key(ROOT, "3.5.1")
        assert key.startswith("vuetify-cache-")
        assert key.endswith("-3.5.1")
        assert key.startswith(root_key_prefix(ROOT))

    def test_content_hash_is_sha256(self):
        assert content_hash(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestValidation:
    """Version and content-hash checks."""

    def test_hit_after_set(self, cache, records, artifact):
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))

        assert asyncio.run(cache.get(ROOT, "3.5.1", str(artifact))) == records
        assert cache.get_stats()["hits"] == 1

    def test_version_change_is_a_miss(self, cache, records, artifact):
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))

        assert asyncio.run(cache.get(ROOT, "3.6.0", str(artifact))) is None

    def test_content_change_invalidates(self, cache, store, records, artifact):
        """Same version, different bytes: miss, and every entry of the root is gone."""
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))
        artifact.write_bytes(b".ma-2 { margin: 10px }")

        assert asyncio.run(cache.get(ROOT, "3.5.1", str(artifact))) is None
        assert asyncio.run(store.list_keys(root_key_prefix(ROOT))) == []
        assert cache.get_stats()["invalidations"] == 1

    def test_unreadable_artifact_is_a_miss_without_invalidation(self, cache, store, records, artifact):
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))
        artifact.unlink()

        assert asyncio.run(cache.get(ROOT, "3.5.1", str(artifact))) is None
        assert asyncio.run(store.list_keys(root_key_prefix(ROOT))) == [cache_key(ROOT, "3.5.1")]

    def test_is_valid(self, cache, records, artifact):
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))
        assert asyncio.run(cache.is_valid(ROOT, "3.5.1", str(artifact)))

        artifact.write_bytes(b"changed")
        assert not asyncio.run(cache.is_valid(ROOT, "3.5.1", str(artifact)))

    def test_hash_taken_from_given_content(self, cache, records, artifact):
        """The bytes passed to set are hashed, not a later read of the file."""
        entry = asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact), content=b"parsed bytes"))
        assert entry.content_hash == content_hash(b"parsed bytes")


class TestDurableLayer:
    """Entries survive a new cache instance over the same store."""

    def test_repopulates_memory_from_store(self, store, fs, log_facility, records, artifact):
        first = ArtifactCache(store, fs, log_facility)
        asyncio.run(first.set(ROOT, "3.5.1", records, str(artifact)))

        second = ArtifactCache(store, fs, log_facility)
        assert second.get_stats()["memory_entries"] == 0

        assert asyncio.run(second.get(ROOT, "3.5.1", str(artifact))) == records
        assert second.get_stats()["memory_entries"] == 1

    def test_new_version_replaces_old_in_memory(self, cache, records, artifact):
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))
        asyncio.run(cache.set(ROOT, "3.6.0", records[:1], str(artifact)))

        assert cache.get_stats()["memory_entries"] == 1
        assert asyncio.run(cache.get(ROOT, "3.6.0", str(artifact))) == records[:1]

    def test_corrupt_entry_is_a_miss(self, cache, store, artifact):
        asyncio.run(store.write(cache_key(ROOT, "3.5.1"), b"{not json"))

        assert asyncio.run(cache.get(ROOT, "3.5.1", str(artifact))) is None
        assert cache.error_count == 1

    def test_clear_removes_everything(self, cache, store, records, artifact):
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))
        asyncio.run(cache.set(OTHER_ROOT, "3.5.1", records, str(artifact)))

        asyncio.run(cache.clear())

        assert asyncio.run(store.list_keys()) == []
        assert asyncio.run(cache.stored_keys()) == []
        assert cache.get_stats()["memory_entries"] == 0

    def test_invalidate_drops_every_version_of_one_root(self, cache, store, records, artifact):
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))
        asyncio.run(cache.set(ROOT, "3.6.0", records, str(artifact)))
        asyncio.run(cache.set(OTHER_ROOT, "3.5.1", records, str(artifact)))

        asyncio.run(cache.invalidate(ROOT))

        assert asyncio.run(store.list_keys(CACHE_KEY_PREFIX)) == [cache_key(OTHER_ROOT, "3.5.1")]
        assert asyncio.run(cache.get(ROOT, "3.5.1", str(artifact))) is None
        assert asyncio.run(cache.get(ROOT, "3.6.0", str(artifact))) is None
        assert asyncio.run(cache.get(OTHER_ROOT, "3.5.1", str(artifact))) == records

    def test_clear_keeps_foreign_keys(self, cache, store, records, artifact):
        asyncio.run(store.write("unrelated", b"{}"))
        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))

        asyncio.run(cache.clear())

        assert asyncio.run(store.list_keys()) == ["unrelated"]


class TestDegradedStore:
    """Storage failures never reach the caller."""

    def test_set_survives_write_failure(self, fs, log_facility, records, artifact):
        cache = ArtifactCache(BrokenStore(), fs, log_facility)

        asyncio.run(cache.set(ROOT, "3.5.1", records, str(artifact)))

        assert cache.error_count == 1
        assert asyncio.run(cache.get(ROOT, "3.5.1", str(artifact))) == records

    def test_read_failure_is_a_miss(self, fs, log_facility, artifact):
        cache = ArtifactCache(BrokenStore(), fs, log_facility)

        assert asyncio.run(cache.get(ROOT, "3.5.1", str(artifact))) is None
        assert cache.error_count == 1

    def test_clear_and_invalidate_survive(self, fs, log_facility):
        cache = ArtifactCache(BrokenStore(), fs, log_facility)

        asyncio.run(cache.invalidate(ROOT))
        asyncio.run(cache.clear())

        assert cache.error_count == 2
