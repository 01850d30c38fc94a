"""Tests for FileVectorCache."""

import json
import uuid

import pytest

from vectorspace.cache.base import cache_key_for
from vectorspace.cache.file_cache import FileVectorCache

BUNDLE = [
    [
        {"values": [0.1, 0.2], "metadata": {"text": "one"}},
        {"values": [0.3, 0.4], "metadata": {"text": "two"}},
    ],
    [{"values": [0.5, 0.6], "metadata": {"text": "three"}}],
]


@pytest.fixture
def cache(tmp_path) -> FileVectorCache:
    return FileVectorCache(tmp_path / "vector-cache")


class TestFileVectorCache:
    def test_key_is_uuid5_of_path(self):
        key = cache_key_for("/docs/a.txt")
        assert key == str(uuid.uuid5(uuid.NAMESPACE_URL, "/docs/a.txt"))
        assert cache_key_for("/docs/a.txt") == key
        assert cache_key_for("/docs/b.txt") != key

    @pytest.mark.asyncio
    async def test_miss(self, cache):
        result = await cache.cached("/docs/a.txt")
        assert result.exists is False
        assert result.chunks == []

    @pytest.mark.asyncio
    async def test_store_then_hit(self, cache, tmp_path):
        await cache.store(BUNDLE, "/docs/a.txt")

        result = await cache.cached("/docs/a.txt")

        assert result.exists is True
        assert result.chunks == BUNDLE
        assert result.vector_count == 3
        expected = tmp_path / "vector-cache" / f"{cache_key_for('/docs/a.txt')}.json"
        assert json.loads(expected.read_text()) == BUNDLE

    @pytest.mark.asyncio
    async def test_empty_path_is_ignored(self, cache, tmp_path):
        await cache.store(BUNDLE, "")
        assert (await cache.cached("")).exists is False
        assert not (tmp_path / "vector-cache").exists()

    @pytest.mark.asyncio
    async def test_corrupt_file_is_a_miss(self, cache, tmp_path):
        directory = tmp_path / "vector-cache"
        directory.mkdir()
        (directory / f"{cache_key_for('/docs/a.txt')}.json").write_text("{not json")

        assert (await cache.cached("/docs/a.txt")).exists is False

    @pytest.mark.asyncio
    async def test_purge(self, cache):
        await cache.store(BUNDLE, "/docs/a.txt")
        await cache.purge("/docs/a.txt")
        await cache.purge("/docs/never-stored.txt")

        assert (await cache.cached("/docs/a.txt")).exists is False
