"""Directory-backed vector cache: one JSON file per source path."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from vectorspace.cache.base import CachedVectors, VectorCache, cache_key_for

logger = logging.getLogger(__name__)


class FileVectorCache(VectorCache):
    """Stores each bundle as ``<directory>/<uuid5(path)>.json``.

    File I/O runs in a worker thread so the event loop is not blocked.
    """

    def __init__(self, directory: str | Path):
        self._directory = Path(directory)

    def _file_for(self, path: str) -> Path:
        return self._directory / f"{cache_key_for(path)}.json"

    async def cached(self, path: str) -> CachedVectors:
        if not path:
            return CachedVectors()

        target = self._file_for(path)
        try:
            raw = await asyncio.to_thread(target.read_text, encoding="utf-8")
        except FileNotFoundError:
            return CachedVectors()

        try:
            chunks = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupt vector cache file {target.name}: {e}")
            return CachedVectors()

        return CachedVectors(exists=True, chunks=chunks)

    async def store(self, chunks: list[list[dict[str, Any]]], path: str) -> None:
        if not path:
            return

        target = self._file_for(path)
        payload = json.dumps(chunks)

        def _write() -> None:
            self._directory.mkdir(parents=True, exist_ok=True)
            target.write_text(payload, encoding="utf-8")

        await asyncio.to_thread(_write)
        logger.debug(f"Cached {sum(len(c) for c in chunks)} vectors for {path}")

    async def purge(self, path: str) -> None:
        target = self._file_for(path)
        await asyncio.to_thread(target.unlink, missing_ok=True)
