"""
OpenAI-compatible embedding provider over HTTP.

Calls POST {base_url}/v1/embeddings with batched inputs and retries
rate-limit / server errors with exponential backoff and jitter.
"""

import asyncio
import random
from typing import Any

import httpx
import structlog

from vectorspace.embedding.base import EmbeddingProvider
from vectorspace.embedding.config import EmbeddingConfig
from vectorspace.errors import EmbeddingError

logger = structlog.get_logger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
RETRYABLE_EXCEPTIONS = (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError)


class OpenAICompatibleEmbedder(EmbeddingProvider):
    """
    Embedding provider for any server exposing the OpenAI embeddings API
    (OpenAI, Ollama, LM Studio, vLLM, LocalAI, ...).

    Usage:
        async with OpenAICompatibleEmbedder() as embedder:
            vector = await embedder.embed_text_input("What is pgvector?")
    """

    def __init__(
        self,
        config: EmbeddingConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._config = config or EmbeddingConfig()
        self._client = client
        self._owns_client = client is None
        self.max_chunk_length = self._config.max_chunk_length

    async def __aenter__(self) -> "OpenAICompatibleEmbedder":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._config.api_key:
                headers["Authorization"] = f"Bearer {self._config.api_key}"
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url.rstrip("/"),
                headers=headers,
                timeout=self._config.timeout_seconds,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def embed_text_input(self, text: str) -> list[float]:
        vectors = await self.embed_chunks([text])
        if not vectors:
            raise EmbeddingError("Embedding service returned no vector for query text")
        return vectors[0]

    async def embed_chunks(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        batch_size = self._config.batch_size
        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            vectors.extend(await self._embed_batch(batch))

        logger.debug("Embedded chunks", count=len(vectors), model=self._config.model)
        return vectors

    async def _embed_batch(self, batch: list[str]) -> list[list[float]]:
        payload = {"model": self._config.model, "input": batch}
        response = await self._post_with_retry("/v1/embeddings", payload)

        data = response.json()
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingError(
                "Unexpected embedding response format: missing 'data' key"
            )

        # The API may return items out of order; "index" is authoritative
        items = sorted(data["data"], key=lambda item: item.get("index", 0))
        return [item["embedding"] for item in items]

    def _backoff(self, attempt: int) -> float:
        delay = min(2.0**attempt, self._config.max_backoff_seconds)
        return delay + delay * 0.1 * random.random()

    async def _post_with_retry(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        client = self._get_client()
        max_retries = self._config.max_retries

        for attempt in range(max_retries + 1):
            try:
                response = await client.post(path, json=payload)
            except RETRYABLE_EXCEPTIONS as e:
                if attempt >= max_retries:
                    raise EmbeddingError(f"Embedding request failed: {e}") from e
                backoff = self._backoff(attempt)
                logger.warning(
                    "Embedding request error, retrying",
                    error=str(e),
                    attempt=attempt + 1,
                    backoff=round(backoff, 2),
                )
                await asyncio.sleep(backoff)
                continue

            if response.status_code in RETRYABLE_STATUS and attempt < max_retries:
                backoff = self._backoff(attempt)
                logger.warning(
                    "Retryable embedding status, retrying",
                    status=response.status_code,
                    attempt=attempt + 1,
                    backoff=round(backoff, 2),
                )
                await asyncio.sleep(backoff)
                continue

            if response.is_error:
                raise EmbeddingError(
                    f"Embedding request failed with status {response.status_code}"
                )
            return response

        # Unreachable: the loop either returns or raises on the last attempt
        raise EmbeddingError("Embedding request retries exhausted")
