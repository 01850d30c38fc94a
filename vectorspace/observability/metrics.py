"""
Prometheus metrics for the vector store.

Defines and exposes metrics for:
- Document vectorization outcomes
- Vectors written per namespace
- Vector cache hit rate
- Similarity search latency and result counts

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from vectorspace.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """
    Prometheus metrics collector for vector store operations.

    Usage:
        metrics = get_metrics()
        metrics.start_server()
        metrics.record_document("vectorized")
        metrics.record_search(latency=0.12, results=4)
    """

    def __init__(self):
        self.documents = Counter(
            "vectorspace_documents_total",
            "Documents submitted for vectorization",
            ["status"],  # vectorized, skipped, failed
        )

        self.vectors_written = Counter(
            "vectorspace_vectors_written_total",
            "Vector records written to namespace tables",
        )

        self.cache_hits = Counter(
            "vectorspace_vector_cache_hits_total",
            "Ingestions served from the vector cache",
        )

        self.cache_misses = Counter(
            "vectorspace_vector_cache_misses_total",
            "Ingestions that required chunking and embedding",
        )

        self.search_latency = Histogram(
            "vectorspace_search_latency_seconds",
            "Time to embed a query and run the nearest-neighbor query",
            buckets=LATENCY_BUCKETS,
        )

        self.search_results = Histogram(
            "vectorspace_search_results",
            "Curated sources returned per search",
            buckets=(0, 1, 2, 4, 8, 16, 32, 64),
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """Start Prometheus metrics HTTP server (default port from settings)."""
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    def record_document(self, status: str) -> None:
        """Record one document ingestion outcome."""
        self.documents.labels(status=status).inc()

    def record_vectors_written(self, count: int) -> None:
        self.vectors_written.inc(count)

    def record_cache(self, hit: bool) -> None:
        """
        Record vector cache hit or miss.

        Args:
            hit: True for cache hit, False for miss
        """
        if hit:
            self.cache_hits.inc()
        else:
            self.cache_misses.inc()

    def record_search(self, latency: float, results: int) -> None:
        """
        Record a completed similarity search.

        Args:
            latency: Wall time in seconds
            results: Number of curated sources returned
        """
        self.search_latency.observe(latency)
        self.search_results.observe(results)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
