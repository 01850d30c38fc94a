"""
Command-line interface for vectorspace.

Provides commands to initialize the database, inspect and delete
namespaces, ingest files, run similarity searches, and serve the API.

Usage:
    vectorspace init-db                      # Create the mapping table
    vectorspace health                       # Vector store heartbeat
    vectorspace namespaces                   # List namespaces
    vectorspace ingest docs notes/*.txt      # Ingest files into a namespace
    vectorspace search docs "query text"     # Similarity search
    vectorspace serve                        # Start the API server
"""

import asyncio
import sys
import uuid
from pathlib import Path
from typing import Any

import click

from vectorspace.config.settings import get_settings
from vectorspace.observability.logging import setup_logging
from vectorspace.observability.metrics import get_metrics


def _build_provider(with_embedder: bool = False) -> Any:
    """Provider for the active settings, optionally wired for ingestion."""
    from vectorspace.cache.factory import create_vector_cache
    from vectorspace.embedding.client import OpenAICompatibleEmbedder
    from vectorspace.vectorstore.factory import get_vector_db_provider

    settings = get_settings()
    if not with_embedder:
        return get_vector_db_provider(settings)
    return get_vector_db_provider(
        settings,
        embedder=OpenAICompatibleEmbedder(),
        cache=create_vector_cache(settings=settings),
    )


def _build_embedder() -> Any:
    from vectorspace.embedding.client import OpenAICompatibleEmbedder

    return OpenAICompatibleEmbedder()


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Vectorspace - namespace-scoped vector storage on pgvector."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command("init-db")
def init_db() -> None:
    """Enable pgvector and create the document mapping table."""

    async def run():
        provider = _build_provider()
        try:
            await provider.initialize()
            click.echo("Database initialized successfully")
        finally:
            await provider.close()

    asyncio.run(run())


@main.command()
def health() -> None:
    """Check that the vector store is reachable."""
    import structlog
    logger = structlog.get_logger()

    async def check() -> bool:
        provider = _build_provider()
        try:
            beat = await provider.heartbeat()
            click.echo(click.style(f"  ✓ pgvector: heartbeat {beat['heartbeat']}", fg="green"))
            return True
        except Exception as e:
            logger.error("Vector store health check failed", error=str(e))
            click.echo(click.style(f"  ✗ pgvector: {e}", fg="red"))
            return False
        finally:
            await provider.close()

    healthy = asyncio.run(check())
    sys.exit(0 if healthy else 1)


@main.command()
def namespaces() -> None:
    """List namespaces with their vector counts."""

    async def run():
        provider = _build_provider()
        try:
            descriptors = await provider.list_namespaces()
        finally:
            await provider.close()

        if not descriptors:
            click.echo("No namespaces found.")
            return

        click.echo(f"\n{'Namespace':<32} {'Dim':>6} {'Vectors':>10}")
        click.echo("-" * 50)
        for d in descriptors:
            click.echo(f"{d.name:<32} {d.dimension or '-':>6} {d.row_count:>10}")
        click.echo("-" * 50)
        click.echo(f"{len(descriptors)} namespaces, {sum(d.row_count for d in descriptors)} vectors")

    asyncio.run(run())


@main.command()
@click.argument("name")
def stats(name: str) -> None:
    """Show catalog statistics for a namespace."""
    from vectorspace.errors import NamespaceNotFoundError

    async def run() -> bool:
        provider = _build_provider()
        try:
            result = await provider.namespace_stats(name)
        except NamespaceNotFoundError as e:
            click.echo(click.style(str(e), fg="red"), err=True)
            return False
        finally:
            await provider.close()

        click.echo(f"\nNamespace: {result.name}")
        click.echo(f"  Table:        {result.table}")
        click.echo(f"  Dimension:    {result.dimension}")
        click.echo(f"  Row estimate: {result.row_estimate}")
        click.echo(f"  Size:         {result.total_bytes / 1024:.1f} KiB")
        return True

    if not asyncio.run(run()):
        sys.exit(1)


@main.command("delete-namespace")
@click.argument("name")
@click.option("--yes", is_flag=True, help="Skip confirmation")
def delete_namespace(name: str, yes: bool) -> None:
    """Drop a namespace and every vector in it."""
    from vectorspace.errors import NamespaceNotFoundError

    if not yes:
        click.confirm(f"Delete namespace '{name}' and all of its vectors?", abort=True)

    async def run() -> bool:
        provider = _build_provider()
        try:
            result = await provider.remove_namespace(name)
        except NamespaceNotFoundError as e:
            click.echo(click.style(str(e), fg="red"), err=True)
            return False
        finally:
            await provider.close()

        click.echo(result["message"])
        return True

    if not asyncio.run(run()):
        sys.exit(1)


@main.command()
@click.argument("namespace")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--metrics/--no-metrics", default=False, help="Enable metrics server")
def ingest(namespace: str, files: tuple[Path, ...], metrics: bool) -> None:
    """Chunk, embed and store text files in a namespace.

    Example:
        vectorspace ingest handbook docs/*.md
    """

    async def run() -> int:
        if metrics:
            get_metrics().start_server()

        provider = _build_provider(with_embedder=True)
        failures = 0
        try:
            for path in files:
                resolved = path.resolve()
                document = {
                    "page_content": resolved.read_text(encoding="utf-8"),
                    "doc_id": str(uuid.uuid4()),
                    "title": resolved.name,
                    "source": str(resolved),
                }
                result = await provider.add_document(
                    namespace, document, full_file_path=str(resolved)
                )
                if result.vectorized:
                    click.echo(click.style(f"  ✓ {path}", fg="green"))
                else:
                    failures += 1
                    reason = result.error or "no content"
                    click.echo(click.style(f"  ✗ {path}: {reason}", fg="red"))
        finally:
            await provider.close()
        return failures

    failures = asyncio.run(run())
    click.echo(f"\nIngested {len(files) - failures}/{len(files)} files into '{namespace}'")
    if failures:
        sys.exit(1)


@main.command()
@click.argument("namespace")
@click.argument("query")
@click.option("--top-n", default=None, type=int, help="Nearest neighbors to fetch")
@click.option("--threshold", default=None, type=float, help="Minimum similarity threshold")
def search(namespace: str, query: str, top_n: int | None, threshold: float | None) -> None:
    """Search a namespace for passages similar to QUERY.

    Example:
        vectorspace search handbook "how do refunds work" --top-n 5
    """

    async def run():
        provider = _build_provider()
        embedder = _build_embedder()
        try:
            result = await provider.search(
                namespace, query, embedder, threshold=threshold, top_n=top_n
            )
        finally:
            await embedder.close()
            await provider.close()

        click.echo(f"\nSearching '{namespace}' for: {query}")
        click.echo("-" * 60)

        if result.message:
            click.echo(result.message)
            return
        if not result.sources:
            click.echo("No results found.")
            return

        for i, source in enumerate(result.sources, 1):
            title = source.get("title") or source.get("source") or ""
            preview = source["text"][:200].replace("\n", " ")
            click.echo(f"\n{i}. {title}")
            click.echo(f"   Score: {source['score']:.4f}")
            click.echo(f"   {preview}")

        click.echo(f"\n{'-' * 60}")
        click.echo(f"Found {len(result.sources)} results")

    asyncio.run(run())


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the vector store API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    # Start metrics server on separate port
    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "vectorspace.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
