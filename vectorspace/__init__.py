"""Namespace-scoped vector storage and similarity search on PostgreSQL + pgvector."""

__version__ = "0.1.0"
