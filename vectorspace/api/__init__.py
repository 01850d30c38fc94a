"""
FastAPI vector store service.

Provides REST API for namespaces, document ingestion and similarity search:
- GET /health - Vector store heartbeat
- /namespaces - List, count, inspect and delete namespaces
- POST /namespaces/{name}/documents - Add a document
- POST /namespaces/{name}/search - Similarity search
"""

from vectorspace.api.app import create_app

__all__ = ["create_app"]
