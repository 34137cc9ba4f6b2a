"""
Embedded document store for docadapter.

This module provides:
- DocumentStore protocol (the capability set the adapter depends on)
- SqliteDocumentStore, a schemaless JSON store on SQLite
- Query matching and update patches (query.py)
- create_store() factory

Invariants:
    - The adapter only uses insert/find/update/remove
    - Stores raise failures, they never return error values
"""

from .base import Document, DocumentStore, Query, create_store
from .query import ID_FIELD, apply_patch, match_document
from .sqlite_store import SqliteDocumentStore, generate_id

__all__ = [
    # Protocol and types
    "DocumentStore",
    "Document",
    "Query",
    "ID_FIELD",
    # Factory
    "create_store",
    # Implementation
    "SqliteDocumentStore",
    "generate_id",
    # Query helpers
    "match_document",
    "apply_patch",
]
