"""
Base protocol for the embedded document store.

The adapter only talks to its store through this protocol, so any object
providing these coroutines can stand in for the bundled SQLite store
(an in-test fake, another embedded engine, ...).

Invariants:
    - insert() returns the stored document including its _id
    - find() returns documents in the store's native order
    - update()/remove() return the number of affected documents
    - Failures are raised, never returned as values

How to change safely:
    - Protocol changes require updating all implementations
    - Add new methods as optional with default implementations
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..config import StoreOptions
    from .sqlite_store import SqliteDocumentStore

Document = dict[str, Any]
Query = dict[str, Any]


@runtime_checkable
class DocumentStore(Protocol):
    """Capability set the adapter requires from a store."""

    async def insert(self, document: Document) -> Document:
        """Insert one document, assigning _id if absent."""
        ...

    async def find(self, query: Query) -> list[Document]:
        """Return every document matching the query."""
        ...

    async def update(self, query: Query, patch: Document, multi: bool = False) -> int:
        """Apply a patch to matching documents, returning the affected count."""
        ...

    async def remove(self, query: Query, multi: bool = False) -> int:
        """Remove matching documents, returning the affected count."""
        ...


def create_store(
    options: StoreOptions | Mapping[str, Any] | None = None,
) -> SqliteDocumentStore:
    """Factory function to create the embedded store.

    Args:
        options: Store options, a mapping of option values, or None to
            load them from the environment

    Returns:
        Configured store instance

    Raises:
        pydantic.ValidationError: If options are invalid
        sqlite3.Error: If the database cannot be opened (autoload only)
    """
    from ..config import StoreOptions
    from .sqlite_store import SqliteDocumentStore

    return SqliteDocumentStore(StoreOptions.coerce(options))
