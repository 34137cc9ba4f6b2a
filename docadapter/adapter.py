"""
Adapter core: asynchronous CRUD over one embedded document store.

The adapter owns a single store handle and wraps every store call with the
versioned validate/sanitize hooks:

    create(doc, version)          -> validate -> store.insert
    read(query, version)          -> store.find -> sanitize each result
    update(query, body, version)  -> validate -> store.update($set, multi)
    delete(query)                 -> store.remove(multi)

States:
    Unconfigured: no store handle; every CRUD call raises
        AdapterNotConfiguredError
    Configured: after configure() or construction with a store

Invariants:
    - Nothing is written unless validation returned a falsy result
    - Every document returned by read() went through sanitize()
    - Errors from the store reach the caller untouched
    - No locking, retries or timeouts here; wrap calls in
      asyncio.wait_for() for bounded latency

Example:
    >>> adapter = create_adapter({"in_memory_only": True})
    >>> doc = await adapter.create({"name": "a"})
    >>> await adapter.update({"name": "a"}, {"name": "b"})
    1
"""

from __future__ import annotations

import logging
import types
from collections.abc import Mapping
from typing import Any, Callable, Protocol

from .config import StoreOptions
from .errors import AdapterNotConfiguredError, MissingCapabilityError, ValidationError
from .schema.types import Version
from .store.base import Document, DocumentStore, Query, create_store
from .store.sqlite_store import SqliteDocumentStore

logger = logging.getLogger(__name__)

# Names extend() cannot rebind without breaking the adapter itself
_RESERVED_NAMES = frozenset({"extend"})


class Validator(Protocol):
    """Validate hook: return a truthy error value to reject a document."""

    def __call__(self, document: Document, version: Version = None) -> Any: ...


class Sanitizer(Protocol):
    """Sanitize hook: turn a stored document into its external form."""

    def __call__(self, document: Document, version: Version = None) -> Document: ...


def accept_all(document: Document, version: Version = None) -> None:
    """Default validate hook: accepts every document."""
    return None


def passthrough(document: Document, version: Version = None) -> Document:
    """Default sanitize hook: returns documents unchanged."""
    return document


class Adapter:
    """CRUD adapter over a DocumentStore with versioned hooks.

    Attributes:
        validator: Hook called by create() and update()
        sanitizer: Hook called by read() on every result

    Example:
        >>> adapter = Adapter(validator=my_validator)
        >>> adapter.configure({"filename": "/tmp/data.db"})
        True
        >>> await adapter.read({"status": "open"}, version=2)
    """

    def __init__(
        self,
        store: DocumentStore | None = None,
        *,
        validator: Validator | None = None,
        sanitizer: Sanitizer | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            store: Store handle (None leaves the adapter unconfigured)
            validator: Validate hook (defaults to accept_all)
            sanitizer: Sanitize hook (defaults to passthrough)
        """
        self._store = store
        self._owned_store: SqliteDocumentStore | None = None
        self.validator: Validator = validator or accept_all
        self.sanitizer: Sanitizer = sanitizer or passthrough
        self._extensions: dict[str, Callable[..., Any]] = {}

    @property
    def configured(self) -> bool:
        """Whether a store handle is present."""
        return self._store is not None

    @property
    def store(self) -> DocumentStore | None:
        """Current store handle, None while unconfigured."""
        return self._store

    @property
    def extensions(self) -> tuple[str, ...]:
        """Names installed through extend(), in installation order."""
        return tuple(self._extensions)

    def configure(self, options: StoreOptions | Mapping[str, Any] | None = None) -> bool:
        """Create the store handle, replacing any previous one.

        A store built by an earlier configure() call is closed. A store
        passed to the constructor is left open for its owner.

        Args:
            options: Store options, a mapping of option values, or None to
                load them from the environment

        Returns:
            True

        Raises:
            pydantic.ValidationError: If options are invalid
            sqlite3.Error: If the store cannot be opened
        """
        replacing = self._store is not None
        previous = self._owned_store
        store = create_store(options)
        # Only stores built here are closed; caller handles stay open
        if previous is not None:
            previous.close_nowait()
        self._store = self._owned_store = store
        logger.info("Adapter configured", extra={"replaced_store": replacing})
        return True

    def _require_store(self, operation: str) -> DocumentStore:
        if self._store is None:
            raise AdapterNotConfiguredError(operation)
        return self._store

    def validate(self, document: Document, version: Version = None) -> Any:
        """Run the validate hook."""
        return self.validator(document, version)

    def sanitize(self, document: Document, version: Version = None) -> Document:
        """Run the sanitize hook."""
        return self.sanitizer(document, version)

    def _check(self, document: Document, version: Version, operation: str) -> None:
        errors = self.validate(document, version)
        if errors:
            logger.debug(
                "Validation rejected document",
                extra={"operation": operation, "version": version},
            )
            raise ValidationError(errors, version=version)

    async def create(self, document: Document, version: Version = None) -> Document:
        """Validate and insert a document.

        Args:
            document: Contents of the new entry
            version: Model version to validate against

        Returns:
            Stored document including its assigned _id

        Raises:
            AdapterNotConfiguredError: If configure() was never called
            ValidationError: If the validate hook rejects the document
        """
        store = self._require_store("create")
        self._check(document, version, "create")
        return await store.insert(document)

    async def read(self, query: Query, version: Version = None) -> list[Document]:
        """Find documents and sanitize each one.

        Args:
            query: Query dict (an {"_id": ...} query is an identifier lookup)
            version: Model version to sanitize with

        Returns:
            Sanitized documents in store order; empty list if nothing matches
        """
        store = self._require_store("read")
        results = await store.find(query)
        return [self.sanitize(document, version) for document in results]

    async def update(self, query: Query, body: Document, version: Version = None) -> int:
        """Validate a body and merge it into every matching document.

        Args:
            query: Query selecting documents to update
            body: Fields to set (merged, not a replacement)
            version: Model version to validate against

        Returns:
            Number of documents updated

        Raises:
            AdapterNotConfiguredError: If configure() was never called
            ValidationError: If the validate hook rejects the body
        """
        store = self._require_store("update")
        self._check(body, version, "update")
        return await store.update(query, {"$set": body}, multi=True)

    async def delete(self, query: Query) -> int:
        """Remove every document matching a query.

        Returns:
            Number of documents removed
        """
        store = self._require_store("delete")
        return await store.remove(query, multi=True)

    def extend(self, name: str, fn: Callable[..., Any]) -> None:
        """Install fn as a method of this adapter.

        fn receives the adapter as its first argument, so it can call
        self.validate(), self.read() and other methods as if it were
        built in. An existing method of the same name is replaced; extending
        "validate" or "sanitize" replaces that hook for create/read/update.

        Args:
            name: Public method name
            fn: Function taking the adapter as first argument

        Raises:
            ValueError: If name is private, reserved or not an identifier
            TypeError: If fn is not callable
        """
        if (
            not name.isidentifier()
            or name.startswith("_")
            or name in _RESERVED_NAMES
            or isinstance(getattr(type(self), name, None), property)
        ):
            raise ValueError(f"Cannot extend adapter with method name '{name}'")
        if not callable(fn):
            raise TypeError(f"Extension '{name}' must be callable")

        setattr(self, name, types.MethodType(fn, self))
        self._extensions[name] = fn
        logger.debug("Adapter extended", extra={"method": name})

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith("_"):
            raise AttributeError(name)
        raise MissingCapabilityError(name)


def create_adapter(
    options: StoreOptions | Mapping[str, Any] | None = None,
    *,
    store: DocumentStore | None = None,
    validator: Validator | None = None,
    sanitizer: Sanitizer | None = None,
) -> Adapter:
    """Factory function to create a configured adapter.

    Args:
        options: Store options used when no store is given
        store: Existing store handle to use instead of building one
        validator: Validate hook
        sanitizer: Sanitize hook

    Returns:
        Configured Adapter
    """
    adapter = Adapter(store, validator=validator, sanitizer=sanitizer)
    if store is None:
        adapter.configure(options)
    return adapter
