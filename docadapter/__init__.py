"""
docadapter - asynchronous CRUD adapter over an embedded document store.

This package provides:
- Adapter: create/read/update/delete with versioned validate/sanitize hooks
- SqliteDocumentStore: the bundled embedded document store
- ModelRegistry / SchemaValidator / SchemaSanitizer: registry-driven hooks
- extend(): runtime methods bound to the adapter

Example:
    >>> from docadapter import create_adapter
    >>>
    >>> adapter = create_adapter({"in_memory_only": True})
    >>> doc = await adapter.create({"name": "a"})
    >>> await adapter.read({"name": "a"})
    [{'name': 'a', '_id': '...'}]

Invariants:
    - Documents are validated before any write
    - Read results always pass through sanitize
    - Store failures propagate unchanged

Version: 1.0.0
"""

__version__ = "1.0.0"

from .adapter import Adapter, Sanitizer, Validator, accept_all, create_adapter, passthrough
from .config import LoggingSettings, StoreOptions
from .errors import (
    AdapterError,
    AdapterNotConfiguredError,
    DuplicateIdError,
    InvalidDocumentError,
    InvalidQueryError,
    MissingCapabilityError,
    StoreError,
    UnknownVersionError,
    ValidationError,
)
from .logging_config import setup_logging
from .schema import (
    FieldDef,
    FieldKind,
    ModelDef,
    ModelRegistry,
    SchemaSanitizer,
    SchemaValidator,
    field,
)
from .store import DocumentStore, SqliteDocumentStore, create_store

__all__ = [
    # Version
    "__version__",
    # Adapter
    "Adapter",
    "create_adapter",
    "Validator",
    "Sanitizer",
    "accept_all",
    "passthrough",
    # Store
    "DocumentStore",
    "SqliteDocumentStore",
    "create_store",
    # Models
    "ModelDef",
    "FieldDef",
    "FieldKind",
    "field",
    "ModelRegistry",
    "SchemaValidator",
    "SchemaSanitizer",
    # Configuration
    "StoreOptions",
    "LoggingSettings",
    "setup_logging",
    # Errors
    "AdapterError",
    "ValidationError",
    "AdapterNotConfiguredError",
    "MissingCapabilityError",
    "StoreError",
    "DuplicateIdError",
    "InvalidDocumentError",
    "InvalidQueryError",
    "UnknownVersionError",
]
