"""
Error types for docadapter.

This module defines all exception types raised by the adapter and its store:
- AdapterError: Base exception
- ValidationError: A validate hook rejected a document
- AdapterNotConfiguredError: CRUD called before configure()
- MissingCapabilityError: A method that was never installed was requested
- StoreError: Failures reported by the embedded store
- UnknownVersionError: No model registered for a version

Invariants:
    - All errors inherit from AdapterError
    - Errors carry a stable code for programmatic handling
    - The adapter never wraps or rewrites errors raised by the store
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AdapterError(Exception):
    """Base exception for all docadapter errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "ADAPTER_ERROR"
        self.details = details or {}


class ValidationError(AdapterError):
    """A validate hook returned a non-empty result.

    The hook's return value is kept untouched in ``result`` so callers can
    present it however they like.
    """

    def __init__(self, result: Any, version: Any = None) -> None:
        super().__init__(
            f"Validation failed: {result}",
            code="VALIDATION_ERROR",
            details={"result": result, "version": version},
        )
        self.result = result
        self.version = version


class AdapterNotConfiguredError(AdapterError):
    """No store handle exists yet.

    Raised when create/read/update/delete is called before configure().
    """

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Cannot {operation}: adapter is not configured",
            code="NOT_CONFIGURED",
            details={"operation": operation},
        )
        self.operation = operation


class MissingCapabilityError(AdapterError, AttributeError):
    """The requested method was never installed on the adapter."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Adapter has no capability '{name}'; install it with extend()",
            code="MISSING_CAPABILITY",
            details={"name": name},
        )
        self.name = name


class StoreError(AdapterError):
    """Base class for failures reported by the embedded store."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code or "STORE_ERROR", details=details)


class DuplicateIdError(StoreError):
    """A document with this _id already exists."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(
            f"Document with _id '{doc_id}' already exists",
            code="DUPLICATE_ID",
            details={"_id": doc_id},
        )
        self.doc_id = doc_id


class InvalidDocumentError(StoreError):
    """Document cannot be stored (bad field names or not a mapping)."""

    def __init__(self, message: str, field_name: Optional[str] = None) -> None:
        super().__init__(message, code="INVALID_DOCUMENT", details={"field": field_name})
        self.field_name = field_name


class InvalidQueryError(StoreError):
    """Query or update patch is malformed."""

    def __init__(self, message: str, operator: Optional[str] = None) -> None:
        super().__init__(message, code="INVALID_QUERY", details={"operator": operator})
        self.operator = operator


class UnknownVersionError(AdapterError):
    """No model is registered for the requested version."""

    def __init__(self, version: Any) -> None:
        super().__init__(
            f"No model registered for version {version!r}",
            code="UNKNOWN_VERSION",
            details={"version": version},
        )
        self.version = version
