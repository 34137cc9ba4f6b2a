"""
Registry-driven validate and sanitize hooks.

SchemaValidator and SchemaSanitizer plug into Adapter(validator=...,
sanitizer=...) and pick the ModelDef for each call's version.

Example:
    >>> registry = ModelRegistry()
    >>> registry.register(UserV1)
    >>> adapter = create_adapter(
    ...     {"in_memory_only": True},
    ...     validator=SchemaValidator(registry),
    ...     sanitizer=SchemaSanitizer(registry),
    ... )
"""

from __future__ import annotations

from typing import Any

from .registry import ModelRegistry
from .types import Version
from .validate import validate_payload


class SchemaValidator:
    """Validate documents against the model registered for their version.

    Returns a list of error strings (empty when valid), which is the shape
    the adapter expects from a validate hook.
    """

    def __init__(self, registry: ModelRegistry, partial: bool = False) -> None:
        """
        Args:
            registry: Models keyed by version
            partial: Skip required-field checks for absent fields, so update
                bodies carrying a subset of fields pass
        """
        self.registry = registry
        self.partial = partial

    def __call__(self, document: dict[str, Any], version: Version = None) -> list[str]:
        model = self.registry.get(version)
        if model is None:
            return [f"Unknown model version {version!r}"]
        _, errors = validate_payload(model, document, partial=self.partial)
        return errors


class SchemaSanitizer:
    """Strip private fields declared by the model for a version."""

    def __init__(self, registry: ModelRegistry) -> None:
        self.registry = registry

    def __call__(self, document: dict[str, Any], version: Version = None) -> dict[str, Any]:
        """Return a copy of the document without private fields.

        Raises:
            UnknownVersionError: If no model is registered for the version
        """
        hidden = self.registry.require(version).private_field_names()
        return {key: value for key, value in document.items() if key not in hidden}
