"""
Versioned models for docadapter.

This module provides:
- ModelDef / FieldDef definitions, one ModelDef per version
- ModelRegistry mapping versions to models
- Document validation with field suggestions
- SchemaValidator / SchemaSanitizer adapter hooks

Invariants:
    - One model per version; None is the default version
    - Private fields never leave read() when SchemaSanitizer is installed
"""

from .hooks import SchemaSanitizer, SchemaValidator
from .registry import DuplicateRegistrationError, ModelRegistry, RegistryFrozenError
from .types import FieldDef, FieldKind, ModelDef, Version, field
from .validate import suggest_fields, validate_or_raise, validate_payload

__all__ = [
    # Types
    "FieldDef",
    "FieldKind",
    "ModelDef",
    "Version",
    "field",
    # Registry
    "ModelRegistry",
    "RegistryFrozenError",
    "DuplicateRegistrationError",
    # Validation
    "validate_payload",
    "validate_or_raise",
    "suggest_fields",
    # Hooks
    "SchemaValidator",
    "SchemaSanitizer",
]
