"""
Document validation against a ModelDef.

This module provides validation utilities:
- Field-level validation
- Document validation against a model version
- Helpful error messages with suggestions

Invariants:
    - Validation errors are deterministic
    - Error messages include context for fixing
    - Unknown fields suggest similar valid fields
    - _id is always accepted
"""

from __future__ import annotations

from difflib import SequenceMatcher
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ValidationError
from ..store.query import ID_FIELD
from .types import FieldKind, ModelDef

_SUGGESTION_CUTOFF = 0.6


def validate_payload(
    model: ModelDef,
    payload: Dict[str, Any],
    partial: bool = False,
) -> Tuple[bool, List[str]]:
    """Validate a document against a model.

    Args:
        model: Model to validate against
        payload: Document to validate
        partial: Only check fields present in the payload (update bodies)

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if not isinstance(payload, dict):
        return False, [f"Document must be an object, got {type(payload).__name__}"]

    errors: List[str] = []

    # Check for unknown fields
    if not model.allow_unknown:
        known_fields = {f.name for f in model.fields}
        unknown = set(payload.keys()) - known_fields - {ID_FIELD}
        for field_name in sorted(unknown, key=str):
            suggestions = suggest_fields(str(field_name), model)
            if suggestions:
                errors.append(
                    f"Unknown field '{field_name}'. Did you mean: {', '.join(suggestions)}?"
                )
            else:
                errors.append(f"Unknown field '{field_name}'")

    # Validate each field
    for field_def in model.fields:
        if partial and field_def.name not in payload:
            continue
        value = payload.get(field_def.name, field_def.default)

        # Check required
        if value is None and field_def.required:
            errors.append(f"Field '{field_def.name}' is required")
            continue

        if value is None:
            continue

        # Type-specific validation
        error = _validate_field_value(field_def.name, field_def.kind, value, field_def.enum_values)
        if error:
            errors.append(error)

    return len(errors) == 0, errors


def _validate_field_value(
    name: str,
    kind: FieldKind,
    value: Any,
    enum_values: Optional[Tuple[str, ...]] = None,
) -> Optional[str]:
    """Validate a single field value.

    Returns error message if invalid, None if valid.
    """
    if kind == FieldKind.STRING:
        if not isinstance(value, str):
            return f"Field '{name}' must be a string, got {type(value).__name__}"

    elif kind == FieldKind.INTEGER:
        if not isinstance(value, int) or isinstance(value, bool):
            return f"Field '{name}' must be an integer, got {type(value).__name__}"

    elif kind == FieldKind.FLOAT:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return f"Field '{name}' must be a number, got {type(value).__name__}"

    elif kind == FieldKind.BOOLEAN:
        if not isinstance(value, bool):
            return f"Field '{name}' must be a boolean, got {type(value).__name__}"

    elif kind == FieldKind.TIMESTAMP:
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            return f"Field '{name}' must be a positive integer timestamp"

    elif kind == FieldKind.ENUM:
        if not isinstance(value, str):
            return f"Field '{name}' must be a string, got {type(value).__name__}"
        if enum_values and value not in enum_values:
            return f"Field '{name}' must be one of {enum_values}, got '{value}'"

    elif kind == FieldKind.LIST_STRING:
        if not isinstance(value, list):
            return f"Field '{name}' must be a list, got {type(value).__name__}"
        for i, item in enumerate(value):
            if not isinstance(item, str):
                return f"Field '{name}[{i}]' must be a string"

    elif kind == FieldKind.LIST_INT:
        if not isinstance(value, list):
            return f"Field '{name}' must be a list, got {type(value).__name__}"
        for i, item in enumerate(value):
            if not isinstance(item, int) or isinstance(item, bool):
                return f"Field '{name}[{i}]' must be an integer"

    elif kind == FieldKind.JSON:
        if not isinstance(value, (dict, list, str, int, float, bool)):
            return f"Field '{name}' must be JSON-compatible, got {type(value).__name__}"

    return None


def validate_or_raise(
    model: ModelDef,
    payload: Dict[str, Any],
) -> None:
    """Validate a document and raise if invalid.

    Raises:
        ValidationError: If validation fails; ``result`` holds the error list
    """
    is_valid, errors = validate_payload(model, payload)
    if not is_valid:
        raise ValidationError(errors, version=model.version)


def suggest_fields(name: str, model: ModelDef, limit: int = 3) -> List[str]:
    """Known field names resembling ``name``, best match first.

    Prefix matches rank above fuzzy matches; comparison ignores case.
    """
    target = name.lower()
    scored = []
    for candidate in model.get_field_names():
        lowered = candidate.lower()
        if lowered.startswith(target):
            score = 1.0
        else:
            score = SequenceMatcher(None, target, lowered).ratio()
        if score >= _SUGGESTION_CUTOFF:
            scored.append((-score, candidate))
    return [candidate for _, candidate in sorted(scored)[:limit]]
