"""
Model definitions for versioned validation.

This module provides:
- FieldKind: Supported field types
- FieldDef: Individual field definition
- ModelDef: One version of a data model

A ModelDef describes the documents accepted for a single version. The
adapter picks the model by the version passed to create/read/update.

Example:
    >>> UserV1 = ModelDef(
    ...     name="User",
    ...     version=1,
    ...     fields=(
    ...         field("email", "str", required=True),
    ...         field("password_hash", "str", private=True),
    ...     ),
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any, Union

Version = Union[str, int, None]


class FieldKind(Enum):
    """Supported field types."""

    STRING = "str"
    INTEGER = "int"
    FLOAT = "float"
    BOOLEAN = "bool"
    TIMESTAMP = "timestamp"
    JSON = "json"
    ENUM = "enum"
    LIST_STRING = "list_str"
    LIST_INT = "list_int"

    @classmethod
    def from_str(cls, value: str) -> FieldKind:
        """Convert string to FieldKind."""
        for kind in cls:
            if kind.value == value:
                return kind
        raise ValueError(f"Invalid field kind: {value}")


@dataclass(frozen=True)
class FieldDef:
    """Field definition within a model.

    Attributes:
        name: Field name
        kind: Data type
        required: Whether field is required
        default: Default value used when the field is absent
        enum_values: Valid values for enum type
        private: Stripped from documents returned by read()
        deprecated: Whether field is deprecated
        description: Documentation
    """

    name: str
    kind: FieldKind
    required: bool = False
    default: Any = None
    enum_values: tuple[str, ...] | None = None
    private: bool = False
    deprecated: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        """Validate field definition."""
        if not self.name:
            raise ValueError("Field name cannot be empty")
        if self.name.startswith("$") or "." in self.name:
            raise ValueError(f"Invalid field name '{self.name}'")
        if self.kind == FieldKind.ENUM and not self.enum_values:
            raise ValueError(f"enum_values required for ENUM field '{self.name}'")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {"name": self.name, "kind": self.kind.value}
        if self.required:
            result["required"] = True
        if self.default is not None:
            result["default"] = self.default
        if self.enum_values:
            result["enum_values"] = list(self.enum_values)
        if self.private:
            result["private"] = True
        if self.deprecated:
            result["deprecated"] = True
        if self.description:
            result["description"] = self.description
        return result


def field(
    name: str,
    kind: str | FieldKind,
    *,
    required: bool = False,
    default: Any = None,
    enum_values: tuple[str, ...] | None = None,
    private: bool = False,
    deprecated: bool = False,
    description: str = "",
) -> FieldDef:
    """Convenience function to create a FieldDef.

    Example:
        >>> title = field("title", "str", required=True)
        >>> status = field("status", "enum", enum_values=("todo", "done"))
    """
    if isinstance(kind, str):
        kind = FieldKind.from_str(kind)
    return FieldDef(
        name=name,
        kind=kind,
        required=required,
        default=default,
        enum_values=enum_values,
        private=private,
        deprecated=deprecated,
        description=description,
    )


@dataclass(frozen=True)
class ModelDef:
    """One version of a data model.

    Attributes:
        name: Model name
        version: Version selector (None = default rules)
        fields: Tuple of field definitions
        allow_unknown: Accept fields not declared in ``fields``
        description: Documentation
    """

    name: str
    version: Version = None
    fields: tuple[FieldDef, ...] = dataclass_field(default_factory=tuple)
    allow_unknown: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        """Validate model definition."""
        if not self.name:
            raise ValueError("Model name cannot be empty")
        if isinstance(self.version, bool):
            raise ValueError("Model version must be a string, an integer or None")

        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate field name in model '{self.name}'")

    def get_field(self, name: str) -> FieldDef | None:
        """Get field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_field_names(self) -> list[str]:
        """Get list of non-deprecated field names."""
        return [f.name for f in self.fields if not f.deprecated]

    def private_field_names(self) -> set[str]:
        """Names of fields hidden from read results."""
        return {f.name for f in self.fields if f.private}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.allow_unknown:
            result["allow_unknown"] = True
        if self.description:
            result["description"] = self.description
        return result
