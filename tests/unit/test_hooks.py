"""
Unit tests for registry-driven validate/sanitize hooks.
"""

import pytest

from docadapter.errors import UnknownVersionError
from docadapter.schema import ModelDef, ModelRegistry, SchemaSanitizer, SchemaValidator, field


@pytest.fixture
def registry():
    """Registry with a default and a versioned User model."""
    registry = ModelRegistry()
    registry.register(ModelDef(name="User", fields=(field("name", "str", required=True),)))
    registry.register(
        ModelDef(
            name="User",
            version=2,
            fields=(
                field("name", "str", required=True),
                field("email", "str", required=True),
                field("password_hash", "str", private=True),
            ),
        )
    )
    return registry


class TestSchemaValidator:
    """Tests for SchemaValidator."""

    def test_valid_document_returns_empty(self, registry):
        """No errors for a valid document."""
        validator = SchemaValidator(registry)
        assert validator({"name": "a"}) == []
        assert validator({"name": "a", "email": "a@b.c"}, 2) == []

    def test_version_selects_model(self, registry):
        """Same document can be valid for one version only."""
        validator = SchemaValidator(registry)
        assert validator({"name": "a"}, None) == []
        assert validator({"name": "a"}, 2) == ["Field 'email' is required"]

    def test_unknown_version_is_an_error(self, registry):
        """Unknown version is reported, not raised."""
        validator = SchemaValidator(registry)
        assert validator({"name": "a"}, "v9") == ["Unknown model version 'v9'"]

    def test_partial(self, registry):
        """Partial validator accepts subsets."""
        validator = SchemaValidator(registry, partial=True)
        assert validator({"email": "new@b.c"}, 2) == []


class TestSchemaSanitizer:
    """Tests for SchemaSanitizer."""

    def test_strips_private_fields(self, registry):
        """Private fields are removed, the rest is kept."""
        sanitizer = SchemaSanitizer(registry)
        doc = {"_id": "1", "name": "a", "email": "a@b.c", "password_hash": "x"}

        assert sanitizer(doc, 2) == {"_id": "1", "name": "a", "email": "a@b.c"}
        assert "password_hash" in doc

    def test_default_version_keeps_everything(self, registry):
        """Default model has no private fields."""
        sanitizer = SchemaSanitizer(registry)
        doc = {"_id": "1", "name": "a", "password_hash": "x"}
        assert sanitizer(doc) == doc

    def test_unknown_version_raises(self, registry):
        """Unknown version is a programming error."""
        sanitizer = SchemaSanitizer(registry)
        with pytest.raises(UnknownVersionError):
            sanitizer({"name": "a"}, "v9")
