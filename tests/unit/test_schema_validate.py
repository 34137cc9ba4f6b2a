"""
Unit tests for document validation.

Tests cover:
- Field type validation
- Required field checking
- Unknown field detection with suggestions
- Enum validation
- Partial validation for update bodies
"""

import pytest

from docadapter.errors import ValidationError
from docadapter.schema import ModelDef, field
from docadapter.schema.validate import suggest_fields, validate_or_raise, validate_payload


class TestPayloadValidation:
    """Tests for validate_payload."""

    @pytest.fixture
    def user_model(self):
        """User model for testing."""
        return ModelDef(
            name="User",
            version=1,
            fields=(
                field("email", "str", required=True),
                field("name", "str"),
                field("age", "int"),
                field("score", "float"),
                field("active", "bool"),
                field("created_at", "timestamp"),
                field("status", "enum", enum_values=("active", "inactive", "pending")),
                field("tags", "list_str"),
                field("scores", "list_int"),
                field("meta", "json"),
            ),
        )

    def test_valid_payload(self, user_model):
        """Valid payload passes validation."""
        is_valid, errors = validate_payload(
            user_model,
            {"email": "test@example.com", "name": "Test User"},
        )
        assert is_valid
        assert errors == []

    def test_id_is_always_allowed(self, user_model):
        """_id is not reported as unknown."""
        is_valid, _ = validate_payload(user_model, {"_id": "abc", "email": "a@b.c"})
        assert is_valid

    def test_required_field_missing(self, user_model):
        """Missing required field fails."""
        is_valid, errors = validate_payload(user_model, {"name": "Test User"})
        assert not is_valid
        assert "Field 'email' is required" in errors

    @pytest.mark.parametrize(
        "name,value",
        [
            ("name", 123),
            ("age", "thirty"),
            ("age", True),
            ("score", "high"),
            ("active", "yes"),
            ("created_at", -1),
            ("status", "deleted"),
            ("tags", "not-a-list"),
            ("tags", ["ok", 1]),
            ("scores", [1, "two"]),
            ("meta", object()),
        ],
    )
    def test_wrong_types(self, user_model, name, value):
        """Values of the wrong type are reported."""
        is_valid, errors = validate_payload(user_model, {"email": "a@b.c", name: value})
        assert not is_valid
        assert len(errors) == 1
        assert name in errors[0]

    def test_unknown_field_with_suggestion(self, user_model):
        """Unknown field suggests a close match."""
        is_valid, errors = validate_payload(user_model, {"email": "a@b.c", "emial": "x"})
        assert not is_valid
        assert "Unknown field 'emial'" in errors[0]
        assert "email" in errors[0]

    def test_allow_unknown(self):
        """allow_unknown accepts undeclared fields."""
        model = ModelDef(name="Loose", fields=(field("a", "int"),), allow_unknown=True)
        is_valid, _ = validate_payload(model, {"a": 1, "b": "anything"})
        assert is_valid

    def test_partial_skips_absent_required(self, user_model):
        """Partial validation only checks fields present."""
        is_valid, errors = validate_payload(user_model, {"name": "New"}, partial=True)
        assert is_valid, errors

        is_valid, _ = validate_payload(user_model, {"age": "x"}, partial=True)
        assert not is_valid

    def test_non_dict_payload(self, user_model):
        """Payload must be a dict."""
        is_valid, errors = validate_payload(user_model, ["email"])
        assert not is_valid
        assert "must be an object" in errors[0]

    def test_validate_or_raise(self, user_model):
        """validate_or_raise raises with the error list."""
        with pytest.raises(ValidationError) as exc_info:
            validate_or_raise(user_model, {})

        assert exc_info.value.result == ["Field 'email' is required"]
        assert exc_info.value.version == 1

    def test_suggest_fields(self, user_model):
        """Prefix matches come first, ignoring case."""
        assert suggest_fields("SC", user_model) == ["score", "scores"]
        assert suggest_fields("emial", user_model) == ["email"]
        assert suggest_fields("zzz", user_model) == []

    def test_unknown_field_message_lists_suggestions(self, user_model):
        """Unknown-field errors name every suggested field."""
        _, errors = validate_payload(user_model, {"email": "a@b.c", "scor": 1})
        assert errors == ["Unknown field 'scor'. Did you mean: score, scores?"]


class TestModelDef:
    """Tests for ModelDef and FieldDef construction."""

    def test_duplicate_field_names(self):
        """Duplicate field names are rejected."""
        with pytest.raises(ValueError, match="Duplicate field name"):
            ModelDef(name="M", fields=(field("a", "int"), field("a", "str")))

    def test_enum_requires_values(self):
        """ENUM fields need enum_values."""
        with pytest.raises(ValueError, match="enum_values required"):
            field("status", "enum")

    @pytest.mark.parametrize("name", ["", "$x", "a.b"])
    def test_invalid_field_names(self, name):
        """Field names must be addressable."""
        with pytest.raises(ValueError):
            field(name, "str")

    def test_unknown_kind(self):
        """Unknown kind string is rejected."""
        with pytest.raises(ValueError, match="Invalid field kind"):
            field("a", "uuid")

    def test_private_field_names(self):
        """private_field_names lists hidden fields."""
        model = ModelDef(
            name="User",
            fields=(field("email", "str"), field("password_hash", "str", private=True)),
        )
        assert model.private_field_names() == {"password_hash"}
