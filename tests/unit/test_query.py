"""
Unit tests for query matching and update patches.

Tests cover:
- Equality, array membership and dot paths
- Comparison and logical operators
- Modifier and replacement patches
- Malformed queries
"""

import re

import pytest

from docadapter.errors import InvalidQueryError
from docadapter.store.query import apply_patch, get_path, match_document

DOC = {
    "_id": "abc",
    "name": "alice",
    "age": 30,
    "tags": ["admin", "ops"],
    "profile": {"city": "Oslo", "langs": ["no", "en"]},
    "active": True,
}


class TestMatchDocument:
    """Tests for match_document."""

    def test_empty_query_matches(self):
        """Empty query matches everything."""
        assert match_document(DOC, {})

    def test_equality(self):
        """Plain values compare by equality."""
        assert match_document(DOC, {"name": "alice", "age": 30})
        assert not match_document(DOC, {"name": "bob"})

    def test_missing_field_does_not_match(self):
        """Absent fields never equal a value."""
        assert not match_document(DOC, {"missing": None})

    def test_array_membership(self):
        """Scalar criterion matches any array element."""
        assert match_document(DOC, {"tags": "ops"})
        assert match_document(DOC, {"tags": ["admin", "ops"]})
        assert not match_document(DOC, {"tags": "dev"})

    def test_dot_path(self):
        """Dot notation reaches nested fields and list indexes."""
        assert match_document(DOC, {"profile.city": "Oslo"})
        assert match_document(DOC, {"profile.langs.1": "en"})
        assert get_path(DOC, "profile.zip") is not None  # sentinel, not None
        assert not match_document(DOC, {"profile.zip": "0150"})

    def test_dot_path_into_array_of_subdocuments(self):
        """A dot path through an array checks every element."""
        doc = {"items": [{"sku": "a", "qty": 1}, {"sku": "b"}]}

        assert get_path(doc, "items.sku") == ["a", "b"]
        assert get_path(doc, "items.qty") == [1]
        assert match_document(doc, {"items.sku": "b"})
        assert match_document(doc, {"items.qty": {"$exists": True}})
        assert not match_document(doc, {"items.sku": "c"})
        assert match_document(doc, {"items.0.sku": "a"})

    def test_booleans_never_equal_numbers(self):
        """True and 1 are different values."""
        assert match_document(DOC, {"active": True})
        assert not match_document(DOC, {"active": 1})
        assert not match_document({"n": 1}, {"n": True})
        assert not match_document({"n": 0}, {"n": False})
        assert not match_document({"n": 1}, {"n": {"$in": [True]}})
        assert match_document({"n": 1}, {"n": {"$nin": [True]}})
        assert match_document({"n": 1}, {"n": {"$ne": True}})
        assert not match_document({"n": [1, 0]}, {"n": [True, False]})
        assert not match_document({"n": {"a": 1}}, {"n": {"a": True}})
        assert match_document({"n": 1.0}, {"n": 1})

    @pytest.mark.parametrize(
        "criterion,expected",
        [
            ({"$gt": 29}, True),
            ({"$gte": 30}, True),
            ({"$lt": 30}, False),
            ({"$lte": 30}, True),
            ({"$ne": 31}, True),
            ({"$in": [1, 30]}, True),
            ({"$nin": [1, 30]}, False),
            ({"$gt": 20, "$lt": 40}, True),
            ({"$gt": "20"}, False),
        ],
    )
    def test_comparison_operators(self, criterion, expected):
        """Comparison operators on a numeric field."""
        assert match_document(DOC, {"age": criterion}) is expected

    def test_exists(self):
        """$exists checks presence."""
        assert match_document(DOC, {"name": {"$exists": True}})
        assert match_document(DOC, {"email": {"$exists": False}})
        assert not match_document(DOC, {"email": {"$exists": True}})

    def test_regex(self):
        """$regex accepts strings and compiled patterns."""
        assert match_document(DOC, {"name": {"$regex": "^ali"}})
        assert match_document(DOC, {"name": {"$regex": re.compile("ICE", re.I)}})
        assert not match_document(DOC, {"age": {"$regex": "3"}})

    def test_size(self):
        """$size matches array length."""
        assert match_document(DOC, {"tags": {"$size": 2}})
        assert not match_document(DOC, {"tags": {"$size": 3}})

    def test_logical_operators(self):
        """$or, $and and $not combine sub-queries."""
        assert match_document(DOC, {"$or": [{"name": "bob"}, {"age": 30}]})
        assert not match_document(DOC, {"$and": [{"name": "alice"}, {"age": 31}]})
        assert match_document(DOC, {"$not": {"name": "bob"}})

    @pytest.mark.parametrize(
        "query",
        [
            {"age": {"$bogus": 1}},
            {"$nor": []},
            {"$or": {"name": "x"}},
            {"age": {"$in": 30}},
            {"age": {"$gt": 1, "plain": 2}},
            {"tags": {"$size": "2"}},
            {"age": {1: 2}},
            {1: "alice"},
        ],
    )
    def test_invalid_queries(self, query):
        """Malformed queries raise InvalidQueryError."""
        with pytest.raises(InvalidQueryError):
            match_document(DOC, query)

    def test_non_dict_query(self):
        """Query must be a dict."""
        with pytest.raises(InvalidQueryError):
            match_document(DOC, "name")


class TestApplyPatch:
    """Tests for apply_patch."""

    def test_set_merges(self):
        """$set merges and creates nested paths."""
        result = apply_patch(DOC, {"$set": {"name": "bob", "profile.zip": "0150"}})

        assert result["name"] == "bob"
        assert result["age"] == 30
        assert result["profile"] == {"city": "Oslo", "langs": ["no", "en"], "zip": "0150"}
        assert DOC["name"] == "alice"
        assert "zip" not in DOC["profile"]

    def test_unset(self):
        """$unset removes fields."""
        result = apply_patch(DOC, {"$unset": {"age": True, "profile.city": True}})
        assert "age" not in result
        assert result["profile"] == {"langs": ["no", "en"]}

    def test_inc(self):
        """$inc adds to numbers, starting from zero."""
        result = apply_patch(DOC, {"$inc": {"age": 2, "visits": 1}})
        assert result["age"] == 32
        assert result["visits"] == 1

    def test_push(self):
        """$push appends to lists."""
        result = apply_patch(DOC, {"$push": {"tags": "dev", "new": 1}})
        assert result["tags"] == ["admin", "ops", "dev"]
        assert result["new"] == [1]
        assert DOC["tags"] == ["admin", "ops"]

    def test_replacement_keeps_id(self):
        """Plain patch replaces everything but _id."""
        assert apply_patch(DOC, {"name": "bob"}) == {"_id": "abc", "name": "bob"}

    @pytest.mark.parametrize(
        "patch",
        [
            {"$set": {"name": "x"}, "age": 1},
            {"$set": {"_id": "other"}},
            {"_id": "other"},
            {"$rename": {"a": "b"}},
            {"$inc": {"name": 1}},
            {"$push": {"name": 1}},
            {"$set": "name"},
            {"$set": {1: "x"}},
            {1: "x"},
        ],
    )
    def test_invalid_patches(self, patch):
        """Malformed patches raise InvalidQueryError."""
        with pytest.raises(InvalidQueryError):
            apply_patch(DOC, patch)
