"""
Query matching and update patches for the embedded document store.

Queries are plain dicts:
- {"name": "a"} matches documents whose name equals "a" (or whose name
  is a list containing "a")
- {"profile.age": {"$gte": 18}} uses dot-notation paths and operators
- {"items.sku": "x"} reaches into arrays of subdocuments
- {"$or": [{...}, {...}]} combines sub-queries

Supported comparison operators: $lt, $lte, $gt, $gte, $ne, $in, $nin,
$exists, $regex, $size. Logical operators: $or, $and, $not.

Update patches are either a replacement document or a set of modifiers
($set, $unset, $inc, $push).

Invariants:
    - Matching never mutates the document
    - apply_patch returns a new document and keeps _id
    - Malformed queries raise InvalidQueryError
"""

from __future__ import annotations

import copy
import re
from typing import Any, Callable

from ..errors import InvalidQueryError

ID_FIELD = "_id"

_MISSING = object()


def _resolve(value: Any, parts: list[str]) -> Any:
    if not parts:
        return value
    head, rest = parts[0], parts[1:]
    if isinstance(value, dict):
        if head not in value:
            return _MISSING
        return _resolve(value[head], rest)
    if isinstance(value, list):
        if head.isdigit():
            index = int(head)
            return _resolve(value[index], rest) if index < len(value) else _MISSING
        # Project the path over every element of an array of subdocuments
        found = (_resolve(item, parts) for item in value)
        return [item for item in found if item is not _MISSING]
    return _MISSING


def get_path(document: dict[str, Any], path: str) -> Any:
    """Resolve a dot-notation path, returning _MISSING when absent.

    A numeric part indexes into a list. Any other part applied to a list
    is resolved against each element, and the found values come back as
    a list: {"items": [{"sku": "a"}, {"sku": "b"}]} gives ["a", "b"] for
    "items.sku".
    """
    return _resolve(document, path.split("."))


def _comparable(a: Any, b: Any) -> bool:
    """Ordering comparisons only apply to values of compatible types."""
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return True
    return isinstance(a, str) and isinstance(b, str)


def _same(a: Any, b: Any) -> bool:
    """Deep equality where booleans never equal numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(_same(a[key], b[key]) for key in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(_same(x, y) for x, y in zip(a, b))
    return a == b


def _equals(value: Any, expected: Any) -> bool:
    if isinstance(value, list) and not isinstance(expected, list):
        return any(_equals(item, expected) for item in value)
    return _same(value, expected)


def _check_keys(mapping: dict[Any, Any], what: str) -> None:
    for key in mapping:
        if not isinstance(key, str):
            raise InvalidQueryError(f"{what} keys must be strings, got {key!r}")


def _op_lt(value: Any, arg: Any) -> bool:
    return _comparable(value, arg) and value < arg


def _op_lte(value: Any, arg: Any) -> bool:
    return _comparable(value, arg) and value <= arg


def _op_gt(value: Any, arg: Any) -> bool:
    return _comparable(value, arg) and value > arg


def _op_gte(value: Any, arg: Any) -> bool:
    return _comparable(value, arg) and value >= arg


def _op_ne(value: Any, arg: Any) -> bool:
    return value is _MISSING or not _equals(value, arg)


def _op_in(value: Any, arg: Any) -> bool:
    if not isinstance(arg, list):
        raise InvalidQueryError("$in operator requires a list", operator="$in")
    return value is not _MISSING and any(_equals(value, candidate) for candidate in arg)


def _op_nin(value: Any, arg: Any) -> bool:
    if not isinstance(arg, list):
        raise InvalidQueryError("$nin operator requires a list", operator="$nin")
    return not _op_in(value, arg)


def _op_exists(value: Any, arg: Any) -> bool:
    return (value is not _MISSING) == bool(arg)


def _op_regex(value: Any, arg: Any) -> bool:
    if isinstance(arg, str):
        arg = re.compile(arg)
    if not isinstance(arg, re.Pattern):
        raise InvalidQueryError("$regex operator requires a pattern", operator="$regex")
    return isinstance(value, str) and arg.search(value) is not None


def _op_size(value: Any, arg: Any) -> bool:
    if not isinstance(arg, int) or isinstance(arg, bool):
        raise InvalidQueryError("$size operator requires an integer", operator="$size")
    return isinstance(value, list) and len(value) == arg


_COMPARISON_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$lt": _op_lt,
    "$lte": _op_lte,
    "$gt": _op_gt,
    "$gte": _op_gte,
    "$ne": _op_ne,
    "$in": _op_in,
    "$nin": _op_nin,
    "$exists": _op_exists,
    "$regex": _op_regex,
    "$size": _op_size,
}


def _is_operator_spec(criterion: Any) -> bool:
    """A criterion whose keys all start with $ is an operator spec."""
    if not isinstance(criterion, dict) or not criterion:
        return False
    _check_keys(criterion, "Criterion")
    dollar_keys = [key.startswith("$") for key in criterion]
    if any(dollar_keys) and not all(dollar_keys):
        raise InvalidQueryError("Cannot mix operators and plain fields in one criterion")
    return all(dollar_keys)


def _match_criterion(value: Any, criterion: Any) -> bool:
    if not _is_operator_spec(criterion):
        return value is not _MISSING and _equals(value, criterion)

    for operator, arg in criterion.items():
        handler = _COMPARISON_OPERATORS.get(operator)
        if handler is None:
            raise InvalidQueryError(f"Unknown comparison operator {operator}", operator=operator)
        if not handler(value, arg):
            return False
    return True


def match_document(document: dict[str, Any], query: dict[str, Any]) -> bool:
    """Check whether a document satisfies a query.

    Args:
        document: Stored document
        query: Query dict (empty matches everything)

    Returns:
        True if every criterion matches

    Raises:
        InvalidQueryError: If the query is malformed
    """
    if not isinstance(query, dict):
        raise InvalidQueryError(f"Query must be a dict, got {type(query).__name__}")
    _check_keys(query, "Query")

    for key, criterion in query.items():
        if key == "$or":
            if not isinstance(criterion, list):
                raise InvalidQueryError("$or operator requires a list", operator="$or")
            if not any(match_document(document, sub) for sub in criterion):
                return False
        elif key == "$and":
            if not isinstance(criterion, list):
                raise InvalidQueryError("$and operator requires a list", operator="$and")
            if not all(match_document(document, sub) for sub in criterion):
                return False
        elif key == "$not":
            if match_document(document, criterion):
                return False
        elif key.startswith("$"):
            raise InvalidQueryError(f"Unknown logical operator {key}", operator=key)
        elif not _match_criterion(get_path(document, key), criterion):
            return False
    return True


def _set_path(document: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    target = document
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[parts[-1]] = value


def _unset_path(document: dict[str, Any], path: str) -> None:
    parts = path.split(".")
    target: Any = document
    for part in parts[:-1]:
        target = target.get(part) if isinstance(target, dict) else None
    if isinstance(target, dict):
        target.pop(parts[-1], None)


def _apply_modifiers(document: dict[str, Any], patch: dict[str, Any]) -> None:
    for modifier, fields in patch.items():
        if not isinstance(fields, dict):
            raise InvalidQueryError(f"{modifier} modifier requires a dict", operator=modifier)
        _check_keys(fields, modifier)
        if any(path.split(".")[0] == ID_FIELD for path in fields):
            raise InvalidQueryError("Cannot modify _id", operator=modifier)

        if modifier == "$set":
            for path, value in fields.items():
                _set_path(document, path, copy.deepcopy(value))
        elif modifier == "$unset":
            for path in fields:
                _unset_path(document, path)
        elif modifier == "$inc":
            for path, amount in fields.items():
                current = get_path(document, path)
                if current is _MISSING:
                    current = 0
                if not isinstance(amount, (int, float)) or not isinstance(current, (int, float)):
                    raise InvalidQueryError(f"$inc on non-numeric field '{path}'", operator="$inc")
                _set_path(document, path, current + amount)
        elif modifier == "$push":
            for path, value in fields.items():
                current = get_path(document, path)
                if current is _MISSING:
                    current = []
                if not isinstance(current, list):
                    raise InvalidQueryError(f"$push on non-list field '{path}'", operator="$push")
                _set_path(document, path, current + [copy.deepcopy(value)])
        else:
            raise InvalidQueryError(f"Unknown modifier {modifier}", operator=modifier)


def apply_patch(document: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Apply an update patch to a document.

    A patch made only of modifiers ($set, $unset, $inc, $push) merges into
    the existing document. A patch with no modifiers replaces the document.

    Args:
        document: Stored document (not mutated)
        patch: Replacement document or modifier dict

    Returns:
        New document with the same _id

    Raises:
        InvalidQueryError: If the patch mixes modes or touches _id
    """
    if not isinstance(patch, dict):
        raise InvalidQueryError(f"Update must be a dict, got {type(patch).__name__}")
    _check_keys(patch, "Update")

    modifier_keys = [key.startswith("$") for key in patch]
    if any(modifier_keys) and not all(modifier_keys):
        raise InvalidQueryError("Cannot mix modifiers and plain fields in an update")

    if patch and all(modifier_keys):
        updated = copy.deepcopy(document)
        _apply_modifiers(updated, patch)
        return updated

    if ID_FIELD in patch and patch[ID_FIELD] != document.get(ID_FIELD):
        raise InvalidQueryError("Cannot modify _id")
    replacement = copy.deepcopy(patch)
    replacement[ID_FIELD] = document[ID_FIELD]
    return replacement
