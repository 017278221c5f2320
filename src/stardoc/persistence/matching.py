"""
Query Matching for the Memory Backend

Evaluates the subset of MongoDB filter documents the in-memory store
understands:

- field equality, dotted paths into nested records, and array containment
- ``$eq $ne $gt $gte $lt $lte $in $nin $exists $regex $not``
- ``$and $or $nor`` at any level
"""

import re
from typing import Any, Callable, Dict, List, Optional

from ..errors import BackendError

_MISSING = object()


def get_path(record: Dict[str, Any], path: str) -> Any:
    """Follow a dotted path through nested dicts, or return the missing marker"""
    value: Any = record
    for part in path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return _MISSING
    return value


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(value: Any, operand: Any) -> bool:
        if value is _MISSING or value is None or operand is None:
            return False
        candidates = value if isinstance(value, list) else [value]
        for candidate in candidates:
            try:
                if op(candidate, operand):
                    return True
            except TypeError:
                continue
        return False
    return compare


def _equals(value: Any, operand: Any) -> bool:
    if value is _MISSING:
        return operand is None
    if value == operand:
        return True
    return isinstance(value, list) and not isinstance(operand, list) and operand in value


def _in(value: Any, operand: Any) -> bool:
    return any(_equals(value, candidate) for candidate in operand)


def _regex(value: Any, operand: Any) -> bool:
    pattern = operand if isinstance(operand, re.Pattern) else re.compile(operand)
    candidates = value if isinstance(value, list) else [value]
    return any(isinstance(candidate, str) and pattern.search(candidate) for candidate in candidates)


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "$eq": _equals,
    "$ne": lambda value, operand: not _equals(value, operand),
    "$gt": _compare(lambda a, b: a > b),
    "$gte": _compare(lambda a, b: a >= b),
    "$lt": _compare(lambda a, b: a < b),
    "$lte": _compare(lambda a, b: a <= b),
    "$in": _in,
    "$nin": lambda value, operand: not _in(value, operand),
    "$exists": lambda value, operand: (value is not _MISSING) == bool(operand),
    "$regex": _regex,
}


def _is_operator_document(condition: Any) -> bool:
    return isinstance(condition, dict) and bool(condition) and all(
        key.startswith("$") for key in condition
    )


def _match_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, re.Pattern):
        return _regex(value, condition)

    if not _is_operator_document(condition):
        return _equals(value, condition)

    for operator, operand in condition.items():
        if operator == "$not":
            if _match_condition(value, operand):
                return False
            continue
        if operator == "$options":
            continue
        if operator == "$regex" and "$options" in condition:
            flags = re.IGNORECASE if "i" in condition["$options"] else 0
            operand = re.compile(operand, flags)
        handler = _OPERATORS.get(operator)
        if handler is None:
            raise BackendError(f"Unsupported query operator {operator}")
        if not handler(value, operand):
            return False
    return True


def matches(record: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
    """True if ``record`` satisfies the filter document ``query``"""
    if not query:
        return True

    for key, condition in query.items():
        if key == "$and":
            if not all(matches(record, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches(record, sub) for sub in condition):
                return False
        elif key == "$nor":
            if any(matches(record, sub) for sub in condition):
                return False
        elif key.startswith("$"):
            raise BackendError(f"Unsupported query operator {key}")
        elif not _match_condition(get_path(record, key), condition):
            return False
    return True


def sort_records(records: List[Dict[str, Any]], key: str, descending: bool = False) -> List[Dict[str, Any]]:
    """Sort by a dotted path; missing and None values sort first ascending"""
    def sort_key(record):
        value = get_path(record, key)
        if value is _MISSING or value is None:
            return (0, 0)
        return (1, value)

    return sorted(records, key=sort_key, reverse=descending)


def equality_fields(query: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Plain ``field: value`` pairs of a query, used to seed upserted records"""
    if not query:
        return {}
    return {
        key: condition for key, condition in query.items()
        if not key.startswith("$") and "." not in key
        and not _is_operator_document(condition) and not isinstance(condition, re.Pattern)
    }


__all__ = ["matches", "get_path", "sort_records", "equality_fields"]
