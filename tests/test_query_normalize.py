"""Tests for query normalization into the canonical shape."""

from collab_store.core.query import (
    CanonicalExpression,
    FlatExpression,
    normalize,
    normalize_query,
    parse_query,
)


def test_flat_query_splits_selector_cursor_and_meta() -> None:
    assert normalize_query({"foo": 1, "$limit": 5, "$count": True}) == {
        "$query": {"foo": 1},
        "$findOptions": {"limit": 5},
        "$count": True,
    }


def test_flat_query_without_modifiers() -> None:
    assert normalize_query({"name": "x", "age": {"$gt": 3}}) == {"$query": {"name": "x", "age": {"$gt": 3}}}


def test_skip_and_limit_map_to_find_options() -> None:
    canonical = normalize({"$skip": 10, "$limit": 2, "$orderby": {"n": -1}})

    assert canonical.selector == {}
    assert canonical.find_options == {"skip": 10, "limit": 2}
    assert canonical.meta == {"$orderby": {"n": -1}}


def test_unknown_dollar_keys_are_selector_fields() -> None:
    assert normalize_query({"$or": [{"a": 1}, {"b": 2}], "$weird": 1}) == {
        "$query": {"$or": [{"a": 1}, {"b": 2}], "$weird": 1}
    }


def test_all_meta_operators_are_lifted() -> None:
    expression = {
        "$comment": "c",
        "$explain": False,
        "$hint": {"a": 1},
        "$maxScan": 3,
        "$max": {"a": 9},
        "$min": {"a": 0},
        "$orderby": {"a": 1},
        "$returnKey": False,
        "$showDiskLoc": False,
        "$snapshot": True,
        "$count": True,
        "$aggregate": [{"$match": {}}],
    }
    assert normalize_query(expression) == {"$query": {}, **expression}


def test_canonical_query_is_copied_not_aliased() -> None:
    selector = {"tags": {"$in": ["a"]}}
    expression = {"$query": selector, "$orderby": {"n": 1}}

    parsed = parse_query(expression)
    canonical = normalize(expression)
    canonical.selector["tags"]["$in"].append("b")

    assert isinstance(parsed, CanonicalExpression)
    assert selector == {"tags": {"$in": ["a"]}}
    assert canonical.meta == {"$orderby": {"n": 1}}


def test_canonical_query_keeps_find_options() -> None:
    canonical = normalize({"$query": {"a": 1}, "$findOptions": {"limit": 1}})

    assert canonical.find_options == {"limit": 1}
    assert canonical.to_document() == {"$query": {"a": 1}, "$findOptions": {"limit": 1}}


def test_malformed_input_becomes_empty_selector() -> None:
    assert isinstance(parse_query(None), FlatExpression)
    assert normalize_query(None) == {"$query": {}}
    assert normalize_query({"$query": None}) == {"$query": {}}
