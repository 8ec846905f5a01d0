from __future__ import annotations

"""Query normalization.

Incoming queries come in two shapes:

- **canonical**: `{"$query": {...selector...}, "$orderby": ..., ...}`
- **flat**: selector fields mixed with modifiers, e.g.
  `{"name": "x", "$limit": 5, "$count": True}`

`parse_query` tags the input as one of the two, and `canonicalize` turns either
into a `CanonicalQuery`. Everything downstream only sees `CanonicalQuery`.
Unknown keys in a flat query are always treated as selector fields, so
normalization never fails.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union

META_OPERATORS = frozenset(
    {
        "$comment",
        "$explain",
        "$hint",
        "$maxScan",
        "$max",
        "$min",
        "$orderby",
        "$returnKey",
        "$showDiskLoc",
        "$snapshot",
        "$count",
        "$aggregate",
    }
)

CURSOR_OPERATORS: Mapping[str, str] = {
    "$limit": "limit",
    "$skip": "skip",
}

QUERY_KEY = "$query"
FIND_OPTIONS_KEY = "$findOptions"


@dataclass(frozen=True)
class CanonicalExpression:
    raw: Mapping[str, Any]


@dataclass(frozen=True)
class FlatExpression:
    raw: Mapping[str, Any]


QueryExpression = Union[CanonicalExpression, FlatExpression]


@dataclass(frozen=True)
class CanonicalQuery:
    selector: Dict[str, Any] = field(default_factory=dict)
    find_options: Dict[str, Any] | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_aggregate(self) -> bool:
        return self.meta.get("$aggregate") is not None

    @property
    def is_count(self) -> bool:
        return bool(self.meta.get("$count"))

    def to_document(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {QUERY_KEY: self.selector}
        if self.find_options is not None:
            doc[FIND_OPTIONS_KEY] = self.find_options
        doc.update(self.meta)
        return doc


def parse_query(expression: Any) -> QueryExpression:
    if not isinstance(expression, Mapping):
        return FlatExpression(raw={})
    if QUERY_KEY in expression:
        return CanonicalExpression(raw=expression)
    return FlatExpression(raw=expression)


def canonicalize(expression: QueryExpression) -> CanonicalQuery:
    # The result never shares mutable state with the input expression.
    if isinstance(expression, CanonicalExpression):
        raw = copy.deepcopy(dict(expression.raw))
        wrapped = raw.pop(QUERY_KEY)
        options = raw.pop(FIND_OPTIONS_KEY, None)
        return CanonicalQuery(
            selector=dict(wrapped) if isinstance(wrapped, Mapping) else {},
            find_options=dict(options) if isinstance(options, Mapping) else None,
            meta=raw,
        )

    selector: Dict[str, Any] = {}
    find_options: Dict[str, Any] | None = None
    meta: Dict[str, Any] = {}
    for key, value in expression.raw.items():
        if key in META_OPERATORS:
            meta[key] = copy.deepcopy(value)
        elif key in CURSOR_OPERATORS:
            if find_options is None:
                find_options = {}
            find_options[CURSOR_OPERATORS[key]] = value
        else:
            selector[key] = copy.deepcopy(value)
    return CanonicalQuery(selector=selector, find_options=find_options, meta=meta)


def normalize(expression: Any) -> CanonicalQuery:
    return canonicalize(parse_query(expression))


def normalize_query(expression: Any) -> Dict[str, Any]:
    """Return the canonical dict form: `{$query, $findOptions?, <meta>...}`."""
    return normalize(expression).to_document()
