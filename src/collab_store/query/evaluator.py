from __future__ import annotations

"""MongoDB-subset filter and aggregation evaluation over in-memory documents.

Backed by mongomock's matching and pipeline engines, applied directly to the
candidate dicts: nothing is inserted anywhere, so candidates need no `_id`
and are never modified. `find` returns the matching candidate objects
themselves, in candidate order unless a sort is given.
"""

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import mongomock
from mongomock import aggregate as mongo_aggregate
from mongomock import filtering


SortSpec = List[Tuple[str, int]]


def sort_spec(orderby: Any) -> SortSpec | None:
    """Turn a `$orderby` value (`{"field": 1, ...}` or pairs) into a sort list."""
    if not orderby:
        return None
    if isinstance(orderby, Mapping):
        return [(str(k), int(v)) for k, v in orderby.items()]
    return [(str(k), int(v)) for k, v in orderby]


class MongoEvaluator:
    def __init__(self) -> None:
        # Only consulted by stages that reach other collections ($lookup, $out).
        self._db = mongomock.MongoClient()["collab_store"]

    def find(
        self,
        selector: Mapping[str, Any],
        candidates: Iterable[Dict[str, Any]],
        *,
        skip: int | None = None,
        limit: int | None = None,
        sort: SortSpec | None = None,
    ) -> List[Dict[str, Any]]:
        matches = [doc for doc in candidates if filtering.filter_applies(dict(selector), doc)]
        for key, direction in reversed(sort or []):
            if key == "$natural":
                if direction < 0:
                    matches.reverse()
                continue
            matches.sort(key=lambda doc: filtering.resolve_sort_key(key, doc), reverse=direction < 0)
        if skip:
            matches = matches[int(skip):]
        if limit:
            matches = matches[: abs(int(limit))]
        return matches

    def aggregate(
        self,
        pipeline: Sequence[Mapping[str, Any]],
        candidates: Iterable[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        stages = [dict(stage) for stage in pipeline]
        return list(mongo_aggregate.process_pipeline(list(candidates), self._db, stages, None))
