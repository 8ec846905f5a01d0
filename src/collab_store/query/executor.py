from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple

from collab_store.core.models import Snapshot
from collab_store.core.query import CanonicalQuery
from collab_store.query.evaluator import MongoEvaluator, sort_spec


logger = logging.getLogger(__name__)


class QueryResult(NamedTuple):
    snapshots: List[Snapshot]
    extra: Any = None


class QueryExecutor:
    """Runs a CanonicalQuery against the live snapshots of one collection.

    Aggregations return `([], documents)`, counts return `([], n)` and plain
    finds return `(matching snapshots, None)` in evaluator order. Tombstoned
    documents are never passed in, so they can never match.
    """

    def __init__(self, evaluator: MongoEvaluator | None = None) -> None:
        self._evaluator = evaluator or MongoEvaluator()

    def execute(self, query: CanonicalQuery, snapshots: Iterable[Snapshot]) -> QueryResult:
        candidates: List[Dict[str, Any]] = []
        # id(candidate) -> snapshot it was copied from; candidates outlive the lookup
        owners: Dict[int, Snapshot] = {}
        for snapshot in snapshots:
            if not isinstance(snapshot.data, Mapping):
                logger.debug(
                    "query skips non-document data",
                    extra={"doc_id": snapshot.id, "version": snapshot.v},
                )
                continue
            candidate = copy.deepcopy(dict(snapshot.data))
            owners[id(candidate)] = snapshot
            candidates.append(candidate)

        if query.is_aggregate:
            result = self._evaluator.aggregate(query.meta["$aggregate"], candidates)
            return QueryResult(snapshots=[], extra=result)

        options = query.find_options or {}
        matches = self._evaluator.find(
            query.selector,
            candidates,
            skip=options.get("skip"),
            limit=options.get("limit"),
            sort=sort_spec(query.meta.get("$orderby")),
        )

        if query.is_count:
            return QueryResult(snapshots=[], extra=len(matches))

        return QueryResult(snapshots=[owners[id(m)] for m in matches], extra=None)
