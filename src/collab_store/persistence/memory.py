from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from collab_store.core.errors import ConsistencyError
from collab_store.core.models import Op, Snapshot
from collab_store.core.query import normalize
from collab_store.core.versioning import OpLog, version_of
from collab_store.persistence.base import DocumentStore
from collab_store.query.executor import QueryExecutor, QueryResult


logger = logging.getLogger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """Keeps every op and the latest snapshot of every document in memory.

    Nothing is ever evicted and nothing survives a restart. Each public
    coroutine yields to the event loop once and then runs synchronously, so
    a single instance needs no locks. Callers that read a snapshot and then
    commit its successor must still queue those steps per document, or
    concurrent writers will see their commits rejected.
    """

    def __init__(self, executor: QueryExecutor | None = None) -> None:
        # collection -> doc id -> snapshot; tombstoned docs have no entry
        self._docs: Dict[str, Dict[str, Snapshot]] = {}
        # collection -> doc id -> op log; an op's version is its index
        self._ops: Dict[str, Dict[str, OpLog]] = {}
        self._executor = executor or QueryExecutor()
        self.closed = False

    async def close(self) -> None:
        self.closed = True

    async def commit(self, collection: str, doc_id: str, op: Op, snapshot: Snapshot) -> bool:
        """Append `op` and store `snapshot` if it is exactly the next version.

        Returns False on a version mismatch, which is expected under concurrent
        writers. Raises ConsistencyError if the op log cannot take the write; in
        that case the snapshot is not written.
        """
        await asyncio.sleep(0)
        version = self._get_version_sync(collection, doc_id)
        if snapshot.v != version + 1:
            logger.info(
                "commit rejected: version conflict",
                extra={"collection": collection, "doc_id": doc_id, "version": version},
            )
            return False
        try:
            self._write_op_sync(collection, doc_id, op, slot=version)
        except ConsistencyError:
            logger.warning(
                "commit failed: op log inconsistent",
                extra={"collection": collection, "doc_id": doc_id, "version": version},
            )
            raise
        self._write_snapshot_sync(collection, doc_id, snapshot)
        logger.debug(
            "commit accepted",
            extra={"collection": collection, "doc_id": doc_id, "version": snapshot.v},
        )
        return True

    async def get_snapshot(self, collection: str, doc_id: str, fields: Any = None) -> Snapshot:
        """Current snapshot, or a tombstone at the op-log version if none is stored.

        `fields` is accepted for interface compatibility; no projection is applied.
        """
        await asyncio.sleep(0)
        snapshot = self._get_snapshot_sync(collection, doc_id)
        logger.debug(
            "snapshot read",
            extra={"collection": collection, "doc_id": doc_id, "version": snapshot.v},
        )
        return snapshot

    async def get_ops(
        self, collection: str, doc_id: str, from_version: int, to_version: int | None = None
    ) -> List[Op]:
        """Ops in [from_version, to_version); to the end of the log if `to_version` is None."""
        await asyncio.sleep(0)
        log = self._get_op_log_sync(collection, doc_id)
        logger.debug(
            "ops read from=%s to=%s",
            from_version,
            to_version,
            extra={"collection": collection, "doc_id": doc_id, "version": log.version},
        )
        return log.slice(from_version, to_version)

    async def query(
        self, collection: str, query: Any, fields: Any = None, options: Any = None
    ) -> QueryResult:
        await asyncio.sleep(0)
        canonical = normalize(query)
        snapshots = [
            self._get_snapshot_sync(collection, doc_id) for doc_id in self._docs.get(collection, {})
        ]
        result = self._executor.execute(canonical, snapshots)
        logger.debug(
            "query executed",
            extra={"collection": collection},
        )
        return result

    def _write_op_sync(self, collection: str, doc_id: str, op: Op, slot: int) -> None:
        self._get_op_log_sync(collection, doc_id).append_at(slot, op)

    def _write_snapshot_sync(self, collection: str, doc_id: str, snapshot: Snapshot) -> None:
        # A snapshot without a type is a delete.
        collection_docs = self._docs.setdefault(collection, {})
        if snapshot.is_tombstone:
            collection_docs.pop(doc_id, None)
        else:
            collection_docs[doc_id] = snapshot.model_copy(update={"id": doc_id}, deep=True)

    def _get_snapshot_sync(self, collection: str, doc_id: str) -> Snapshot:
        doc = self._docs.get(collection, {}).get(doc_id)
        if doc is not None:
            # The map key is the document id, whatever id the committer sent.
            return doc.model_copy(update={"id": doc_id}, deep=True)
        return Snapshot.tombstone(doc_id, self._get_version_sync(collection, doc_id))

    def _get_op_log_sync(self, collection: str, doc_id: str) -> OpLog:
        collection_ops = self._ops.setdefault(collection, {})
        log = collection_ops.get(doc_id)
        if log is None:
            log = collection_ops[doc_id] = OpLog(collection, doc_id)
        return log

    def _get_version_sync(self, collection: str, doc_id: str) -> int:
        return version_of(self._ops.get(collection, {}).get(doc_id))
