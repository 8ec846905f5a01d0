from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Tuple

from collab_store.core.errors import VersionConflictError
from collab_store.core.models import Op, Snapshot
from collab_store.persistence.base import DocumentStore


logger = logging.getLogger(__name__)

# Builds the next snapshot from the current one and an op. The returned
# snapshot's version is overwritten by the service.
ApplyFn = Callable[[Snapshot, Op], Snapshot]


class DocumentService:
    """Serializes writes per document in front of a DocumentStore.

    The store's version check is only sound if commits for one document are
    not in flight at the same time; this service queues them on a per
    (collection, id) lock.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._locks: Dict[Tuple[str, str], asyncio.Lock] = {}
        self._global_lock = asyncio.Lock()

    async def commit(self, collection: str, doc_id: str, op: Op, snapshot: Snapshot) -> bool:
        lock = await self._get_lock(collection, doc_id)
        async with lock:
            return await self._commit(collection, doc_id, op, snapshot)

    async def submit(self, collection: str, doc_id: str, op: Op, apply: ApplyFn) -> Snapshot:
        """Apply `op` to the current snapshot and commit the result as the next version."""
        lock = await self._get_lock(collection, doc_id)
        async with lock:
            current = await self._store.get_snapshot(collection, doc_id)
            proposed = apply(current.clone(), op)
            proposed = proposed.model_copy(update={"id": doc_id, "v": current.v + 1})
            if not await self._commit(collection, doc_id, op, proposed):
                raise VersionConflictError(collection, doc_id, proposed.v)
            return proposed

    async def get_snapshot(self, collection: str, doc_id: str) -> Snapshot:
        return await self._store.get_snapshot(collection, doc_id)

    async def get_ops(
        self, collection: str, doc_id: str, from_version: int, to_version: int | None = None
    ) -> List[Op]:
        return await self._store.get_ops(collection, doc_id, from_version, to_version)

    async def _commit(self, collection: str, doc_id: str, op: Op, snapshot: Snapshot) -> bool:
        succeeded = await self._store.commit(collection, doc_id, op, snapshot)
        logger.debug(
            "queued commit done succeeded=%s",
            succeeded,
            extra={"collection": collection, "doc_id": doc_id, "version": snapshot.v},
        )
        return succeeded

    async def _get_lock(self, collection: str, doc_id: str) -> asyncio.Lock:
        async with self._global_lock:
            return self._locks.setdefault((collection, doc_id), asyncio.Lock())
