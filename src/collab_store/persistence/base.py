from __future__ import annotations

from typing import Any, List, Protocol

from collab_store.core.models import Op, Snapshot
from collab_store.query.executor import QueryResult


class DocumentStore(Protocol):
    """Versioned snapshot and op-log storage used by a sync server.

    All methods are coroutines that complete on a later event-loop tick.
    Callers must not issue overlapping commits for the same document.
    """

    async def commit(self, collection: str, doc_id: str, op: Op, snapshot: Snapshot) -> bool: ...

    async def get_snapshot(self, collection: str, doc_id: str, fields: Any = None) -> Snapshot: ...

    async def get_ops(
        self, collection: str, doc_id: str, from_version: int, to_version: int | None = None
    ) -> List[Op]: ...

    async def query(
        self, collection: str, query: Any, fields: Any = None, options: Any = None
    ) -> QueryResult: ...

    async def close(self) -> None: ...
