from __future__ import annotations

"""Version model for documents.

A document's version is the length of its op log. There is no stored
counter: the op at index `i` produced version `i + 1`, and an empty log means
version 0 (the document has never been written).
"""

import copy
from typing import Iterator, List

from collab_store.core.errors import ConsistencyError
from collab_store.core.models import Op


class OpLog:
    """Append-only, zero-indexed sequence of ops for a single document."""

    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.doc_id = doc_id
        self._entries: List[Op] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Op]:
        return iter(self._entries)

    @property
    def version(self) -> int:
        return len(self._entries)

    def append_at(self, slot: int, op: Op) -> None:
        """Store a copy of `op` at `slot`.

        `slot` must be the next free index. A gap or an overwrite of an
        occupied slot raises ConsistencyError and leaves the log untouched.
        """
        if slot != len(self._entries):
            raise ConsistencyError(
                collection=self.collection,
                doc_id=self.doc_id,
                expected_slot=slot,
                log_length=len(self._entries),
            )
        self._entries.append(copy.deepcopy(op))

    def slice(self, start: int, stop: int | None = None) -> List[Op]:
        """Deep copies of ops in [start, stop), clamped to the log bounds."""
        length = len(self._entries)
        stop = length if stop is None else stop
        start = min(max(start, 0), length)
        stop = min(max(stop, 0), length)
        if stop <= start:
            return []
        return copy.deepcopy(self._entries[start:stop])


def version_of(log: OpLog | None) -> int:
    return len(log) if log is not None else 0


def next_version(log: OpLog | None) -> int:
    return version_of(log) + 1
