from __future__ import annotations


class StoreError(Exception):
    """Base class for errors surfaced by the document store."""


class ConsistencyError(StoreError):
    """The op log does not have the length the commit expects.

    Only reachable when the commit protocol is violated, e.g. two stores
    writing the same document without coordinating.
    """

    def __init__(self, collection: str, doc_id: str, expected_slot: int, log_length: int) -> None:
        self.collection = collection
        self.doc_id = doc_id
        self.expected_slot = expected_slot
        self.log_length = log_length
        super().__init__(
            f"internal consistency error: op log for {collection}/{doc_id} has "
            f"{log_length} entries, cannot write version slot {expected_slot}"
        )


class VersionConflictError(StoreError):
    """A serialized submit was still rejected by the store."""

    def __init__(self, collection: str, doc_id: str, version: int) -> None:
        self.collection = collection
        self.doc_id = doc_id
        self.version = version
        super().__init__(f"version conflict committing {collection}/{doc_id} at v={version}")
