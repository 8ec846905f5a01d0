from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


# Ops are opaque to the store; they are stored and returned as given.
Op = Dict[str, Any]


class Snapshot(BaseModel):
    """Materialized state of one document at version `v`.

    `type` is None for a document that was deleted or never created; `data`
    is None in that case as well.
    """

    id: str
    v: int = Field(ge=0)
    type: str | None = None
    data: Any = None

    @classmethod
    def tombstone(cls, doc_id: str, version: int) -> "Snapshot":
        return cls(id=doc_id, v=version, type=None, data=None)

    @property
    def is_tombstone(self) -> bool:
        return not self.type

    def clone(self) -> "Snapshot":
        return self.model_copy(deep=True)
