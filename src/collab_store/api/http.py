import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from collab_store.core.errors import ConsistencyError
from collab_store.core.models import Op, Snapshot
from collab_store.persistence.base import DocumentStore
from collab_store.services.document_service import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collections")


class CommitRequest(BaseModel):
    op: Op = Field(default_factory=dict)
    snapshot: Snapshot


class CommitResponse(BaseModel):
    succeeded: bool


class OpsResponse(BaseModel):
    ops: List[Op]


class QueryRequest(BaseModel):
    query: Dict[str, Any] = Field(default_factory=dict)
    fields: Any = None
    options: Any = None


class QueryResponse(BaseModel):
    snapshots: List[Snapshot]
    extra: Any = None


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_service(request: Request) -> DocumentService:
    return request.app.state.document_service


@router.get("/{collection}/docs/{doc_id}", response_model=Snapshot)
async def read_snapshot(collection: str, doc_id: str, store: DocumentStore = Depends(get_store)) -> Snapshot:
    return await store.get_snapshot(collection, doc_id)


@router.get("/{collection}/docs/{doc_id}/ops", response_model=OpsResponse)
async def read_ops(
    collection: str,
    doc_id: str,
    from_version: int = Query(default=0, alias="from"),
    to_version: int | None = Query(default=None, alias="to"),
    store: DocumentStore = Depends(get_store),
) -> OpsResponse:
    ops = await store.get_ops(collection, doc_id, from_version, to_version)
    return OpsResponse(ops=ops)


@router.post("/{collection}/docs/{doc_id}/commit", response_model=CommitResponse)
async def commit(
    collection: str,
    doc_id: str,
    body: CommitRequest,
    service: DocumentService = Depends(get_service),
) -> CommitResponse:
    try:
        succeeded = await service.commit(collection, doc_id, body.op, body.snapshot)
    except ConsistencyError as exc:
        logger.warning(
            "http commit failed",
            extra={"collection": collection, "doc_id": doc_id, "version": body.snapshot.v},
        )
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return CommitResponse(succeeded=succeeded)


@router.post("/{collection}/query", response_model=QueryResponse)
async def run_query(
    collection: str,
    body: QueryRequest,
    store: DocumentStore = Depends(get_store),
) -> QueryResponse:
    snapshots, extra = await store.query(collection, body.query, body.fields, body.options)
    return QueryResponse(snapshots=snapshots, extra=extra)
