from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from collab_store.api.http import router as http_router
from collab_store.config import Settings, load_settings
from collab_store.logging_config import configure_logging
from collab_store.persistence.base import DocumentStore
from collab_store.persistence.memory import InMemoryDocumentStore
from collab_store.services.document_service import DocumentService


def create_app(settings: Settings | None = None, store: DocumentStore | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    store = store or InMemoryDocumentStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await store.close()

    app = FastAPI(title=settings.title, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.document_service = DocumentService(store=store)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    app.include_router(http_router)
    return app
