"""FastAPI application - document upload and grounded Q&A."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.docqa.api.errors import register_exception_handlers
from backend.docqa.api.routes.chat import router as chat_router
from backend.docqa.api.routes.documents import router as documents_router
from backend.docqa.api.routes.health import router as health_router
from backend.docqa.api.routes.metrics import router as metrics_router
from backend.docqa.config import get_settings
from backend.docqa.db.engine import create_async_engine_from_settings, create_schema
from backend.docqa.utils.logging import configure_logging

logger = logging.getLogger(__name__)

API_TITLE = "Document Q&A API"
API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level)

    if settings.database_url and settings.auto_create_schema:
        engine = create_async_engine_from_settings(settings)
        await create_schema(engine)
        await engine.dispose()
        logger.info("Database schema created")

    yield


app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().ui_origin],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(documents_router, tags=["documents"])
app.include_router(chat_router, tags=["chat"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": API_TITLE, "version": API_VERSION}
