"""Pipeline wiring for request handlers."""

import logging
from functools import lru_cache
from pathlib import Path

from backend.docqa.config import Settings, get_settings
from backend.docqa.db.engine import create_async_engine_from_settings, create_session_factory
from backend.docqa.db.inmemory import InMemoryConversationRepository, InMemoryDocumentRepository
from backend.docqa.db.sql_repositories import SqlConversationRepository, SqlDocumentRepository
from backend.docqa.docs.storage import LocalFileStorage
from backend.docqa.llm.client import get_reasoning_provider
from backend.docqa.llm.invoker import ResilientInvoker, RetryPolicy
from backend.docqa.orchestration.pipeline import DocumentQAPipeline
from backend.docqa.utils.metrics import PrometheusProviderMetrics

logger = logging.getLogger(__name__)


def build_pipeline(settings: Settings) -> DocumentQAPipeline:
    """Assemble the pipeline from settings.

    Uses SQL repositories when DATABASE_URL is set, in-memory stores otherwise.
    """
    if settings.database_url:
        session_factory = create_session_factory(create_async_engine_from_settings(settings))
        documents = SqlDocumentRepository(session_factory)
        conversations = SqlConversationRepository(session_factory)
    else:
        logger.warning("DATABASE_URL not set, using in-memory document and conversation stores")
        documents = InMemoryDocumentRepository()
        conversations = InMemoryConversationRepository()

    invoker = ResilientInvoker(
        policy=RetryPolicy(
            max_retries=settings.provider_max_retries,
            initial_delay_seconds=settings.provider_initial_delay_seconds,
        ),
        metrics=PrometheusProviderMetrics(),
    )

    return DocumentQAPipeline(
        documents=documents,
        conversations=conversations,
        storage=LocalFileStorage(Path(settings.upload_dir)),
        provider=get_reasoning_provider(settings),
        invoker=invoker,
    )


@lru_cache
def get_pipeline() -> DocumentQAPipeline:
    """FastAPI dependency returning the process-wide pipeline."""
    return build_pipeline(get_settings())
