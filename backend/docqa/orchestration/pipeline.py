"""Grounded question-answering pipeline.

Each question walks a fixed sequence of stages:

    validated -> context_ready -> prompt_built -> answer_obtained -> persisted -> responded

Failure exits:
- DocumentNotFound / PermissionDenied before context_ready
- ExtractionFailed while building the context
- ProviderOverloaded / ProviderRejected while obtaining the answer
- PersistenceFailed while persisting the turn

A turn is persisted only after an answer was obtained, and the answer is
returned only after the turn was persisted, so history never lacks a turn the
user saw.
"""

import asyncio
import logging
import uuid
from datetime import UTC, datetime
from enum import Enum

from backend.docqa.db.context import RequestContext
from backend.docqa.db.repositories import ConversationRepository, DocumentRepository
from backend.docqa.docs.extract import build_context, preview_text
from backend.docqa.docs.ingest import ingest_document
from backend.docqa.docs.storage import FileStorage
from backend.docqa.errors import DocQAError, DocumentNotFound, PermissionDenied, PersistenceFailed
from backend.docqa.llm.client import ReasoningProvider
from backend.docqa.llm.invoker import ResilientInvoker
from backend.docqa.llm.prompt import build_prompt
from backend.docqa.models.chat import ChatAnswer, Message
from backend.docqa.models.documents import Document
from backend.docqa.utils.metrics import qa_requests_total

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Stages of a single question request."""

    VALIDATED = "validated"
    CONTEXT_READY = "context_ready"
    PROMPT_BUILT = "prompt_built"
    ANSWER_OBTAINED = "answer_obtained"
    PERSISTED = "persisted"
    RESPONDED = "responded"


class DocumentQAPipeline:
    """Wires extraction, prompting, provider invocation and persistence per request."""

    def __init__(
        self,
        *,
        documents: DocumentRepository,
        conversations: ConversationRepository,
        storage: FileStorage,
        provider: ReasoningProvider,
        invoker: ResilientInvoker,
    ) -> None:
        self.documents = documents
        self.conversations = conversations
        self.storage = storage
        self.provider = provider
        self.invoker = invoker

    async def upload(
        self, ctx: RequestContext, *, original_name: str, mime_type: str | None, data: bytes
    ) -> Document:
        """Ingest an upload for the calling owner."""
        return await ingest_document(
            owner_id=ctx.owner_id,
            original_name=original_name,
            mime_type=mime_type,
            data=data,
            storage=self.storage,
            provider=self.provider,
            invoker=self.invoker,
            documents=self.documents,
        )

    async def list_documents(self, ctx: RequestContext) -> list[Document]:
        """List the caller's documents, newest first."""
        return await self.documents.list_for_owner(ctx.owner_id)

    async def get_owned_document(self, ctx: RequestContext, doc_id: uuid.UUID) -> Document:
        """Load a document and verify the caller owns it.

        Raises:
            DocumentNotFound: No such document
            PermissionDenied: Document belongs to another owner
        """
        document = await self.documents.get(doc_id)
        if document is None:
            raise DocumentNotFound()
        if document.owner_id != ctx.owner_id:
            logger.warning(
                f"Owner mismatch: owner_id={ctx.owner_id} requested doc_id={doc_id}"
            )
            raise PermissionDenied()
        return document

    async def ask(self, ctx: RequestContext, doc_id: uuid.UUID, question: str) -> ChatAnswer:
        """Answer a question grounded in one document and persist the turn.

        Args:
            ctx: Caller identity
            doc_id: Document to ground the answer in
            question: User's question

        Returns:
            ChatAnswer with the provider's grounded answer

        Raises:
            DocQAError: On any failure exit (see module docstring)
        """
        request_id = uuid.uuid4().hex[:12]
        asked_at = datetime.now(UTC)
        stage: PipelineStage | None = None

        def advance(next_stage: PipelineStage) -> None:
            nonlocal stage
            stage = next_stage
            logger.debug(f"[ask {request_id}] doc_id={doc_id} -> {next_stage.value}")

        logger.info(f"[ask {request_id}] owner_id={ctx.owner_id} doc_id={doc_id}")

        try:
            document = await self.get_owned_document(ctx, doc_id)
            advance(PipelineStage.VALIDATED)

            context = await build_context(document, self.storage)
            advance(PipelineStage.CONTEXT_READY)

            history = await self.conversations.history(ctx.owner_id, doc_id)
            payload = build_prompt(context, question, history)
            advance(PipelineStage.PROMPT_BUILT)

            answer = await self.invoker.invoke(
                lambda: self.provider.generate(payload), operation="generate"
            )
            advance(PipelineStage.ANSWER_OBTAINED)

            await self.conversations.append(
                ctx.owner_id, doc_id, question, answer, asked_at=asked_at
            )
            advance(PipelineStage.PERSISTED)
        except DocQAError as e:
            qa_requests_total.labels(outcome=e.kind).inc()
            logger.warning(
                f"[ask {request_id}] failed after stage={stage.value if stage else 'start'}: "
                f"{type(e).__name__} reason={e.reason}"
            )
            raise

        advance(PipelineStage.RESPONDED)
        qa_requests_total.labels(outcome="answered").inc()
        return ChatAnswer(doc_id=doc_id, question=question, answer=answer)

    async def history(self, ctx: RequestContext, doc_id: uuid.UUID) -> list[Message]:
        """Full ordered history; empty if no question was asked (or it was deleted)."""
        return await self.conversations.history(ctx.owner_id, doc_id)

    async def preview(self, ctx: RequestContext, doc_id: uuid.UUID) -> str | None:
        """Extracted text for inline formats, None for remote-handle formats."""
        document = await self.get_owned_document(ctx, doc_id)
        return await preview_text(document, self.storage)

    async def delete_document(self, ctx: RequestContext, doc_id: uuid.UUID) -> None:
        """Delete a document with its conversation and stored file.

        The conversation goes first; if it cannot be removed the document is
        kept so no conversation is orphaned. A stored file that cannot be
        removed is logged and tolerated.

        Raises:
            DocumentNotFound: Missing document or owned by someone else
            PersistenceFailed: Conversation or record could not be deleted
        """
        try:
            document = await self.get_owned_document(ctx, doc_id)
        except PermissionDenied as e:
            raise DocumentNotFound() from e

        try:
            await self.conversations.delete_for_document(ctx.owner_id, doc_id)
        except PersistenceFailed:
            logger.error(f"Conversation delete failed for doc_id={doc_id}", exc_info=True)
            raise

        if not await self.documents.delete(doc_id, ctx.owner_id):
            raise DocumentNotFound()

        try:
            removed = await asyncio.to_thread(self.storage.delete, document.stored_filename)
        except (OSError, ValueError):
            logger.error(
                f"Stored file {document.stored_filename} for doc_id={doc_id} could not be removed",
                exc_info=True,
            )
        else:
            if not removed:
                logger.warning(f"Stored file {document.stored_filename} was already missing")

        logger.info(f"Deleted doc_id={doc_id} owner_id={ctx.owner_id}")
