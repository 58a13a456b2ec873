"""Document ingestion - classify, store, hand off to the provider, persist."""

import asyncio
import logging
from datetime import UTC, datetime
from uuid import UUID, uuid4

from backend.docqa.db.repositories import DocumentRepository
from backend.docqa.docs.formats import classify_format, is_remote_format, normalize_mime_type
from backend.docqa.docs.storage import FileStorage
from backend.docqa.llm.client import ReasoningProvider
from backend.docqa.llm.invoker import ResilientInvoker
from backend.docqa.models.documents import LOCAL_EXTRACT_MARKER, Document

logger = logging.getLogger(__name__)


async def ingest_document(
    *,
    owner_id: UUID,
    original_name: str,
    mime_type: str | None,
    data: bytes,
    storage: FileStorage,
    provider: ReasoningProvider,
    invoker: ResilientInvoker,
    documents: DocumentRepository,
) -> Document:
    """Ingest an uploaded file and persist its Document record.

    The format is classified before anything is written. Remote-handle formats
    are uploaded to the provider exactly once and the returned handle is kept;
    inline formats store the local-extract marker. If any step after the file
    write fails, the stored file is removed and no record remains.

    Args:
        owner_id: Uploading identity
        original_name: Display name supplied by the client
        mime_type: Declared MIME type
        data: Raw file bytes
        storage: File storage for the raw upload
        provider: Reasoning provider (file side-channel)
        invoker: Retry wrapper for the provider upload
        documents: Document repository

    Returns:
        Persisted Document

    Raises:
        UnsupportedFormat: MIME type not on the allow-list
        ProviderOverloaded, ProviderRejected: Provider upload failed
        PersistenceFailed: Record could not be stored
    """
    fmt = classify_format(mime_type)
    normalized_mime = normalize_mime_type(mime_type)

    stored_filename = await asyncio.to_thread(storage.save, original_name, data)

    try:
        if is_remote_format(fmt):
            path = storage.path_for(stored_filename)
            content_ref = await invoker.invoke(
                lambda: provider.upload_file(
                    path, mime_type=normalized_mime, display_name=original_name
                ),
                operation="upload_file",
            )
        else:
            content_ref = LOCAL_EXTRACT_MARKER

        document = Document(
            doc_id=uuid4(),
            owner_id=owner_id,
            stored_filename=stored_filename,
            original_name=original_name,
            format=fmt,
            mime_type=normalized_mime,
            content_ref=content_ref,
            created_at=datetime.now(UTC),
        )
        await documents.add(document)
    except BaseException:
        removed = await asyncio.to_thread(storage.delete, stored_filename)
        logger.warning(
            f"Ingestion of {original_name!r} failed; removed partial file={removed}",
            exc_info=True,
        )
        raise

    logger.info(
        f"Ingested doc_id={document.doc_id} owner_id={owner_id} "
        f"format={fmt.value} remote={document.is_remote}"
    )
    return document
