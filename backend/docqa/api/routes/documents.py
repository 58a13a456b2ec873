"""Document endpoints - upload, list, preview, delete."""

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from pydantic import BaseModel

from backend.docqa.api.auth import get_current_context
from backend.docqa.api.dependencies import get_pipeline
from backend.docqa.config import Settings, get_settings
from backend.docqa.db.context import RequestContext
from backend.docqa.models.documents import Document, DocumentFormat
from backend.docqa.orchestration.pipeline import DocumentQAPipeline

router = APIRouter(prefix="/documents", tags=["documents"])


class DocumentResponse(BaseModel):
    """Document metadata returned to clients."""

    doc_id: uuid.UUID
    original_name: str
    format: DocumentFormat
    mime_type: str
    remote: bool
    created_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        return cls(
            doc_id=document.doc_id,
            original_name=document.original_name,
            format=document.format,
            mime_type=document.mime_type,
            remote=document.is_remote,
            created_at=document.created_at,
        )


class DocumentListResponse(BaseModel):
    """Response for GET /documents."""

    documents: list[DocumentResponse]


class PreviewResponse(BaseModel):
    """Response for GET /documents/{doc_id}/preview."""

    available: bool
    text: str | None = None


class DeleteResponse(BaseModel):
    """Response for DELETE /documents/{doc_id}."""

    message: str


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    pipeline: Annotated[DocumentQAPipeline, Depends(get_pipeline)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DocumentResponse:
    """Upload a PDF, DOCX or plain text document.

    Args:
        file: Multipart file; its declared content type selects the format
        ctx: Request context (owner_id)
        pipeline: Document QA pipeline
        settings: Application settings (upload size limit)

    Returns:
        Created document metadata

    Raises:
        UnsupportedFormat: 415 for types outside the allow-list
        HTTPException: 400 for an empty file, 413 for an oversized one
    """
    data = await file.read()

    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {settings.max_upload_bytes} byte limit",
        )

    document = await pipeline.upload(
        ctx,
        original_name=file.filename or "upload",
        mime_type=file.content_type,
        data=data,
    )
    return DocumentResponse.from_document(document)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    pipeline: Annotated[DocumentQAPipeline, Depends(get_pipeline)],
) -> DocumentListResponse:
    """List the caller's documents, newest first."""
    documents = await pipeline.list_documents(ctx)
    return DocumentListResponse(documents=[DocumentResponse.from_document(d) for d in documents])


@router.get("/{doc_id}/preview", response_model=PreviewResponse)
async def preview_document(
    doc_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    pipeline: Annotated[DocumentQAPipeline, Depends(get_pipeline)],
) -> PreviewResponse:
    """Extracted text for inline formats; unavailable for remote-handle formats."""
    text = await pipeline.preview(ctx, doc_id)
    return PreviewResponse(available=text is not None, text=text)


@router.delete("/{doc_id}", response_model=DeleteResponse)
async def delete_document(
    doc_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    pipeline: Annotated[DocumentQAPipeline, Depends(get_pipeline)],
) -> DeleteResponse:
    """Delete a document, its conversation and its stored file."""
    await pipeline.delete_document(ctx, doc_id)
    return DeleteResponse(message="Deleted")
