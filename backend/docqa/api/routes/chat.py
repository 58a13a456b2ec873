"""Chat endpoints - ask a grounded question, read history."""

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.docqa.api.auth import get_current_context
from backend.docqa.api.dependencies import get_pipeline
from backend.docqa.db.context import RequestContext
from backend.docqa.models.chat import Role
from backend.docqa.orchestration.pipeline import DocumentQAPipeline

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    document_id: uuid.UUID
    question: str = Field(..., min_length=1, max_length=4000)


class ChatResponse(BaseModel):
    """Response for POST /chat."""

    answer: str


class MessageResponse(BaseModel):
    role: Role
    content: str
    timestamp: datetime


class HistoryResponse(BaseModel):
    """Response for GET /chat/{doc_id}."""

    messages: list[MessageResponse]


@router.post("", response_model=ChatResponse)
async def ask_question(
    request: ChatRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    pipeline: Annotated[DocumentQAPipeline, Depends(get_pipeline)],
) -> ChatResponse:
    """Answer a question grounded in one of the caller's documents.

    Args:
        request: Document ID and question
        ctx: Request context (owner_id)
        pipeline: Document QA pipeline

    Returns:
        The grounded answer (persisted to history before it is returned)
    """
    result = await pipeline.ask(ctx, request.document_id, request.question)
    return ChatResponse(answer=result.answer)


@router.get("/{doc_id}", response_model=HistoryResponse)
async def get_history(
    doc_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    pipeline: Annotated[DocumentQAPipeline, Depends(get_pipeline)],
) -> HistoryResponse:
    """Ordered conversation history; empty if nothing was asked yet."""
    messages = await pipeline.history(ctx, doc_id)
    return HistoryResponse(
        messages=[
            MessageResponse(role=m.role, content=m.content, timestamp=m.timestamp)
            for m in messages
        ]
    )
