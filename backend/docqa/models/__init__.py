"""Models package - re-exports for convenience."""

from backend.docqa.models.chat import ChatAnswer, Conversation, Message, Role
from backend.docqa.models.context import (
    ContextRepresentation,
    FilePart,
    InlineContext,
    PayloadPart,
    ProviderPayload,
    RemoteContext,
    TextPart,
)
from backend.docqa.models.documents import LOCAL_EXTRACT_MARKER, Document, DocumentFormat

__all__ = [
    # Chat
    "ChatAnswer",
    "Conversation",
    "Message",
    "Role",
    # Context
    "ContextRepresentation",
    "FilePart",
    "InlineContext",
    "PayloadPart",
    "ProviderPayload",
    "RemoteContext",
    "TextPart",
    # Documents
    "LOCAL_EXTRACT_MARKER",
    "Document",
    "DocumentFormat",
]
