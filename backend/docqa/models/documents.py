"""Document domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

# content_ref value for documents whose text is extracted on demand
LOCAL_EXTRACT_MARKER = "local:extract"


class DocumentFormat(str, Enum):
    """Format classification derived once at upload."""

    pdf = "pdf"
    text = "text"
    docx = "docx"


class Document(BaseModel):
    """Uploaded document metadata."""

    doc_id: UUID
    owner_id: UUID
    stored_filename: str = Field(..., min_length=1, description="Name of the file in storage")
    original_name: str = Field(..., description="Display name supplied by the uploader")
    format: DocumentFormat
    mime_type: str
    content_ref: str = Field(
        ..., min_length=1, description="Remote handle, or the local-extract marker"
    )
    created_at: datetime

    @property
    def is_remote(self) -> bool:
        """True if the provider holds the document content behind a handle."""
        return self.content_ref != LOCAL_EXTRACT_MARKER
