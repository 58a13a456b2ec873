"""Context representations and provider payload parts.

A context representation is the form in which document content reaches the
reasoning provider: a remote handle for formats the provider reads directly,
or inline extracted text. The union is closed and tagged by ``kind``.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class RemoteContext(BaseModel):
    """Provider-side file handle, reused on every turn."""

    kind: Literal["remote"] = "remote"
    handle: str = Field(..., min_length=1)
    mime_type: str = "application/pdf"


class InlineContext(BaseModel):
    """Locally extracted document text."""

    kind: Literal["inline"] = "inline"
    text: str


ContextRepresentation = Annotated[RemoteContext | InlineContext, Field(discriminator="kind")]


class FilePart(BaseModel):
    """Payload part referencing a remote file handle."""

    kind: Literal["file"] = "file"
    handle: str
    mime_type: str


class TextPart(BaseModel):
    """Payload part carrying plain text."""

    kind: Literal["text"] = "text"
    text: str


PayloadPart = Annotated[FilePart | TextPart, Field(discriminator="kind")]


class ProviderPayload(BaseModel):
    """Ordered parts submitted to the reasoning provider in one call."""

    parts: list[PayloadPart]

    @property
    def text(self) -> str:
        """All text parts joined, in order."""
        return "\n\n".join(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def file_handles(self) -> list[str]:
        """Handles referenced by file parts, in order."""
        return [p.handle for p in self.parts if isinstance(p, FilePart)]
