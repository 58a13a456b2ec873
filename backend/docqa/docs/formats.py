"""Upload format classification against the MIME allow-list."""

from backend.docqa.errors import UnsupportedFormat
from backend.docqa.models.documents import DocumentFormat

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALLOWED_MIME_TYPES: dict[str, DocumentFormat] = {
    "application/pdf": DocumentFormat.pdf,
    "text/plain": DocumentFormat.text,
    DOCX_MIME_TYPE: DocumentFormat.docx,
}

# Formats the provider consumes directly as binary content
REMOTE_FORMATS = frozenset({DocumentFormat.pdf})


def normalize_mime_type(mime_type: str | None) -> str:
    """Lower-case MIME type with parameters (e.g. charset) removed."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def classify_format(mime_type: str | None) -> DocumentFormat:
    """Map a declared MIME type to a document format.

    Raises:
        UnsupportedFormat: If the type is not on the allow-list
    """
    fmt = ALLOWED_MIME_TYPES.get(normalize_mime_type(mime_type))
    if fmt is None:
        raise UnsupportedFormat(mime_type)
    return fmt


def is_remote_format(fmt: DocumentFormat) -> bool:
    """True if documents of this format are submitted by remote handle."""
    return fmt in REMOTE_FORMATS
