"""Context extraction - remote handle or locally extracted text.

PDF documents are read by the provider directly through the handle obtained at
upload. Plain text and DOCX documents are extracted locally on every request
that needs them; extraction is deterministic and has no side effects, so the
chat and preview paths share it.
"""

import asyncio
import logging
import zipfile
from pathlib import Path

import docx
from docx.opc.exceptions import PackageNotFoundError
from lxml import etree

from backend.docqa.docs.formats import is_remote_format
from backend.docqa.docs.storage import FileStorage
from backend.docqa.errors import ExtractionFailed
from backend.docqa.models.context import ContextRepresentation, InlineContext, RemoteContext
from backend.docqa.models.documents import Document, DocumentFormat

logger = logging.getLogger(__name__)


def _extract_plain_text(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ExtractionFailed(reason="undecodable_text") from e


def _extract_docx_text(path: Path) -> str:
    try:
        document = docx.Document(str(path))
    except (
        PackageNotFoundError,
        zipfile.BadZipFile,
        KeyError,
        ValueError,
        etree.XMLSyntaxError,
    ) as e:
        raise ExtractionFailed(reason="corrupt_docx") from e

    lines = [para.text for para in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append("\t".join(cell.text for cell in row.cells))
    return "\n".join(lines)


def extract_text(path: Path, fmt: DocumentFormat) -> str:
    """Extract plain text from a stored inline-format file.

    Args:
        path: Local path of the stored file
        fmt: Format classified at upload

    Returns:
        Extracted text

    Raises:
        ExtractionFailed: Missing, corrupt or undecodable file, or a format
            that is not extracted locally
    """
    if not path.is_file():
        raise ExtractionFailed(reason="file_missing")

    if fmt == DocumentFormat.text:
        return _extract_plain_text(path)
    if fmt == DocumentFormat.docx:
        return _extract_docx_text(path)

    raise ExtractionFailed(reason=f"no_local_extractor:{fmt.value}")


async def build_context(document: Document, storage: FileStorage) -> ContextRepresentation:
    """Build the context representation for a document.

    Remote formats reuse the handle persisted at upload; it is never regenerated.
    """
    if is_remote_format(document.format):
        return RemoteContext(handle=document.content_ref, mime_type=document.mime_type)

    path = storage.path_for(document.stored_filename)
    text = await asyncio.to_thread(extract_text, path, document.format)
    logger.debug(f"Extracted {len(text)} chars from doc_id={document.doc_id}")
    return InlineContext(text=text)


async def preview_text(document: Document, storage: FileStorage) -> str | None:
    """Extracted text for inline formats, None for remote-handle formats."""
    if is_remote_format(document.format):
        return None
    path = storage.path_for(document.stored_filename)
    return await asyncio.to_thread(extract_text, path, document.format)
