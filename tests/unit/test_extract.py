"""Unit tests for context extraction."""

import uuid
import zipfile
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from backend.docqa.docs.extract import build_context, extract_text, preview_text
from backend.docqa.docs.storage import LocalFileStorage
from backend.docqa.errors import ExtractionFailed
from backend.docqa.models.context import InlineContext, RemoteContext
from backend.docqa.models.documents import LOCAL_EXTRACT_MARKER, Document, DocumentFormat


def _document(stored_filename: str, fmt: DocumentFormat, content_ref: str) -> Document:
    return Document(
        doc_id=uuid.uuid4(),
        owner_id=uuid.uuid4(),
        stored_filename=stored_filename,
        original_name=stored_filename,
        format=fmt,
        mime_type="application/pdf" if fmt == DocumentFormat.pdf else "text/plain",
        content_ref=content_ref,
        created_at=datetime.now(UTC),
    )


def test_extract_plain_text_strips_bom(tmp_path: Path) -> None:
    """Test UTF-8 text is decoded and a leading BOM removed."""
    path = tmp_path / "a.txt"
    path.write_bytes("\ufeffH\u00e9llo\nworld".encode("utf-8"))

    assert extract_text(path, DocumentFormat.text) == "H\u00e9llo\nworld"


def test_extract_plain_text_undecodable(tmp_path: Path) -> None:
    """Test invalid UTF-8 raises ExtractionFailed."""
    path = tmp_path / "bad.txt"
    path.write_bytes(b"\xff\xfe\xfa\x80 not utf8")

    with pytest.raises(ExtractionFailed) as exc_info:
        extract_text(path, DocumentFormat.text)

    assert exc_info.value.reason == "undecodable_text"


def test_extract_docx_paragraphs(
    tmp_path: Path, docx_factory: Callable[[list[str]], bytes]
) -> None:
    """Test DOCX paragraphs are joined with newlines."""
    path = tmp_path / "a.docx"
    path.write_bytes(docx_factory(["First paragraph.", "Second paragraph."]))

    assert extract_text(path, DocumentFormat.docx) == "First paragraph.\nSecond paragraph."


def test_extract_corrupt_docx(tmp_path: Path) -> None:
    """Test a file that is not a DOCX package raises ExtractionFailed."""
    path = tmp_path / "corrupt.docx"
    path.write_bytes(b"this is not a zip archive")

    with pytest.raises(ExtractionFailed) as exc_info:
        extract_text(path, DocumentFormat.docx)

    assert exc_info.value.reason == "corrupt_docx"


def test_extract_docx_with_truncated_document_xml(
    tmp_path: Path, docx_factory: Callable[[list[str]], bytes]
) -> None:
    """Test a valid zip with malformed word/document.xml raises ExtractionFailed."""
    source = tmp_path / "source.docx"
    source.write_bytes(docx_factory(["Some paragraph that will be cut off."]))
    path = tmp_path / "truncated.docx"

    with zipfile.ZipFile(source) as src, zipfile.ZipFile(path, "w") as dst:
        for item in src.infolist():
            content = src.read(item.filename)
            if item.filename == "word/document.xml":
                content = content[: len(content) // 2]
            dst.writestr(item, content)

    with pytest.raises(ExtractionFailed) as exc_info:
        extract_text(path, DocumentFormat.docx)

    assert exc_info.value.reason == "corrupt_docx"


def test_extract_missing_file(tmp_path: Path) -> None:
    """Test a missing stored file raises ExtractionFailed."""
    with pytest.raises(ExtractionFailed) as exc_info:
        extract_text(tmp_path / "gone.txt", DocumentFormat.text)

    assert exc_info.value.reason == "file_missing"


def test_extract_is_deterministic(
    tmp_path: Path, docx_factory: Callable[[list[str]], bytes]
) -> None:
    """Test extracting the same file twice yields identical text."""
    text_path = tmp_path / "a.txt"
    text_path.write_text("Same text every time.", encoding="utf-8")
    docx_path = tmp_path / "a.docx"
    docx_path.write_bytes(docx_factory(["One.", "Two."]))

    assert extract_text(text_path, DocumentFormat.text) == extract_text(
        text_path, DocumentFormat.text
    )
    assert extract_text(docx_path, DocumentFormat.docx) == extract_text(
        docx_path, DocumentFormat.docx
    )


def test_pdf_has_no_local_extractor(tmp_path: Path) -> None:
    """Test PDFs are never extracted locally."""
    path = tmp_path / "a.pdf"
    path.write_bytes(b"%PDF-1.4")

    with pytest.raises(ExtractionFailed):
        extract_text(path, DocumentFormat.pdf)


@pytest.mark.asyncio
async def test_build_context_remote_reuses_handle(storage: LocalFileStorage) -> None:
    """Test PDF context is the persisted handle; the file is not read."""
    document = _document("1-missing.pdf", DocumentFormat.pdf, "file-abc")

    context = await build_context(document, storage)

    assert isinstance(context, RemoteContext)
    assert context.kind == "remote"
    assert context.handle == "file-abc"
    assert context.mime_type == "application/pdf"


@pytest.mark.asyncio
async def test_build_context_inline(storage: LocalFileStorage) -> None:
    """Test text context carries the extracted document text."""
    stored = storage.save("notes.txt", b"Inline body")
    document = _document(stored, DocumentFormat.text, LOCAL_EXTRACT_MARKER)

    context = await build_context(document, storage)

    assert isinstance(context, InlineContext)
    assert context.kind == "inline"
    assert context.text == "Inline body"


@pytest.mark.asyncio
async def test_preview_text(storage: LocalFileStorage) -> None:
    """Test preview returns text for inline formats and None for remote ones."""
    stored = storage.save("notes.txt", b"Preview body")
    inline_doc = _document(stored, DocumentFormat.text, LOCAL_EXTRACT_MARKER)
    remote_doc = _document("1-a.pdf", DocumentFormat.pdf, "file-1")

    assert await preview_text(inline_doc, storage) == "Preview body"
    assert await preview_text(remote_doc, storage) is None
