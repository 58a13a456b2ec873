"""Unit tests for upload format classification."""

import pytest

from backend.docqa.docs.formats import (
    DOCX_MIME_TYPE,
    classify_format,
    is_remote_format,
    normalize_mime_type,
)
from backend.docqa.errors import UnsupportedFormat
from backend.docqa.models.documents import DocumentFormat


@pytest.mark.parametrize(
    ("mime_type", "expected"),
    [
        ("application/pdf", DocumentFormat.pdf),
        ("text/plain", DocumentFormat.text),
        (DOCX_MIME_TYPE, DocumentFormat.docx),
    ],
)
def test_classify_allowed_types(mime_type: str, expected: DocumentFormat) -> None:
    """Test every allow-listed MIME type maps to its format."""
    assert classify_format(mime_type) == expected


def test_classify_ignores_parameters_and_case() -> None:
    """Test charset parameters and upper case do not affect classification."""
    assert classify_format("Text/Plain; charset=utf-8") == DocumentFormat.text


@pytest.mark.parametrize("mime_type", ["image/png", "application/msword", "", None])
def test_classify_rejects_other_types(mime_type: str | None) -> None:
    """Test anything off the allow-list raises UnsupportedFormat."""
    with pytest.raises(UnsupportedFormat) as exc_info:
        classify_format(mime_type)

    assert exc_info.value.status_code == 415
    assert exc_info.value.kind == "UnsupportedFormat"


def test_only_pdf_is_remote() -> None:
    """Test PDF goes by remote handle, text and DOCX are extracted locally."""
    assert is_remote_format(DocumentFormat.pdf)
    assert not is_remote_format(DocumentFormat.text)
    assert not is_remote_format(DocumentFormat.docx)


def test_normalize_mime_type_empty() -> None:
    """Test a missing MIME type normalizes to an empty string."""
    assert normalize_mime_type(None) == ""
