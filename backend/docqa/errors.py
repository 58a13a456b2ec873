"""Error taxonomy for ingestion, extraction, provider calls and persistence.

Every error carries:
- kind: external error kind reported to clients (NotFound, Overloaded, ...)
- status_code: HTTP-equivalent status
- message: short human-readable text safe to show to the user
"""


class DocQAError(Exception):
    """Base class for all domain errors."""

    kind: str = "ProcessingFailed"
    status_code: int = 500
    default_message: str = "Something went wrong while processing your request."

    def __init__(self, message: str | None = None, *, reason: str | None = None) -> None:
        self.message = message or self.default_message
        self.reason = reason
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str | None]:
        """Structured error body."""
        return {"kind": self.kind, "message": self.message, "reason": self.reason}


class UnsupportedFormat(DocQAError):
    """Upload MIME type is not on the allow-list."""

    kind = "UnsupportedFormat"
    status_code = 415
    default_message = "Unsupported file type. Upload a PDF, DOCX or plain text file."

    def __init__(self, mime_type: str | None) -> None:
        super().__init__(reason=mime_type or "missing")
        self.mime_type = mime_type


class ExtractionFailed(DocQAError):
    """Local text extraction failed (corrupt file, unreadable encoding)."""

    kind = "ProcessingFailed"
    status_code = 500
    default_message = "The document could not be read. Try re-uploading it."


class DocumentNotFound(DocQAError):
    """Document does not exist (or is not visible to the caller)."""

    kind = "NotFound"
    status_code = 404
    default_message = "Document not found."


class PermissionDenied(DocQAError):
    """Document exists but belongs to another owner."""

    kind = "PermissionDenied"
    status_code = 403
    default_message = "You do not have access to this document."


class ProviderOverloaded(DocQAError):
    """Provider stayed overloaded through every retry."""

    kind = "Overloaded"
    status_code = 503
    default_message = "The assistant is busy right now. Please try again shortly."

    def __init__(self, attempts: int) -> None:
        super().__init__(reason="retries_exhausted")
        self.attempts = attempts


class ProviderRejected(DocQAError):
    """Non-retryable provider failure."""

    kind = "ProcessingFailed"
    status_code = 500
    default_message = "The assistant could not process this request."

    _messages = {
        "handle_expired": "This document is no longer available to the assistant. "
        "Please re-upload the document.",
        "unauthorized": "The assistant is not configured correctly. Contact an administrator.",
    }

    def __init__(self, reason: str, detail: str | None = None) -> None:
        super().__init__(self._messages.get(reason), reason=reason)
        self.detail = detail


class PersistenceFailed(DocQAError):
    """Document or conversation storage failed."""

    kind = "ProcessingFailed"
    status_code = 500
    default_message = "Your message could not be saved. Please try again."

    def __init__(self, operation: str) -> None:
        super().__init__(reason=operation)
        self.operation = operation


class ProviderOverloadSignal(Exception):
    """Transient provider overload on a single attempt.

    Raised by provider clients and consumed by the resilient invoker; it never
    reaches API callers (exhausted retries become ProviderOverloaded).
    """

    def __init__(
        self, detail: str = "provider overloaded", *, status_code: int | None = None
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
