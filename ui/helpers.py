"""Helper functions for UI - Document Q&A API client + rendering helpers."""

import uuid
from typing import Any

import httpx

from backend.docqa.llm.prompt import parse_grounded_answer

# Dev identity; credential management lives outside this service
DEFAULT_OWNER_ID = "00000000-0000-0000-0000-000000000001"

FORMAT_ICONS = {"pdf": "📕", "docx": "📘", "text": "📄"}


def get_auth_header(owner_id: str = DEFAULT_OWNER_ID) -> dict[str, str]:
    """Get auth header for API calls."""
    return {"Authorization": f"Bearer {uuid.UUID(owner_id)}"}


def upload_document(
    backend_url: str, filename: str, data: bytes, mime_type: str, owner_id: str = DEFAULT_OWNER_ID
) -> dict[str, Any]:
    """Upload a file to POST /documents.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.post(
        f"{backend_url}/documents",
        files={"file": (filename, data, mime_type)},
        headers=get_auth_header(owner_id),
        timeout=120.0,  # Remote formats are uploaded to the provider synchronously
    )
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def list_documents(backend_url: str, owner_id: str = DEFAULT_OWNER_ID) -> list[dict[str, Any]]:
    """Fetch the caller's documents from GET /documents."""
    response = httpx.get(
        f"{backend_url}/documents", headers=get_auth_header(owner_id), timeout=10.0
    )
    response.raise_for_status()
    documents: list[dict[str, Any]] = response.json()["documents"]
    return documents


def delete_document(backend_url: str, doc_id: str, owner_id: str = DEFAULT_OWNER_ID) -> None:
    """Delete a document via DELETE /documents/{doc_id}."""
    response = httpx.delete(
        f"{backend_url}/documents/{doc_id}", headers=get_auth_header(owner_id), timeout=10.0
    )
    response.raise_for_status()


def get_preview(
    backend_url: str, doc_id: str, owner_id: str = DEFAULT_OWNER_ID
) -> dict[str, Any]:
    """Fetch extracted text from GET /documents/{doc_id}/preview."""
    response = httpx.get(
        f"{backend_url}/documents/{doc_id}/preview",
        headers=get_auth_header(owner_id),
        timeout=30.0,
    )
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def ask_question(
    backend_url: str, doc_id: str, question: str, owner_id: str = DEFAULT_OWNER_ID
) -> str:
    """Ask a grounded question via POST /chat.

    Returns:
        Answer text

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.post(
        f"{backend_url}/chat",
        json={"document_id": doc_id, "question": question},
        headers=get_auth_header(owner_id),
        timeout=120.0,  # Includes provider backoff on overload
    )
    response.raise_for_status()
    answer: str = response.json()["answer"]
    return answer


def get_history(
    backend_url: str, doc_id: str, owner_id: str = DEFAULT_OWNER_ID
) -> list[dict[str, Any]]:
    """Fetch ordered messages from GET /chat/{doc_id}."""
    response = httpx.get(
        f"{backend_url}/chat/{doc_id}", headers=get_auth_header(owner_id), timeout=10.0
    )
    response.raise_for_status()
    messages: list[dict[str, Any]] = response.json()["messages"]
    return messages


def error_message(exc: Exception) -> str:
    """User-facing message for a failed API call.

    Uses the structured error body when present so overload, expired handles
    and missing documents read differently.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            return f"Request failed ({exc.response.status_code})"

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        detail = body.get("detail") if isinstance(body, dict) else None
        if isinstance(detail, str):
            return detail
        return f"Request failed ({exc.response.status_code})"

    if isinstance(exc, httpx.RequestError):
        return "Could not reach the backend. Is it running?"

    return str(exc)


def render_assistant_message(content: str) -> str:
    """Markdown for an assistant reply: the answer, then the quoted excerpt."""
    parsed = parse_grounded_answer(content)
    if not parsed.excerpt:
        return parsed.answer
    return f"{parsed.answer}\n\n> {parsed.excerpt}"


def document_label(document: dict[str, Any]) -> str:
    """Select-box label for a document."""
    icon = FORMAT_ICONS.get(document.get("format", ""), "📄")
    return f"{icon} {document.get('original_name', 'Untitled')}"
