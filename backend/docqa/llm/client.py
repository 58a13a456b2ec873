"""Reasoning provider clients with OpenAI integration.

Security: Reads API key from settings (environment) only, never hardcoded.
Provides a deterministic stub when no key is present, for offline use and tests.
"""

import asyncio
import hashlib
import logging
import re
from pathlib import Path
from typing import Any, Protocol

import openai
from openai import AsyncOpenAI

from backend.docqa.config import Settings
from backend.docqa.errors import DocQAError, ProviderOverloadSignal, ProviderRejected
from backend.docqa.llm.prompt import NOT_FOUND_SENTENCE
from backend.docqa.models.context import FilePart, ProviderPayload, TextPart

logger = logging.getLogger(__name__)

# HTTP statuses the provider uses to signal temporary saturation
OVERLOAD_STATUS_CODES = frozenset({429, 503, 529})


class ReasoningProvider(Protocol):
    """Protocol for reasoning provider implementations."""

    name: str

    async def upload_file(self, path: Path, *, mime_type: str, display_name: str) -> str:
        """Upload raw file bytes to the provider's file store.

        Returns:
            Remote handle reusable across calls
        """
        ...

    async def generate(self, payload: ProviderPayload) -> str:
        """Generate text for a payload.

        Raises:
            ProviderOverloadSignal: Transient overload (retryable)
            ProviderRejected: Any non-retryable failure
        """
        ...


def classify_provider_error(exc: Exception) -> Exception:
    """Map an SDK exception onto the provider failure taxonomy.

    Returns:
        ProviderOverloadSignal for transient overload, ProviderRejected otherwise
    """
    if isinstance(exc, (ProviderOverloadSignal, DocQAError)):
        return exc

    # APITimeoutError subclasses APIConnectionError
    if isinstance(exc, openai.APIConnectionError):
        return ProviderOverloadSignal(f"connection: {exc}")

    if isinstance(exc, openai.APIStatusError):
        status_code = exc.status_code
        if getattr(exc, "code", None) == "insufficient_quota":
            return ProviderRejected("quota_exceeded", detail=str(exc))
        if status_code in OVERLOAD_STATUS_CODES:
            return ProviderOverloadSignal(str(exc), status_code=status_code)
        if status_code in (404, 410):
            return ProviderRejected("handle_expired", detail=str(exc))
        if status_code in (401, 403):
            return ProviderRejected("unauthorized", detail=str(exc))
        if 400 <= status_code < 500:
            return ProviderRejected("bad_request", detail=str(exc))
        return ProviderRejected("provider_error", detail=str(exc))

    return ProviderRejected("provider_error", detail=f"{type(exc).__name__}: {exc}")


class OpenAIProvider:
    """OpenAI-backed reasoning provider."""

    name = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", max_tokens: int = 1000):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name; must accept file content parts
            max_tokens: Upper bound on generated tokens
        """
        # Retries are owned by ResilientInvoker
        self.client = AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens

    async def upload_file(self, path: Path, *, mime_type: str, display_name: str) -> str:
        data = await asyncio.to_thread(path.read_bytes)
        try:
            uploaded = await self.client.files.create(
                file=(display_name, data, mime_type),
                purpose="user_data",
            )
        except openai.OpenAIError as e:
            raise classify_provider_error(e) from e

        logger.info(f"Uploaded {display_name!r} to provider file store as {uploaded.id}")
        return uploaded.id

    async def generate(self, payload: ProviderPayload) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": self._content_parts(payload)}],
                temperature=0,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            raise classify_provider_error(e) from e

        answer = response.choices[0].message.content or ""
        if not answer.strip():
            raise ProviderRejected("empty_response")
        return answer.strip()

    def _content_parts(self, payload: ProviderPayload) -> list[dict[str, Any]]:
        """Translate payload parts into chat content parts."""
        parts: list[dict[str, Any]] = []
        for part in payload.parts:
            if isinstance(part, FilePart):
                parts.append({"type": "file", "file": {"file_id": part.handle}})
            elif isinstance(part, TextPart):
                parts.append({"type": "text", "text": part.text})
        return parts


class DeterministicStubProvider:
    """Deterministic stub provider for testing (no API key required).

    Answers inline documents by quoting the first sentence that shares a
    keyword with the question. Remote handles cannot be read offline.
    """

    name = "stub"

    _WORD = re.compile(r"[a-z0-9]{4,}")
    _SENTENCE = re.compile(r"(?<=[.!?])\s+|\n+")

    async def upload_file(self, path: Path, *, mime_type: str, display_name: str) -> str:
        digest = hashlib.sha256(await asyncio.to_thread(path.read_bytes)).hexdigest()
        return f"stub-file-{digest[:16]}"

    async def generate(self, payload: ProviderPayload) -> str:
        if payload.file_handles:
            handle = payload.file_handles[0]
            return f"Answer: [stub] No provider configured; document {handle} was not read."

        text_parts = [p.text for p in payload.parts if isinstance(p, TextPart)]
        document = text_parts[0] if len(text_parts) > 1 else ""
        if '"""' in document:
            document = document.split('"""')[1]
        question = text_parts[-1].rsplit("Question:", 1)[-1]

        keywords = set(self._WORD.findall(question.lower()))
        for sentence in self._SENTENCE.split(document):
            sentence = sentence.strip().strip('"')
            if sentence and keywords & set(self._WORD.findall(sentence.lower())):
                return f'Answer: {sentence}\nExcerpt: "{sentence}"'

        return f"Answer: {NOT_FOUND_SENTENCE}"


def get_reasoning_provider(settings: Settings) -> ReasoningProvider:
    """Factory function to get appropriate provider based on config.

    Returns:
        OpenAIProvider if API key is configured, DeterministicStubProvider otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI reasoning provider")
        return OpenAIProvider(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            max_tokens=settings.openai_max_tokens,
        )
    else:
        logger.warning("No OpenAI API key configured, using deterministic stub provider")
        return DeterministicStubProvider()
