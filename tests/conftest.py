"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import docx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.docqa.db.context import RequestContext
from backend.docqa.db.inmemory import InMemoryConversationRepository, InMemoryDocumentRepository
from backend.docqa.db.models import Base
from backend.docqa.docs.formats import DOCX_MIME_TYPE
from backend.docqa.docs.storage import LocalFileStorage
from backend.docqa.llm.invoker import ResilientInvoker, RetryPolicy
from backend.docqa.models.context import ProviderPayload
from backend.docqa.orchestration.pipeline import DocumentQAPipeline

SAMPLE_TEXT = (
    "The warranty period is 24 months from the date of purchase.\n"
    "Returns are accepted within 30 days with a receipt."
)


class FakeProvider:
    """Scripted reasoning provider.

    Each generate() call consumes the next scripted outcome: an exception is
    raised, a string is returned. Once the script is exhausted the default
    answer is returned.
    """

    name = "fake"

    def __init__(self, script: list[str | Exception] | None = None) -> None:
        self.script = list(script or [])
        self.default_answer = 'Answer: 24 months\nExcerpt: "The warranty period is 24 months"'
        self.payloads: list[ProviderPayload] = []
        self.uploads: list[Path] = []
        self.upload_error: Exception | None = None

    async def upload_file(self, path: Path, *, mime_type: str, display_name: str) -> str:
        if self.upload_error is not None:
            raise self.upload_error
        self.uploads.append(path)
        return f"file-{len(self.uploads)}"

    async def generate(self, payload: ProviderPayload) -> str:
        self.payloads.append(payload)
        if self.script:
            outcome = self.script.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        return self.default_answer


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def owner_ctx() -> RequestContext:
    return RequestContext(owner_id=uuid.UUID("00000000-0000-0000-0000-000000000001"))


@pytest.fixture
def other_ctx() -> RequestContext:
    return RequestContext(owner_id=uuid.UUID("00000000-0000-0000-0000-000000000002"))


@pytest.fixture
def storage(tmp_path: Path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def invoker(recording_sleep: RecordingSleep) -> ResilientInvoker:
    return ResilientInvoker(
        policy=RetryPolicy(max_retries=3, initial_delay_seconds=2.0),
        sleep_fn=recording_sleep,
    )


@pytest.fixture
def documents() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture
def conversations() -> InMemoryConversationRepository:
    return InMemoryConversationRepository()


@pytest.fixture
def pipeline(
    documents: InMemoryDocumentRepository,
    conversations: InMemoryConversationRepository,
    storage: LocalFileStorage,
    fake_provider: FakeProvider,
    invoker: ResilientInvoker,
) -> DocumentQAPipeline:
    return DocumentQAPipeline(
        documents=documents,
        conversations=conversations,
        storage=storage,
        provider=fake_provider,
        invoker=invoker,
    )


def make_docx_bytes(tmp_path: Path, paragraphs: list[str]) -> bytes:
    """Build a real .docx file with python-docx and return its bytes."""
    document = docx.Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    path = tmp_path / f"sample-{uuid.uuid4().hex}.docx"
    document.save(str(path))
    return path.read_bytes()


# Minimal well-formed PDF; only its bytes matter since the provider reads it
PDF_BYTES = (
    b"%PDF-1.4\n1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
    b"2 0 obj<</Type/Pages/Kids[]/Count 0>>endobj\n"
    b"trailer<</Root 1 0 R>>\n%%EOF\n"
)


@pytest.fixture
def sample_uploads(tmp_path: Path) -> dict[str, tuple[str, str, bytes]]:
    """(filename, mime_type, data) for every supported format."""
    return {
        "pdf": ("manual.pdf", "application/pdf", PDF_BYTES),
        "text": ("policy.txt", "text/plain", SAMPLE_TEXT.encode("utf-8")),
        "docx": ("policy.docx", DOCX_MIME_TYPE, make_docx_bytes(tmp_path, SAMPLE_TEXT.split("\n"))),
    }


@pytest.fixture
def docx_factory(tmp_path: Path) -> Callable[[list[str]], bytes]:
    return lambda paragraphs: make_docx_bytes(tmp_path, paragraphs)


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine shared across sessions, with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=sqlite_engine, expire_on_commit=False)
