"""SQL implementations of repository interfaces."""

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.docqa.db.models import ConversationRow, DocumentRow, MessageRow
from backend.docqa.errors import PersistenceFailed
from backend.docqa.models.chat import Conversation, Message, Role
from backend.docqa.models.documents import Document, DocumentFormat

logger = logging.getLogger(__name__)

# Concurrent first turns can race on the (owner, doc) / (conversation, seq) constraints
APPEND_ATTEMPTS = 2


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on round-trip
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _to_document(row: DocumentRow) -> Document:
    return Document(
        doc_id=row.doc_id,
        owner_id=row.owner_id,
        stored_filename=row.stored_filename,
        original_name=row.original_name,
        format=DocumentFormat(row.format),
        mime_type=row.mime_type,
        content_ref=row.content_ref,
        created_at=_as_utc(row.created_at),
    )


def _to_message(row: MessageRow) -> Message:
    return Message(role=Role(row.role), content=row.content, timestamp=_as_utc(row.created_at))


class SqlDocumentRepository:
    """SQL implementation of DocumentRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, document: Document) -> None:
        """Insert a new document record."""
        async with self._session_factory() as session:
            session.add(
                DocumentRow(
                    doc_id=document.doc_id,
                    owner_id=document.owner_id,
                    stored_filename=document.stored_filename,
                    original_name=document.original_name,
                    format=document.format.value,
                    mime_type=document.mime_type,
                    content_ref=document.content_ref,
                    created_at=document.created_at,
                )
            )
            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceFailed("add_document") from e

    async def get(self, doc_id: uuid.UUID) -> Document | None:
        """Get document by ID."""
        async with self._session_factory() as session:
            try:
                row = await session.get(DocumentRow, doc_id)
            except SQLAlchemyError as e:
                raise PersistenceFailed("get_document") from e
            return _to_document(row) if row else None

    async def list_for_owner(self, owner_id: uuid.UUID) -> list[Document]:
        """List an owner's documents, newest first."""
        query = (
            select(DocumentRow)
            .where(DocumentRow.owner_id == owner_id)
            .order_by(DocumentRow.created_at.desc())
        )
        async with self._session_factory() as session:
            try:
                result = await session.execute(query)
            except SQLAlchemyError as e:
                raise PersistenceFailed("list_documents") from e
            return [_to_document(row) for row in result.scalars().all()]

    async def delete(self, doc_id: uuid.UUID, owner_id: uuid.UUID) -> bool:
        """Delete a document owned by owner_id (cascades to conversations)."""
        async with self._session_factory() as session:
            try:
                row = await session.get(DocumentRow, doc_id)

                # Enforce ownership
                if row is None or row.owner_id != owner_id:
                    return False

                await session.delete(row)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceFailed("delete_document") from e
            return True


class SqlConversationRepository:
    """SQL implementation of ConversationRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    async def _find(
        session: AsyncSession, owner_id: uuid.UUID, doc_id: uuid.UUID
    ) -> ConversationRow | None:
        result = await session.execute(
            select(ConversationRow).where(
                ConversationRow.owner_id == owner_id,
                ConversationRow.doc_id == doc_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _messages(session: AsyncSession, conversation_id: uuid.UUID) -> list[Message]:
        result = await session.execute(
            select(MessageRow)
            .where(MessageRow.conversation_id == conversation_id)
            .order_by(MessageRow.seq)
        )
        return [_to_message(row) for row in result.scalars().all()]

    async def append(
        self,
        owner_id: uuid.UUID,
        doc_id: uuid.UUID,
        user_text: str,
        assistant_text: str,
        *,
        asked_at: datetime | None = None,
    ) -> Conversation:
        """Append a user/assistant message pair in one transaction."""
        for attempt in range(1, APPEND_ATTEMPTS + 1):
            now = datetime.now(UTC)
            async with self._session_factory() as session:
                try:
                    conversation = await self._find(session, owner_id, doc_id)
                    if conversation is None:
                        conversation = ConversationRow(
                            conversation_id=uuid.uuid4(),
                            owner_id=owner_id,
                            doc_id=doc_id,
                            last_updated=now,
                        )
                        session.add(conversation)
                        await session.flush()
                        next_seq = 0
                    else:
                        max_seq = await session.scalar(
                            select(func.max(MessageRow.seq)).where(
                                MessageRow.conversation_id == conversation.conversation_id
                            )
                        )
                        next_seq = 0 if max_seq is None else max_seq + 1

                    session.add_all(
                        [
                            MessageRow(
                                conversation_id=conversation.conversation_id,
                                seq=next_seq,
                                role=Role.user.value,
                                content=user_text,
                                created_at=asked_at or now,
                            ),
                            MessageRow(
                                conversation_id=conversation.conversation_id,
                                seq=next_seq + 1,
                                role=Role.assistant.value,
                                content=assistant_text,
                                created_at=now,
                            ),
                        ]
                    )
                    conversation.last_updated = now
                    await session.flush()

                    messages = await self._messages(session, conversation.conversation_id)
                    await session.commit()

                    return Conversation(
                        owner_id=owner_id,
                        doc_id=doc_id,
                        messages=messages,
                        last_updated=now,
                    )
                except IntegrityError as e:
                    await session.rollback()
                    if attempt < APPEND_ATTEMPTS:
                        logger.warning(
                            f"Concurrent append for doc_id={doc_id}, retrying ({e.orig})"
                        )
                        continue
                    raise PersistenceFailed("append_turn") from e
                except SQLAlchemyError as e:
                    await session.rollback()
                    raise PersistenceFailed("append_turn") from e

        raise PersistenceFailed("append_turn")

    async def history(self, owner_id: uuid.UUID, doc_id: uuid.UUID) -> list[Message]:
        """Ordered messages, or an empty list."""
        query = (
            select(MessageRow)
            .join(ConversationRow, MessageRow.conversation_id == ConversationRow.conversation_id)
            .where(ConversationRow.owner_id == owner_id, ConversationRow.doc_id == doc_id)
            .order_by(MessageRow.seq)
        )
        async with self._session_factory() as session:
            try:
                result = await session.execute(query)
            except SQLAlchemyError as e:
                raise PersistenceFailed("read_history") from e
            return [_to_message(row) for row in result.scalars().all()]

    async def delete_for_document(self, owner_id: uuid.UUID, doc_id: uuid.UUID) -> None:
        """Delete the conversation and its messages if present."""
        async with self._session_factory() as session:
            try:
                conversation = await self._find(session, owner_id, doc_id)
                if conversation is None:
                    return
                await session.delete(conversation)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceFailed("delete_conversation") from e
