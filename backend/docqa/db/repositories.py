"""Repository protocol interfaces for data access.

Storage is treated as a per-owner keyed store with find/insert/delete
operations; each single-record operation is assumed atomic.
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from backend.docqa.models.chat import Conversation, Message
from backend.docqa.models.documents import Document


class DocumentRepository(Protocol):
    """Repository for document records."""

    async def add(self, document: Document) -> None:
        """Insert a new document record.

        Raises:
            PersistenceFailed: If the record cannot be stored
        """
        ...

    async def get(self, doc_id: UUID) -> Document | None:
        """Get document by ID regardless of owner.

        Ownership is checked by the caller so that a foreign document can be
        told apart from a missing one.

        Returns:
            Document or None if not found
        """
        ...

    async def list_for_owner(self, owner_id: UUID) -> list[Document]:
        """List an owner's documents, newest first."""
        ...

    async def delete(self, doc_id: UUID, owner_id: UUID) -> bool:
        """Delete a document owned by owner_id.

        Returns:
            True if a record was deleted
        """
        ...


class ConversationRepository(Protocol):
    """Repository for per-(owner, document) message logs."""

    async def append(
        self,
        owner_id: UUID,
        doc_id: UUID,
        user_text: str,
        assistant_text: str,
        *,
        asked_at: datetime | None = None,
    ) -> Conversation:
        """Append a user/assistant message pair.

        Creates the conversation on first use. Identical consecutive questions
        are not deduplicated.

        Args:
            owner_id: Conversation owner
            doc_id: Document the conversation is about
            user_text: Question text
            assistant_text: Answer text
            asked_at: Timestamp for the user message (default: now)

        Returns:
            Conversation after the append

        Raises:
            PersistenceFailed: If the pair cannot be stored
        """
        ...

    async def history(self, owner_id: UUID, doc_id: UUID) -> list[Message]:
        """Ordered messages, or an empty list if no conversation exists."""
        ...

    async def delete_for_document(self, owner_id: UUID, doc_id: UUID) -> None:
        """Delete the conversation; a missing conversation is not an error."""
        ...
