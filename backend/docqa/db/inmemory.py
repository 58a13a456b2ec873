"""In-memory implementations of repository interfaces."""

from datetime import UTC, datetime
from uuid import UUID

from backend.docqa.models.chat import Conversation, Message, Role
from backend.docqa.models.documents import Document


class InMemoryDocumentRepository:
    """In-memory implementation of DocumentRepository."""

    def __init__(self) -> None:
        self._documents: dict[UUID, Document] = {}

    async def add(self, document: Document) -> None:
        """Insert a new document record."""
        self._documents[document.doc_id] = document

    async def get(self, doc_id: UUID) -> Document | None:
        """Get document by ID."""
        return self._documents.get(doc_id)

    async def list_for_owner(self, owner_id: UUID) -> list[Document]:
        """List an owner's documents, newest first."""
        results = [d for d in self._documents.values() if d.owner_id == owner_id]
        results.sort(key=lambda d: d.created_at, reverse=True)
        return results

    async def delete(self, doc_id: UUID, owner_id: UUID) -> bool:
        """Delete a document owned by owner_id."""
        document = self._documents.get(doc_id)

        # Enforce ownership
        if document is None or document.owner_id != owner_id:
            return False

        del self._documents[doc_id]
        return True


class InMemoryConversationRepository:
    """In-memory implementation of ConversationRepository."""

    def __init__(self) -> None:
        self._conversations: dict[tuple[UUID, UUID], Conversation] = {}

    async def append(
        self,
        owner_id: UUID,
        doc_id: UUID,
        user_text: str,
        assistant_text: str,
        *,
        asked_at: datetime | None = None,
    ) -> Conversation:
        """Append a user/assistant message pair."""
        now = datetime.now(UTC)
        key = (owner_id, doc_id)

        conversation = self._conversations.get(key)
        if conversation is None:
            conversation = Conversation(owner_id=owner_id, doc_id=doc_id, last_updated=now)
            self._conversations[key] = conversation

        conversation.messages.append(
            Message(role=Role.user, content=user_text, timestamp=asked_at or now)
        )
        conversation.messages.append(
            Message(role=Role.assistant, content=assistant_text, timestamp=now)
        )
        conversation.last_updated = now

        return conversation.model_copy(deep=True)

    async def history(self, owner_id: UUID, doc_id: UUID) -> list[Message]:
        """Ordered messages, or an empty list."""
        conversation = self._conversations.get((owner_id, doc_id))
        if conversation is None:
            return []
        return [m.model_copy() for m in conversation.messages]

    async def delete_for_document(self, owner_id: UUID, doc_id: UUID) -> None:
        """Delete the conversation if present."""
        self._conversations.pop((owner_id, doc_id), None)
