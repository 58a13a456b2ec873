"""SQLAlchemy ORM models for documents and conversations."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class DocumentRow(Base):
    """Document table - one row per upload, owner-scoped."""

    __tablename__ = "document"
    __table_args__ = (Index("idx_document_owner_created", "owner_id", "created_at"),)

    doc_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    stored_filename: Mapped[str] = mapped_column(Text, nullable=False)
    original_name: Mapped[str] = mapped_column(Text, nullable=False)
    format: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(Text, nullable=False)
    content_ref: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    conversations: Mapped[list["ConversationRow"]] = relationship(
        "ConversationRow", back_populates="document", cascade="all, delete-orphan"
    )


class ConversationRow(Base):
    """Conversation table - at most one per (owner, document)."""

    __tablename__ = "conversation"
    __table_args__ = (UniqueConstraint("owner_id", "doc_id", name="uq_conversation_owner_doc"),)

    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    doc_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("document.doc_id", ondelete="CASCADE"), nullable=False
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    document: Mapped["DocumentRow"] = relationship("DocumentRow", back_populates="conversations")
    messages: Mapped[list["MessageRow"]] = relationship(
        "MessageRow",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="MessageRow.seq",
    )


class MessageRow(Base):
    """Message table - append-only, ordered by seq within a conversation."""

    __tablename__ = "message"
    __table_args__ = (
        UniqueConstraint("conversation_id", "seq", name="uq_message_conversation_seq"),
    )

    message_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("conversation.conversation_id", ondelete="CASCADE"), nullable=False
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    conversation: Mapped["ConversationRow"] = relationship(
        "ConversationRow", back_populates="messages"
    )
