"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-09-28

Creates:
- document
- conversation (unique per owner + document)
- message (ordered by seq within a conversation)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # document table
    op.create_table(
        "document",
        sa.Column("doc_id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("stored_filename", sa.Text(), nullable=False),
        sa.Column("original_name", sa.Text(), nullable=False),
        sa.Column("format", sa.Text(), nullable=False),
        sa.Column("mime_type", sa.Text(), nullable=False),
        sa.Column("content_ref", sa.Text(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("idx_document_owner_created", "document", ["owner_id", "created_at"])

    # conversation table
    op.create_table(
        "conversation",
        sa.Column("conversation_id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("doc_id", sa.Uuid(), nullable=False),
        sa.Column(
            "last_updated", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.ForeignKeyConstraint(["doc_id"], ["document.doc_id"], ondelete="CASCADE"),
        sa.UniqueConstraint("owner_id", "doc_id", name="uq_conversation_owner_doc"),
    )

    # message table
    op.create_table(
        "message",
        sa.Column("message_id", sa.Uuid(), primary_key=True),
        sa.Column("conversation_id", sa.Uuid(), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["conversation.conversation_id"], ondelete="CASCADE"
        ),
        sa.UniqueConstraint("conversation_id", "seq", name="uq_message_conversation_seq"),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("message")
    op.drop_table("conversation")
    op.drop_index("idx_document_owner_created", table_name="document")
    op.drop_table("document")
