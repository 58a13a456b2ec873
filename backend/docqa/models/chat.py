"""Conversation domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Message author."""

    user = "user"
    assistant = "assistant"


class Message(BaseModel):
    """Single conversation message."""

    role: Role
    content: str
    timestamp: datetime


class Conversation(BaseModel):
    """Ordered message log for one (owner, document) pair."""

    owner_id: UUID
    doc_id: UUID
    messages: list[Message] = Field(default_factory=list)
    last_updated: datetime


class ChatAnswer(BaseModel):
    """Result of a single grounded question."""

    doc_id: UUID
    question: str
    answer: str
