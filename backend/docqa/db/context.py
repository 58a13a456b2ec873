"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the caller's identity.

    Documents and conversations are exclusively owned by one identity; every
    repository call is scoped by owner_id.
    """

    owner_id: UUID
