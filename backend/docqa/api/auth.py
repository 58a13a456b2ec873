"""Minimal auth dependency.

Credential and session management live outside this service; the caller's
identity arrives as "Bearer <owner_uuid>".
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.docqa.db.context import RequestContext


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer <owner_uuid>")

    Returns:
        RequestContext with owner_id

    Raises:
        HTTPException: 401 if the header is missing or invalid
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "

    try:
        return RequestContext(owner_id=uuid.UUID(token))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bearer token (expected owner UUID)",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
