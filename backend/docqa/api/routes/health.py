"""Health check endpoints.

- /health: liveness, always 200
- /healthz: component readiness (database, upload storage, provider)
"""

import json
import os
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Response
from sqlalchemy import text

from backend.docqa.config import Settings, get_settings
from backend.docqa.db.engine import create_async_engine_from_settings

router = APIRouter()


async def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.database_url:
        return (True, "in_memory")

    engine = create_async_engine_from_settings(settings)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")
    finally:
        await engine.dispose()


async def check_storage(settings: Settings) -> tuple[bool, str]:
    """Check that the upload directory exists (or can be created) and is writable.

    Returns:
        (is_ok, status_message)
    """
    upload_dir = Path(settings.upload_dir)
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return (False, f"error: {type(e).__name__}")

    if not os.access(upload_dir, os.W_OK):
        return (False, "error: not_writable")
    return (True, "ok")


def check_provider(settings: Settings) -> str:
    """Report which reasoning provider is configured (informational only)."""
    api_key = settings.openai_api_key
    if api_key and api_key.get_secret_value():
        return "openai"
    return "stub"


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Readiness check.

    Returns:
        200 with component status if database and storage are ok
        503 if either fails
    """
    settings = get_settings()

    db_ok, db_status = await check_db(settings)
    storage_ok, storage_status = await check_storage(settings)

    core_ok = db_ok and storage_ok

    response_body = {
        "status": "ok" if core_ok else "degraded",
        "components": {
            "db": db_status,
            "storage": storage_status,
            "provider": check_provider(settings),
        },
    }

    if not core_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
