"""Exception handlers translating domain errors into structured responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from backend.docqa.errors import DocQAError

logger = logging.getLogger(__name__)


async def docqa_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a DocQAError as {"error": {kind, message, reason}}."""
    assert isinstance(exc, DocQAError)
    if exc.status_code >= 500:
        logger.error(
            f"[{request.method} {request.url.path}] {type(exc).__name__}: reason={exc.reason}",
            exc_info=exc.__cause__ is not None,
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report unexpected failures as ProcessingFailed without leaking details."""
    logger.error(f"[{request.method} {request.url.path}] unhandled: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": DocQAError().to_dict()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install domain and fallback exception handlers."""
    app.add_exception_handler(DocQAError, docqa_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
