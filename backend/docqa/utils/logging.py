"""Structured logging for provider calls and application log setup."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at application start-up."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


class StructuredProviderLogger:
    """Structured logger for provider call attempts."""

    def log_attempt(
        self,
        operation: str,
        attempt: int,
        outcome: str,
        latency_ms: float,
        delay_seconds: float | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log a provider call attempt with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "attempt": attempt,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if delay_seconds is not None:
            log_data["retry_in_s"] = delay_seconds
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Provider call: {operation} attempt {attempt} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
