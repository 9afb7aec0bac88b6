"""Centralized logging configuration for PEC Pulse.

Modules log through ``logging.getLogger(__name__)``; the handler lives on the
root logger so ``services.*``, ``lib.*`` and ``nodes.*`` all share one format.
Structured processing events go through the ``pec_pulse.events`` logger.
"""

import json
import logging
import os
from typing import Any

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("pec_pulse.events")


def configure_logging(level: str | None = None) -> None:
    """
    Attach the stream handler to the root logger once and set its level.

    Args:
        level (str | None): Level name; defaults to ``PEC_LOG_LEVEL`` or INFO.
    """
    root = logging.getLogger()
    if not any(getattr(h, "_pec_pulse", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._pec_pulse = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    set_log_level(level or os.getenv("PEC_LOG_LEVEL", "INFO"))


def log_event(
    job_id: str,
    step: str,
    event: str,
    details: dict[str, Any] | None = None,
) -> None:
    """
    Log a structured processing event.

    Args:
        job_id (str): Minutes id, document id or batch job id the event belongs to.
        step (str): Operation name (``ocr``, ``summarize``, ``member_extraction``...).
        event (str): What happened.
        details (dict[str, Any] | None): Counts, statuses and other small values.
    """
    payload = {
        "job_id": job_id,
        "step": step,
        "event": event,
        "details": details or {},
    }
    logger.info(json.dumps(payload, default=str))


def log_error(
    job_id: str,
    step: str,
    error: Exception,
    context: dict[str, Any] | None = None,
) -> None:
    """Log a failed item as one JSON line; the caller decides whether to carry on."""
    payload = {
        "job_id": job_id,
        "step": step,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }
    logger.error(json.dumps(payload, default=str))


def set_log_level(level: str) -> None:
    """
    Set the root logging level.

    Args:
        level (str): Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    logging.getLogger().setLevel(numeric_level)
