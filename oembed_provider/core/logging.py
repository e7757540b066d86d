"""Structured logging setup with request ID support."""

import contextlib
import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar

# Context variable to hold the current request ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

event_logger = logging.getLogger("oembed_provider.events")


class RequestIDFilter(logging.Filter):
    """Inject request_id from contextvars into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


def generate_request_id() -> str:
    """Request ID: millisecond timestamp plus a random suffix, e.g. ``req_1718000000000_1a2b3c4d5``."""
    return f"req_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def current_request_id() -> str | None:
    """The request ID bound to the current context, if any."""
    rid = request_id_var.get()
    return None if rid == "-" else rid


def emit_event(event: str, **fields) -> None:
    """Log a telemetry event as a single JSON line.

    Telemetry is fire-and-forget: any failure while serializing or emitting
    the event is discarded so it can never change the response being built.
    """
    with contextlib.suppress(Exception):
        event_logger.info("%s %s", event, json.dumps(fields, default=str, sort_keys=True))


def setup_logging(level: str = "INFO") -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    fmt = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s - %(message)s"

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    handler.addFilter(RequestIDFilter())

    root = logging.getLogger()
    root.setLevel(numeric_level)
    # Remove existing handlers to avoid duplicates on reload
    root.handlers.clear()
    root.addHandler(handler)

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(numeric_level, logging.WARNING))
