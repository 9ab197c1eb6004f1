"""JSON logging with a per-request ledger context.

`RequestLoggingMiddleware` opens a context for every request. Auth and the
ledger services bind the acting user and the invoice or payment they touched
into it, so every line logged while the request runs carries those fields,
including the closing access line.
"""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

LOG_FIELDS = (
    "request_id",
    "user_id",
    "invoice_id",
    "invoice_number",
    "payment_id",
    "from_status",
    "to_status",
    "path",
    "method",
    "status_code",
    "latency_ms",
)

# 401 and 429 responses are repeated on the security logger.
SECURITY_EVENTS = {401: "unauthorized", 429: "rate_limited"}

# The dict is shared by reference, so binds made in the threadpool that runs
# a sync handler are visible to the middleware when it logs the response.
_ledger_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar("ledger_log_context", default=None)


@contextmanager
def ledger_log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    context = {key: value for key, value in fields.items() if value is not None}
    token = _ledger_context.set(context)
    try:
        yield context
    finally:
        _ledger_context.reset(token)


def bind_log_context(**fields: Any) -> None:
    """Attach fields to the active request context. Outside a request this is a no-op."""
    context = _ledger_context.get()
    if context is None:
        return
    context.update({key: value for key, value in fields.items() if value is not None})


def current_log_context() -> Dict[str, Any]:
    return dict(_ledger_context.get() or {})


class LedgerContextFilter(logging.Filter):
    """Copy the bound context onto records; explicit `extra=` values win."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in current_log_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in LOG_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(LedgerContextFilter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, logger_name: str = "request") -> None:
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)
        self.security_logger = logging.getLogger("security")

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id

        with ledger_log_context(request_id=request_id, path=request.url.path, method=request.method):
            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                self.logger.exception("unhandled_exception", extra={"latency_ms": _elapsed_ms(start)})
                raise

            status_code = response.status_code
            self.logger.info("request", extra={"status_code": status_code, "latency_ms": _elapsed_ms(start)})
            if status_code in SECURITY_EVENTS:
                self.security_logger.warning(SECURITY_EVENTS[status_code], extra={"status_code": status_code})

        response.headers["X-Request-Id"] = request_id
        return response
