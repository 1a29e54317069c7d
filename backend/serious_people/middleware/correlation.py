"""Request correlation ids.

Each request gets an X-Request-ID (echoed from the client when it sends a
sane one, freshly generated otherwise). core.logging puts it on every log
line and the exception handlers return it alongside debug_id.
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def is_acceptable_request_id(value: str) -> bool:
    """Client ids are echoed into logs and headers: printable ASCII, bounded length."""
    return 0 < len(value) <= MAX_REQUEST_ID_LENGTH and value.isascii() and value.isprintable()


def setup_correlation_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=REQUEST_ID_HEADER,
        generator=lambda: str(uuid.uuid4()),
        validator=is_acceptable_request_id,
        transformer=lambda value: value,
    )


def get_correlation_id() -> str | None:
    """Current request's correlation ID, or None outside a request."""
    return correlation_id.get(None)


__all__ = ["REQUEST_ID_HEADER", "get_correlation_id", "is_acceptable_request_id", "setup_correlation_middleware"]
