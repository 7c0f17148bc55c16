"""Request ID middleware — unique ID per request for tracing.

Learn: The incoming X-Request-ID is echoed back as a response header, so
it passes through the same header rules as everything else: only short
ids made of letters, digits, dot, dash and underscore are trusted.
Anything else (too long, spaces, non-ASCII) is replaced by a fresh UUID
rather than reflected to the client.

The id and path are bound to structlog's contextvars so policy logs
emitted while serving the request carry them.
"""

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID = re.compile(r"\A[A-Za-z0-9._-]{1,128}\Z")


def request_id_for(incoming: str | None) -> str:
    """The incoming id if it is safe to reflect, else a new UUID."""
    if incoming and _REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Propagate a well-formed request ID or generate one."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request_id_for(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
