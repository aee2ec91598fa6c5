import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

TRACE_HEADER = "X-Trace-ID"
_TRACE_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_trace_id(inbound: str | None) -> str:
    """Reuse a caller's trace id when it is safe to echo into logs, else mint one."""
    if inbound and _TRACE_ID_PATTERN.match(inbound):
        return inbound
    return uuid.uuid4().hex


class TraceIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request.state.trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
        response: Response = await call_next(request)
        response.headers[TRACE_HEADER] = request.state.trace_id
        return response
