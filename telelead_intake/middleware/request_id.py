# telelead_intake/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from typing import Mapping

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from telelead_intake.core.logging import set_request_id

# Caller-supplied ids end up in every log line; keep them short and plain.
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")
_TRACEPARENT = re.compile(r"^00-([0-9a-f]{32})-[0-9a-f]{16}-[0-9a-f]{2}$")


def resolve_request_id(headers: Mapping[str, str]) -> str:
    """Id for this request: X-Request-ID, X-Correlation-ID, W3C trace id, or a new uuid4."""
    for header in ("X-Request-ID", "X-Correlation-ID"):
        candidate = (headers.get(header) or "").strip()
        if _SAFE_ID.match(candidate):
            return candidate

    match = _TRACEPARENT.match((headers.get("traceparent") or "").strip())
    if match:
        return match.group(1)

    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the log context and echo it in the response."""

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers)
        request.state.request_id = request_id

        set_request_id(None)
        set_request_id(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
