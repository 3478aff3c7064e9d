# telelead_intake/middleware/body_limit.py
from __future__ import annotations

from typing import List

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from telelead_intake.core.exceptions import PayloadTooLargeError
from telelead_intake.core.logging import get_structlog_logger

logger = get_structlog_logger(__name__)

LIMITED_METHODS = ("POST", "PUT", "PATCH")


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than ``max_bytes`` with a 413.

    A declared ``Content-Length`` is checked up front. Bodies without one
    (chunked uploads) are read here, at most ``max_bytes`` of them, and
    replayed to the app once complete.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = 1048576):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in LIMITED_METHODS:
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                response = JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"ok": False, "error": "Invalid Content-Length header"},
                )
                await response(scope, receive, send)
                return
            if declared > self.max_bytes:
                await self._reject(scope, receive, send, received=declared)
                return

        chunks: List[bytes] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body = message.get("body", b"")
            received += len(body)
            if received > self.max_bytes:
                await self._reject(scope, receive, send, received=received)
                return
            chunks.append(body)
            more_body = message.get("more_body", False)

        body = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, received: int) -> None:
        error = PayloadTooLargeError()
        logger.warning(
            "request.too_large",
            path=scope.get("path"),
            received_bytes=received,
            max_bytes=self.max_bytes,
        )
        response = JSONResponse(status_code=error.status_code, content=error.to_content())
        await response(scope, receive, send)
