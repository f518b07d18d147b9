"""Middleware chain and the built-in logging and request-id middleware."""

from __future__ import annotations

import dataclasses
import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from trainpress.handler import Handler
from trainpress.messages import Request, Response

logger = logging.getLogger(__name__)

_VISIBLE_ASCII = re.compile(r"[\t\x20-\x7e]*")


class Middleware(ABC):
    """Code run around a request; it passes control on through `next`."""

    @abstractmethod
    async def call(self, request: Request, next: Next) -> Response:
        """Handle `request`, usually by awaiting next.run(request)."""


@dataclass(frozen=True)
class Next:
    """The rest of the chain: the remaining middleware, then the handler."""

    middlewares: Sequence[Middleware]
    handler: Handler
    index: int = 0

    async def run(self, request: Request) -> Response:
        """Pass the request to the next middleware, or to the handler at the end."""
        if self.index < len(self.middlewares):
            middleware = self.middlewares[self.index]
            return await middleware.call(request, dataclasses.replace(self, index=self.index + 1))
        return await self.handler(request)


class Logger(Middleware):
    """Logs method, path, status and elapsed time of each request."""

    async def call(self, request: Request, next: Next) -> Response:
        method = request.method
        path = request.path
        start = time.perf_counter()
        response = await next.run(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "request handled: %s %s -> %d in %dms",
            method,
            path,
            int(response.status),
            elapsed_ms,
            extra={
                "method": method,
                "path": path,
                "status": int(response.status),
                "elapsed_ms": elapsed_ms,
            },
        )
        return response


class RequestId(Middleware):
    """Ensures each request and its response carry an x-request-id header."""

    async def call(self, request: Request, next: Next) -> Response:
        request_id = request.headers.get("x-request-id")
        if request_id is None or not _VISIBLE_ASCII.fullmatch(request_id):
            request_id = format(time.time_ns(), "x")
        request.headers["x-request-id"] = request_id
        response = await next.run(request)
        response.headers["x-request-id"] = request_id
        return response