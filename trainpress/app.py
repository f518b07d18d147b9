"""The application: routes, middleware and shared state, built by chaining."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from trainpress.handler import into_handler
from trainpress.messages import Request
from trainpress.middleware import Middleware
from trainpress.router import Router
from trainpress.server import serve


class App:
    """A web application; each builder method returns the app itself.

    An app made without a state is stateless: handlers asking for the state get None.
    """

    def __init__(self, state: Any = None) -> None:
        self.router = Router()
        self.middlewares: list[Middleware] = []
        self.state = state

    def middleware(self, mw: Middleware) -> App:
        """Append `mw` to the chain; middleware runs in the order it was added."""
        self.middlewares.append(mw)
        return self

    def route(self, method: str, path: str, func: Callable[[Request], Any]) -> App:
        """Register `func` for `method` and the path pattern `path`."""
        self.router.add(method, path, into_handler(func))
        return self

    def get(self, path: str, func: Callable[[Request], Any]) -> App:
        return self.route("GET", path, func)

    def post(self, path: str, func: Callable[[Request], Any]) -> App:
        return self.route("POST", path, func)

    def put(self, path: str, func: Callable[[Request], Any]) -> App:
        return self.route("PUT", path, func)

    def patch(self, path: str, func: Callable[[Request], Any]) -> App:
        return self.route("PATCH", path, func)

    def delete(self, path: str, func: Callable[[Request], Any]) -> App:
        return self.route("DELETE", path, func)

    async def listen(self, addr: str) -> None:
        """Serve the app on `addr` ("host:port") until SIGINT or SIGTERM."""
        await serve(self, addr)