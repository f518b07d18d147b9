"""An app whose responses pass through built-in and custom middleware layers."""

from __future__ import annotations

import argparse
import asyncio
import logging
import re
import time
from dataclasses import dataclass

from trainpress.app import App
from trainpress.messages import Request, Response
from trainpress.middleware import Logger, Middleware, Next, RequestId
from trainpress.response import Json

ADDRESS = "127.0.0.1:3000"

_HEADER_NAME = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_HEADER_VALUE = re.compile(r"[\t\x20-\x7e]*")


class TimingMiddleware(Middleware):
    """Prints how long each request took to handle."""

    async def call(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        path = request.path
        response = await next.run(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        print(f"⏱️  {path} took {elapsed_ms:.3f}ms")
        return response


@dataclass
class CustomHeaderMiddleware(Middleware):
    """Adds a fixed header to every response, if name and value are valid."""

    header_name: str
    header_value: str

    async def call(self, request: Request, next: Next) -> Response:
        response = await next.run(request)
        if _HEADER_NAME.fullmatch(self.header_name) and _HEADER_VALUE.fullmatch(
            self.header_value
        ):
            response.headers[self.header_name] = self.header_value
        return response


@dataclass
class RequestCounterMiddleware(Middleware):
    """Counts the requests seen so far and prints the running total."""

    count: int = 0

    async def call(self, request: Request, next: Next) -> Response:
        self.count += 1
        print(f"📊 Request #{self.count}")
        return await next.run(request)


async def hello(request: Request) -> Json:
    return Json(
        {
            "message": "Hello! This response passed through multiple middleware layers",
            "middleware_count": 5,
        }
    )


async def info(request: Request) -> str:
    return (
        "This API demonstrates middleware composition:\n"
        "1. RequestId - Adds request ID\n"
        "2. Logger - Logs requests\n"
        "3. TimingMiddleware - Measures duration\n"
        "4. CustomHeaderMiddleware - Adds X-Powered-By header\n"
        "5. RequestCounterMiddleware - Counts total requests\n"
    )


def build_app() -> App:
    """Return the app with five middleware layers and two routes."""
    return (
        App()
        .middleware(RequestId())
        .middleware(Logger())
        .middleware(TimingMiddleware())
        .middleware(CustomHeaderMiddleware("X-Powered-By", "TrainPress/Hyper"))
        .middleware(RequestCounterMiddleware())
        .get("/", hello)
        .get("/info", info)
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="middleware_example", description="Serve an app with layered middleware."
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    app = build_app()
    print(f"🚀 Middleware example running on http://{ADDRESS}")
    print("📝 Try:")
    print(f"   curl -v http://{ADDRESS}")
    print(f"   curl http://{ADDRESS}/info")
    print()
    print("Watch the terminal for middleware output!")

    asyncio.run(app.listen(ADDRESS))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())