"""A minimal app with a greeting and a health check."""

from __future__ import annotations

import argparse
import asyncio
import logging

from trainpress.app import App
from trainpress.messages import Request
from trainpress.response import Json

ADDRESS = "127.0.0.1:3000"


async def hello(request: Request) -> Json:
    return Json({"text": "Hello from TrainPress!"})


async def health(request: Request) -> Json:
    return Json({"status": "healthy", "framework": "TrainPress"})


def build_app() -> App:
    """Return the app with its two routes."""
    return App().get("/", hello).get("/health", health)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="hello_world", description="Serve a greeting and a health check."
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    app = build_app()
    print(f"🚀 Server running on http://{ADDRESS}")
    print(f"📝 Try: http://{ADDRESS} or http://{ADDRESS}/health")

    asyncio.run(app.listen(ADDRESS))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())