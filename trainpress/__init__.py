"""An asyncio web framework with routing, middleware, extractors, JSON responses and an HTTP/1.1 server."""

__version__ = "0.1.0"