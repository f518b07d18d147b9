"""HTTP/1.1 server that runs requests through an app's middleware and routes."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import signal
from contextlib import suppress
from http import HTTPStatus
from typing import TYPE_CHECKING

import h11

from trainpress.error import InternalError, NotFound
from trainpress.extract import PathParams, StateExt
from trainpress.handler import into_handler
from trainpress.messages import Request, Response
from trainpress.middleware import Next

if TYPE_CHECKING:
    from trainpress.app import App

logger = logging.getLogger(__name__)

GRACEFUL_TIMEOUT = 30.0
_READ_SIZE = 65536

_not_found = into_handler(lambda request: NotFound())


async def dispatch(app: App, request: Request) -> Response:
    """Route `request` through the app's middleware to its handler, or to a 404."""
    request.extensions[StateExt] = StateExt(app.state)
    matched = app.router.find(request.method, request.path)
    if matched is None:
        handler = _not_found
    else:
        request.extensions[PathParams] = PathParams(matched.params)
        handler = matched.handler
    return await Next(tuple(app.middlewares), handler).run(request)


async def serve(app: App, addr: str) -> None:
    """Serve `app` on `addr` until SIGINT or SIGTERM, then drain connections."""
    host, port = _parse_addr(addr)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for name in ("SIGINT", "SIGTERM"):
        sig = getattr(signal, name, None)
        if sig is None:
            continue
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError, ValueError):
            continue
        installed.append(sig)
    try:
        await _run(app, host, port, stop)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _parse_addr(addr: str) -> tuple[str, int]:
    host, sep, port_text = addr.rpartition(":")
    if not sep:
        raise ValueError(f"invalid socket address syntax: {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        valid_host = ":" in host
    else:
        valid_host = ":" not in host
    try:
        ipaddress.ip_address(host)
    except ValueError:
        valid_host = False
    if not valid_host or not port_text.isdigit() or int(port_text) > 65535:
        raise ValueError(f"invalid socket address syntax: {addr!r}")
    return host, int(port_text)


async def _run(
    app: App,
    host: str,
    port: int,
    stop: asyncio.Event,
    ready: asyncio.Future | None = None,
) -> None:
    connections: set[asyncio.Task] = set()

    async def on_connect(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        if task is not None:
            connections.add(task)
        try:
            await _handle_connection(app, reader, writer)
        finally:
            if task is not None:
                connections.discard(task)

    server = await asyncio.start_server(on_connect, host, port)
    bound = server.sockets[0].getsockname()
    logger.info("server listening on %s:%s", bound[0], bound[1])
    if ready is not None and not ready.done():
        ready.set_result(bound[1])

    try:
        await stop.wait()
        logger.info("shutdown signal received")
    finally:
        server.close()

    pending = set(connections)
    logger.info("draining connections (%d active)", len(pending))
    if pending:
        _, still_running = await asyncio.wait(pending, timeout=GRACEFUL_TIMEOUT)
        if still_running:
            logger.warning(
                "graceful shutdown timeout exceeded, forcefully closing %d connections",
                len(still_running),
            )
            for task in still_running:
                task.cancel()
            await asyncio.gather(*still_running, return_exceptions=True)
        else:
            logger.info("all connections closed gracefully")
    else:
        logger.info("all connections closed gracefully")
    await server.wait_closed()
    logger.info("server stopped cleanly")


async def _handle_connection(
    app: App, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    peer = writer.get_extra_info("peername")
    conn = h11.Connection(h11.SERVER)
    try:
        while True:
            try:
                request = await _read_request(conn, reader, writer)
            except h11.RemoteProtocolError as exc:
                logger.debug("bad request from %s: %s", peer, exc)
                if conn.our_state in (h11.IDLE, h11.SEND_RESPONSE):
                    bad = Response(HTTPStatus.BAD_REQUEST, {"connection": "close"})
                    await _send_response(conn, writer, bad, "GET")
                break
            if request is None:
                break
            try:
                response = await dispatch(app, request)
            except Exception:
                logger.exception("unhandled error while handling %s %s", request.method, request.path)
                response = InternalError("unhandled handler error").into_response()
            await _send_response(conn, writer, response, request.method)
            if conn.our_state is h11.MUST_CLOSE:
                break
            conn.start_next_cycle()
    except (OSError, h11.LocalProtocolError, h11.RemoteProtocolError) as exc:
        logger.debug("connection with %s ended: %r", peer, exc)
    finally:
        writer.close()
        with suppress(OSError):
            await writer.wait_closed()


async def _read_request(
    conn: h11.Connection, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> Request | None:
    head: h11.Request | None = None
    chunks: list[bytes] = []
    while True:
        event = conn.next_event()
        if event is h11.NEED_DATA:
            if conn.they_are_waiting_for_100_continue:
                writer.write(conn.send(h11.InformationalResponse(status_code=100, headers=[])))
                await writer.drain()
            conn.receive_data(await reader.read(_READ_SIZE))
        elif isinstance(event, h11.Request):
            head = event
        elif isinstance(event, h11.Data):
            chunks.append(bytes(event.data))
        elif isinstance(event, h11.EndOfMessage):
            assert head is not None
            return Request(
                method=head.method.decode("ascii"),
                uri=head.target.decode("latin-1"),
                headers={
                    name.decode("latin-1"): value.decode("latin-1")
                    for name, value in head.headers
                },
                body=b"".join(chunks),
            )
        elif isinstance(event, h11.ConnectionClosed):
            return None


def _allows_body(status: int) -> bool:
    return status >= 200 and status not in (HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED)


async def _send_response(
    conn: h11.Connection, writer: asyncio.StreamWriter, response: Response, method: str
) -> None:
    status = int(response.status)
    headers = [
        (name.encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers.items()
    ]
    framed = "content-length" in response.headers or "transfer-encoding" in response.headers
    if not framed and _allows_body(status):
        headers.append((b"content-length", str(len(response.body)).encode("ascii")))
    try:
        reason = HTTPStatus(status).phrase.encode("ascii")
    except ValueError:
        reason = b""
    writer.write(conn.send(h11.Response(status_code=status, headers=headers, reason=reason)))
    if response.body and method != "HEAD" and _allows_body(status):
        writer.write(conn.send(h11.Data(data=response.body)))
    writer.write(conn.send(h11.EndOfMessage()))
    await writer.drain()