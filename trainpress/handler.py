"""Adapting plain functions into request handlers."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from trainpress.error import AppError
from trainpress.messages import Request, Response
from trainpress.response import into_response

Handler = Callable[[Request], Awaitable[Response]]


def into_handler(func: Callable[[Request], Any]) -> Handler:
    """Wrap a function taking a Request into an async handler returning a Response.

    The function may be sync or async; its return value goes through into_response,
    and an AppError it raises becomes that error's response.
    """

    @functools.wraps(func)
    async def handler(request: Request) -> Response:
        try:
            result = func(request)
            if inspect.isawaitable(result):
                result = await result
        except AppError as exc:
            return exc.into_response()
        return into_response(result)

    return handler