"""Conversion of handler return values into responses."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Generic, TypeVar

from trainpress.error import InternalError
from trainpress.messages import Response

T = TypeVar("T")


def _encode(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


@dataclass(frozen=True)
class Json(Generic[T]):
    """A value to be sent as an application/json body."""

    value: T

    def into_response(self) -> Response:
        try:
            payload = json.dumps(
                self.value,
                default=_encode,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as exc:
            return InternalError(f"json serialize: {exc}").into_response()
        return Response(HTTPStatus.OK, {"content-type": "application/json"}, payload)


def plain_text(body: str, status: int) -> Response:
    """Build a text/plain response."""
    return Response(status, {"content-type": "text/plain; charset=utf-8"}, body)


def _is_status(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def into_response(value: Any) -> Response:
    """Turn a handler's return value into a Response.

    Accepts a Response, anything with an into_response() method (Json, AppError),
    a str (plain text, 200), a status code (empty body), None (204), or a
    (status, value) pair whose status replaces the inner response's.
    """
    if isinstance(value, Response):
        return value
    convert = getattr(value, "into_response", None)
    if callable(convert):
        return convert()
    if value is None:
        return Response(HTTPStatus.NO_CONTENT)
    if isinstance(value, str):
        return plain_text(value, HTTPStatus.OK)
    if _is_status(value):
        return Response(value)
    if isinstance(value, tuple) and len(value) == 2 and _is_status(value[0]):
        status, inner = value
        return dataclasses.replace(into_response(inner), status=status)
    raise TypeError(f"cannot turn {type(value).__name__} into a response")