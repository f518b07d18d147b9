"""Request and response values passed between handlers, middleware and the server."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any
from urllib.parse import urlsplit


class _Headers(dict):
    """Header map whose names are compared without regard to case."""

    def __init__(self, items: Mapping[str, Any] | Iterable[tuple[str, Any]] = ()) -> None:
        super().__init__()
        self.update(items)

    def __setitem__(self, name: str, value: Any) -> None:
        super().__setitem__(name.lower(), str(value))

    def __getitem__(self, name: str) -> str:
        return super().__getitem__(name.lower())

    def __delitem__(self, name: str) -> None:
        super().__delitem__(name.lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and super().__contains__(name.lower())

    def get(self, name: str, default: Any = None) -> Any:
        return super().get(name.lower(), default)

    def pop(self, name: str, *default: Any) -> Any:
        return super().pop(name.lower(), *default)

    def setdefault(self, name: str, default: Any = "") -> str:
        if name not in self:
            self[name] = default
        return self[name]

    def update(self, other: Any = (), **extra: Any) -> None:
        items = other.items() if isinstance(other, Mapping) else other
        for name, value in items:
            self[name] = value
        for name, value in extra.items():
            self[name] = value

    def copy(self) -> "_Headers":
        return _Headers(self)


def full(body: str | bytes | bytearray | memoryview | None) -> bytes:
    """Turn a complete body given as text or bytes into bytes."""
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    raise TypeError(f"cannot use {type(body).__name__} as a body")


@dataclass
class Request:
    """An incoming HTTP request with its whole body read."""

    method: str = "GET"
    uri: str = "/"
    headers: dict[str, str] = field(default_factory=_Headers)
    body: bytes = b""
    extensions: dict[Any, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = _Headers(self.headers)
        self.body = full(self.body)

    @property
    def path(self) -> str:
        return urlsplit(self.uri).path or "/"

    @property
    def query_string(self) -> str:
        return urlsplit(self.uri).query


@dataclass
class Response:
    """An HTTP response with a status, headers and a complete body."""

    status: int = HTTPStatus.OK
    headers: dict[str, str] = field(default_factory=_Headers)
    body: bytes = b""

    def __post_init__(self) -> None:
        if isinstance(self.status, bool) or not isinstance(self.status, int):
            raise TypeError(f"status must be an int, not {type(self.status).__name__}")
        if not 100 <= self.status <= 999:
            raise ValueError(f"invalid status code {self.status}")
        try:
            self.status = HTTPStatus(self.status)
        except ValueError:
            self.status = int(self.status)
        self.headers = _Headers(self.headers)
        self.body = full(self.body)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.body)