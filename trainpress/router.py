"""Per-method route tables matching paths against patterns with parameters."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from trainpress.handler import Handler

_PARAM = re.compile(r"\{(\*?)([^{}]*)\}")


class RouteConflict(ValueError):
    """A route cannot be added: it is invalid or clashes with one already added."""


@dataclass
class Matched:
    """The handler of a matched route and the parameters it captured."""

    handler: Handler
    params: dict[str, str] = field(default_factory=dict)


@dataclass
class _Node:
    static: dict[str, _Node] = field(default_factory=dict)
    param: tuple[str, _Node] | None = None
    catch_all: tuple[str, Handler] | None = None
    handler: Handler | None = None


def _method_name(method: Any) -> str:
    return str(getattr(method, "value", method)).upper()


def _parse(path: str) -> list[tuple[str, str]]:
    segments = path.split("/")
    last = len(segments) - 1
    parsed = []
    for position, segment in enumerate(segments):
        match = _PARAM.fullmatch(segment)
        if match:
            star, name = match.groups()
            if not name:
                raise ValueError("parameter has no name")
            if star:
                if position != last:
                    raise ValueError("catch-all parameter must end the route")
                parsed.append(("catch_all", name))
            else:
                parsed.append(("param", name))
            continue
        unescaped = segment.replace("{{", "").replace("}}", "")
        if "{" in unescaped or "}" in unescaped:
            raise ValueError("a parameter must fill a whole path segment")
        parsed.append(("static", segment.replace("{{", "{").replace("}}", "}")))
    return parsed


class Router:
    """Routes keyed by HTTP method; static segments win over parameters."""

    def __init__(self) -> None:
        self._trees: dict[str, _Node] = {}

    def add(self, method: Any, path: str, handler: Handler) -> None:
        """Register `handler` for `method` and the pattern `path`."""
        name = _method_name(method)
        try:
            segments = _parse(path)
            self._insert(self._trees.setdefault(name, _Node()), segments, handler)
        except ValueError as exc:
            raise RouteConflict(f"route conflict on {name} {path}: {exc}") from None

    def find(self, method: Any, path: str) -> Matched | None:
        """Return the route matching `method` and `path`, or None."""
        tree = self._trees.get(_method_name(method))
        if tree is None:
            return None
        params: dict[str, str] = {}
        handler = self._lookup(tree, path.split("/"), 0, params)
        if handler is None:
            return None
        return Matched(handler, params)

    @staticmethod
    def _insert(node: _Node, segments: list[tuple[str, str]], handler: Handler) -> None:
        for kind, text in segments:
            if kind == "static":
                node = node.static.setdefault(text, _Node())
            elif kind == "param":
                if node.param is None:
                    node.param = (text, _Node())
                elif node.param[0] != text:
                    raise ValueError(
                        f"parameter '{text}' conflicts with '{node.param[0]}' at the same position"
                    )
                node = node.param[1]
            else:
                if node.catch_all is not None:
                    raise ValueError("conflicts with an existing catch-all route")
                node.catch_all = (text, handler)
                return
        if node.handler is not None:
            raise ValueError("route already registered")
        node.handler = handler

    def _lookup(
        self, node: _Node, segments: list[str], index: int, params: dict[str, str]
    ) -> Handler | None:
        if index == len(segments):
            return node.handler
        segment = segments[index]
        child = node.static.get(segment)
        if child is not None:
            found = self._lookup(child, segments, index + 1, params)
            if found is not None:
                return found
        if node.param is not None and segment:
            name, child = node.param
            params[name] = segment
            found = self._lookup(child, segments, index + 1, params)
            if found is not None:
                return found
            del params[name]
        if node.catch_all is not None:
            rest = "/".join(segments[index:])
            if rest:
                name, handler = node.catch_all
                params[name] = rest
                return handler
        return None