"""Pulling path parameters, query strings, shared state and bodies out of requests."""

from __future__ import annotations

import dataclasses
import inspect
import json
import re
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar, Union
from urllib.parse import parse_qsl

from trainpress.error import BadRequest, BodyError, InvalidQuery, MissingState, PathParamError
from trainpress.messages import Request

T = TypeVar("T")

_INTEGER = re.compile(r"[+-]?[0-9]+")

_SIMPLE_NAMES: dict[str, Any] = {
    "int": int,
    "str": str,
    "float": float,
    "bool": bool,
    "bytes": bytes,
    "object": object,
    "Any": Any,
    "list": list,
    "List": list,
    "dict": dict,
    "Dict": dict,
    "None": type(None),
    "NoneType": type(None),
}


class PathParams(dict):
    """Parameters captured by the matched route pattern, by name."""


@dataclass(frozen=True)
class StateExt:
    """The application's shared state, attached to each request."""

    value: Any


def path_param(request: Request, name: str, kind: Callable[[str], T] = str) -> T:
    """Return the path parameter `name`, converted with `kind`."""
    params = request.extensions.get(PathParams)
    if params is None:
        raise PathParamError("no path params on this request")
    try:
        raw = params[name]
    except KeyError:
        raise PathParamError(f"param '{name}' not found") from None
    try:
        return kind(raw)
    except (TypeError, ValueError) as exc:
        raise PathParamError(f"param '{name}': {exc}") from exc


def query(request: Request, model: Any = dict) -> Any:
    """Parse the query string into `model`: a dataclass, dict, or other callable."""
    try:
        pairs = parse_qsl(request.query_string, keep_blank_values=True, errors="strict")
    except (UnicodeDecodeError, ValueError) as exc:
        raise InvalidQuery(exc) from exc
    if model is None or model is dict:
        return dict(pairs)
    if dataclasses.is_dataclass(model) and isinstance(model, type):
        return _query_dataclass(model, pairs)
    try:
        return model(**dict(pairs))
    except (TypeError, ValueError) as exc:
        raise InvalidQuery(exc) from exc


def state(request: Request) -> Any:
    """Return the application state attached to the request."""
    ext = request.extensions.get(StateExt)
    if ext is None:
        raise MissingState()
    return ext.value


async def json_body(request: Request, model: Any = None) -> Any:
    """Decode the request body as JSON, optionally into `model`."""
    raw = await body_bytes(request)
    try:
        data = json.loads(raw)
        return data if model is None else _from_json(model, data)
    except ValueError as exc:
        raise BadRequest(f"invalid json body: {exc}") from exc


async def body_bytes(request: Request) -> bytes:
    """Return the raw request body."""
    body = request.body
    if not isinstance(body, (bytes, bytearray, memoryview)):
        raise BodyError(f"body of type {type(body).__name__} is not bytes")
    return bytes(body)


def _field_types(model: type) -> dict[str, Any]:
    module = inspect.getmodule(model)
    namespace = vars(module) if module is not None else {}
    return {f.name: _resolve(f.type, namespace) for f in dataclasses.fields(model)}


def _resolve(annotation: Any, namespace: dict[str, Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return _parse_annotation(annotation.strip(), namespace)
    except (ValueError, TypeError, IndexError):
        return Any


def _split_top(text: str, sep: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = 0
    for pos, ch in enumerate(text):
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(text[start:pos].strip())
            start = pos + 1
    parts.append(text[start:].strip())
    return parts


def _union(args: list[Any]) -> Any:
    return Union[tuple(args)]


def _parse_annotation(text: str, namespace: dict[str, Any]) -> Any:
    text = text.strip().strip("'\"")
    alternatives = _split_top(text, "|")
    if len(alternatives) > 1:
        return _union([_parse_annotation(alt, namespace) for alt in alternatives])
    if text.endswith("]") and "[" in text:
        head, _, inner = text.partition("[")
        args = [_parse_annotation(arg, namespace) for arg in _split_top(inner[:-1], ",")]
        name = head.strip().rpartition(".")[2]
        if name == "Optional":
            return _union([args[0], type(None)])
        if name == "Union":
            return _union(args)
        if name in ("list", "List", "Sequence"):
            return list[args[0]]
        if name in ("dict", "Dict", "Mapping"):
            return dict[args[0], args[1]] if len(args) == 2 else dict
        return Any
    return _lookup(text, namespace)


def _lookup(name: str, namespace: dict[str, Any]) -> Any:
    short = name.rpartition(".")[2]
    if short in _SIMPLE_NAMES:
        return _SIMPLE_NAMES[short]
    found = namespace.get(name, namespace.get(short))
    return found if found is not None else Any


def _has_default(f: dataclasses.Field) -> bool:
    return f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING


def _is_union(tp: Any) -> bool:
    return typing.get_origin(tp) in (Union, types.UnionType)


def _is_optional(tp: Any) -> bool:
    return _is_union(tp) and type(None) in typing.get_args(tp)


def _query_dataclass(model: type, pairs: list[tuple[str, str]]) -> Any:
    hints = _field_types(model)
    known = {f.name: f for f in dataclasses.fields(model) if f.init}
    values: dict[str, Any] = {}
    for key, text in pairs:
        if key not in known:
            continue
        if key in values:
            raise InvalidQuery(f"duplicate field `{key}`")
        try:
            values[key] = _from_text(hints.get(key, Any), text)
        except ValueError as exc:
            raise InvalidQuery(exc) from exc
    for name, f in known.items():
        if name in values or _has_default(f):
            continue
        if _is_optional(hints.get(name, Any)):
            values[name] = None
        else:
            raise InvalidQuery(f"missing field `{name}`")
    return model(**values)


def _from_text(tp: Any, text: str) -> Any:
    if tp is Any or tp is object or tp is str:
        return text
    if _is_union(tp):
        last: ValueError | None = None
        for arg in typing.get_args(tp):
            if arg is type(None):
                continue
            try:
                return _from_text(arg, text)
            except ValueError as exc:
                last = exc
        raise last or ValueError(f"cannot parse {text!r}")
    if tp is bool:
        if text == "true":
            return True
        if text == "false":
            return False
        raise ValueError(f"invalid boolean: {text!r}")
    if tp is int:
        if not _INTEGER.fullmatch(text):
            raise ValueError(f"invalid integer: {text!r}")
        return int(text)
    if tp is float:
        try:
            return float(text)
        except ValueError:
            raise ValueError(f"invalid float: {text!r}") from None
    raise ValueError(f"unsupported field type {tp!r}")


def _from_json(tp: Any, value: Any) -> Any:
    if tp is Any or tp is object:
        return value
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if _is_union(tp):
        if value is None and type(None) in args:
            return None
        last: ValueError | None = None
        for arg in args:
            if arg is type(None):
                continue
            try:
                return _from_json(arg, value)
            except ValueError as exc:
                last = exc
        raise last or ValueError(f"invalid value {value!r}")
    if dataclasses.is_dataclass(tp) and isinstance(tp, type):
        if not isinstance(value, dict):
            raise ValueError(f"invalid type: expected struct {tp.__name__}")
        return _build_from_json(tp, value)
    if tp is list or origin is list:
        if not isinstance(value, list):
            raise ValueError("invalid type: expected a sequence")
        item = args[0] if args else Any
        return [_from_json(item, element) for element in value]
    if tp is dict or origin is dict:
        if not isinstance(value, dict):
            raise ValueError("invalid type: expected a map")
        item = args[1] if len(args) == 2 else Any
        return {key: _from_json(item, element) for key, element in value.items()}
    if tp is bool:
        if not isinstance(value, bool):
            raise ValueError(f"invalid type: {value!r}, expected a boolean")
        return value
    if tp is int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"invalid type: {value!r}, expected an integer")
        return value
    if tp is float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ValueError(f"invalid type: {value!r}, expected a number")
        return float(value)
    if tp is str:
        if not isinstance(value, str):
            raise ValueError(f"invalid type: {value!r}, expected a string")
        return value
    if origin is not None:
        return value
    if isinstance(tp, type) and not isinstance(value, tp):
        raise ValueError(f"invalid type: {value!r}, expected {tp.__name__}")
    return value


def _build_from_json(model: type, data: dict[str, Any]) -> Any:
    hints = _field_types(model)
    values: dict[str, Any] = {}
    for f in dataclasses.fields(model):
        if not f.init:
            continue
        tp = hints.get(f.name, Any)
        if f.name in data:
            try:
                values[f.name] = _from_json(tp, data[f.name])
            except ValueError as exc:
                raise ValueError(f"{f.name}: {exc}") from exc
        elif _has_default(f):
            continue
        elif _is_optional(tp):
            values[f.name] = None
        else:
            raise ValueError(f"missing field `{f.name}`")
    return model(**values)