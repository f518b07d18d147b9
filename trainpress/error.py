"""Errors a handler can raise, each mapped to an HTTP status and a JSON body."""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any

from trainpress.messages import Response

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error that turns into a JSON error response."""

    status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    label: str = "error"

    def __init__(self, detail: Any = None) -> None:
        self.detail = None if detail is None else str(detail)
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.detail is None:
            return self.label
        return f"{self.label}: {self.detail}"

    def into_response(self) -> Response:
        """Build the response for this error: its status and {"error": message}."""
        if self.status >= 500:
            logger.error("internal error: %s", self)
        payload = json.dumps({"error": str(self)}, separators=(",", ":"), ensure_ascii=False)
        return Response(self.status, {"content-type": "application/json"}, payload)


class NotFound(AppError):
    status = HTTPStatus.NOT_FOUND
    label = "not found"

    def __init__(self) -> None:
        super().__init__()


class BadRequest(AppError):
    status = HTTPStatus.BAD_REQUEST
    label = "bad request"


class Unauthorized(AppError):
    status = HTTPStatus.UNAUTHORIZED
    label = "unauthorized"

    def __init__(self) -> None:
        super().__init__()


class InvalidJson(AppError):
    status = HTTPStatus.BAD_REQUEST
    label = "invalid json"


class InvalidQuery(AppError):
    status = HTTPStatus.BAD_REQUEST
    label = "invalid query"


class BodyError(AppError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    label = "body error"


class PathParamError(AppError):
    status = HTTPStatus.BAD_REQUEST
    label = "path param error"


class MissingState(AppError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    label = "state not found in request extensions"

    def __init__(self) -> None:
        super().__init__()


class InternalError(AppError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    label = "internal"