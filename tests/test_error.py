import json
import logging
from http import HTTPStatus

import pytest

from trainpress.error import (
    AppError,
    BadRequest,
    BodyError,
    InternalError,
    InvalidJson,
    InvalidQuery,
    MissingState,
    NotFound,
    PathParamError,
    Unauthorized,
)


def _json_error():
    try:
        json.loads("invalid")
    except json.JSONDecodeError as exc:
        return exc
    raise AssertionError("expected a decode error")


@pytest.mark.parametrize(
    "error, status",
    [
        (NotFound(), HTTPStatus.NOT_FOUND),
        (BadRequest("test"), HTTPStatus.BAD_REQUEST),
        (Unauthorized(), HTTPStatus.UNAUTHORIZED),
        (InvalidJson(_json_error()), HTTPStatus.BAD_REQUEST),
        (InvalidQuery("invalid="), HTTPStatus.BAD_REQUEST),
        (BodyError("body error"), HTTPStatus.INTERNAL_SERVER_ERROR),
        (PathParamError("missing param"), HTTPStatus.BAD_REQUEST),
        (MissingState(), HTTPStatus.INTERNAL_SERVER_ERROR),
        (InternalError("something broke"), HTTPStatus.INTERNAL_SERVER_ERROR),
    ],
)
def test_status_codes(error, status):
    assert error.status == status
    assert error.into_response().status == status


def test_error_response_format():
    response = NotFound().into_response()
    assert response.status == HTTPStatus.NOT_FOUND
    assert response.headers["content-type"] == "application/json"
    assert response.json()["error"] == "not found"


def test_bad_request_response():
    response = BadRequest("invalid input").into_response()
    assert response.status == HTTPStatus.BAD_REQUEST
    assert "invalid input" in response.json()["error"]


def test_unauthorized_response():
    response = Unauthorized().into_response()
    assert response.status == HTTPStatus.UNAUTHORIZED
    assert response.json()["error"] == "unauthorized"


def test_error_display():
    assert str(NotFound()) == "not found"
    assert str(BadRequest("test")) == "bad request: test"
    assert str(Unauthorized()) == "unauthorized"
    assert str(PathParamError("id missing")) == "path param error: id missing"
    assert str(MissingState()) == "state not found in request extensions"
    assert str(InternalError("boom")) == "internal: boom"


def test_json_error_display_carries_detail():
    exc = _json_error()
    assert str(InvalidJson(exc)) == f"invalid json: {exc}"


def test_errors_are_exceptions():
    error = BadRequest("name cannot be empty")
    assert error.detail == "name cannot be empty"
    assert error.into_response().json() == {"error": "bad request: name cannot be empty"}
    with pytest.raises(AppError, match="bad request: name cannot be empty"):
        raise error


def test_server_errors_are_logged(caplog):
    with caplog.at_level(logging.ERROR, logger="trainpress"):
        InternalError("boom").into_response()
    assert any("internal: boom" in record.getMessage() for record in caplog.records)


def test_client_errors_are_not_logged(caplog):
    with caplog.at_level(logging.ERROR, logger="trainpress"):
        NotFound().into_response()
    assert caplog.records == []