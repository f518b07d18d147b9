import json
from dataclasses import asdict, dataclass, field
from http import HTTPStatus

import pytest

from trainpress.error import NotFound
from trainpress.messages import Response
from trainpress.response import Json, into_response, plain_text


@dataclass
class TestData:
    name: str
    count: int


@dataclass
class KeyValue:
    key: str
    value: str


@dataclass
class NestedData:
    field1: str
    field2: int
    field3: list


@dataclass
class SmallPayload:
    id: int
    name: str


@dataclass
class MediumPayload:
    id: int
    name: str
    email: str
    age: int
    active: bool
    tags: list = field(default_factory=list)


@dataclass
class LargePayload:
    id: int
    name: str
    email: str
    age: int
    active: bool
    tags: list
    metadata: list
    nested: NestedData


def test_string_into_response():
    response = into_response("Hello, World!")
    assert response.status == HTTPStatus.OK
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    assert response.body == b"Hello, World!"


def test_str_into_response():
    response = into_response("Static string")
    assert response.status == HTTPStatus.OK
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    assert response.body == b"Static string"


def test_status_code_into_response():
    response = into_response(HTTPStatus.CREATED)
    assert response.status == HTTPStatus.CREATED
    assert len(response.body) == 0


def test_tuple_status_and_string():
    response = into_response((HTTPStatus.CREATED, "Resource created"))
    assert response.status == HTTPStatus.CREATED
    assert response.body == b"Resource created"


def test_tuple_status_and_json():
    response = into_response((HTTPStatus.CREATED, Json(TestData(name="test", count=42))))
    assert response.status == HTTPStatus.CREATED
    assert response.headers["content-type"] == "application/json"
    body = response.json()
    assert body["name"] == "test"
    assert body["count"] == 42


def test_json_into_response():
    response = Json(TestData(name="Alice", count=100)).into_response()
    assert response.status == HTTPStatus.OK
    assert response.headers["content-type"] == "application/json"
    body = response.json()
    assert body["name"] == "Alice"
    assert body["count"] == 100


def test_unit_into_response():
    response = into_response(None)
    assert response.status == HTTPStatus.NO_CONTENT
    assert len(response.body) == 0


def test_result_ok_into_response():
    response = into_response("success")
    assert response.status == HTTPStatus.OK
    assert response.body == b"success"


def test_result_err_into_response():
    response = into_response(NotFound())
    assert response.status == HTTPStatus.NOT_FOUND
    assert response.json()["error"] == "not found"


def test_json_nested_structure():
    @dataclass
    class Profile:
        email: str
        tags: list

    @dataclass
    class User:
        id: int
        profile: Profile

    user = User(id=1, profile=Profile(email="test@example.com", tags=["rust", "web"]))
    response = into_response(Json(user))
    assert response.status == HTTPStatus.OK
    body = response.json()
    assert body["id"] == 1
    assert body["profile"]["email"] == "test@example.com"
    assert body["profile"]["tags"][0] == "rust"
    assert body["profile"]["tags"][1] == "web"


def test_response_passes_through():
    original = Response(HTTPStatus.ACCEPTED, {"x-a": "1"}, b"kept")
    assert into_response(original) is original


def test_plain_text_with_status():
    response = plain_text("gone", HTTPStatus.GONE)
    assert response.status == HTTPStatus.GONE
    assert response.text == "gone"
    assert response.headers["Content-Type"] == "text/plain; charset=utf-8"


def test_json_serialize_failure_is_internal_error():
    response = Json({"bad": object()}).into_response()
    assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.json()["error"].startswith("internal: json serialize:")


def test_unsupported_value_raises():
    with pytest.raises(TypeError):
        into_response(3.5)


def test_json_string_value():
    response = Json("Hello, World!").into_response()
    assert response.body == b'"Hello, World!"'


def test_small_payload_round_trip():
    payload = SmallPayload(id=1, name="John Doe")
    body = Json(payload).into_response().json()
    assert body == {"id": 1, "name": "John Doe"}
    assert SmallPayload(**body) == payload


def test_medium_payload_round_trip():
    payload = MediumPayload(
        id=1,
        name="John Doe",
        email="john@example.com",
        age=30,
        active=True,
        tags=["rust", "web", "backend"],
    )
    body = Json(payload).into_response().json()
    assert MediumPayload(**body) == payload


def test_large_payload_matches_bench_document():
    text = (
        '{"id":1,"name":"John Doe","email":"john@example.com","age":30,"active":true,'
        '"tags":["rust","web","backend"],"metadata":[{"key":"key1","value":"value1"},'
        '{"key":"key2","value":"value2"},{"key":"key3","value":"value3"}],'
        '"nested":{"field1":"nested value","field2":42,"field3":["a","b","c"]}}'
    )
    payload = LargePayload(
        id=1,
        name="John Doe",
        email="john@example.com",
        age=30,
        active=True,
        tags=["rust", "web", "backend"],
        metadata=[
            KeyValue(key="key1", value="value1"),
            KeyValue(key="key2", value="value2"),
            KeyValue(key="key3", value="value3"),
        ],
        nested=NestedData(field1="nested value", field2=42, field3=["a", "b", "c"]),
    )
    response = Json(payload).into_response()
    assert response.body.decode("utf-8") == text
    assert response.json() == json.loads(text)


@pytest.mark.parametrize("size", [10, 100, 1000])
def test_array_serialize(size):
    items = [SmallPayload(id=i, name=f"User {i}") for i in range(size)]
    body = Json(items).into_response().json()
    assert len(body) == size
    assert body == [asdict(item) for item in items]