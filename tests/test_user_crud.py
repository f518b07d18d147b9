import json
from http import HTTPStatus

import pytest

from trainpress.error import MissingState
from trainpress.examples.user_crud import AppState, User, build_app, list_users
from trainpress.messages import Request
from trainpress.server import dispatch


def _post_user(name, email):
    body = json.dumps({"name": name, "email": email})
    return Request("POST", "/users", headers={"content-type": "application/json"}, body=body)


async def _create(app, name, email):
    return await dispatch(app, _post_user(name, email))


@pytest.mark.asyncio
async def test_root_lists_endpoints():
    response = await dispatch(build_app(AppState()), Request("GET", "/"))
    assert response.status == HTTPStatus.OK
    assert "Welcome to TrainPress User CRUD API!" in response.text
    assert "DELETE /users/{id}" in response.text


@pytest.mark.asyncio
async def test_health():
    response = await dispatch(build_app(AppState()), Request("GET", "/health"))
    assert response.json() == {
        "status": "ok",
        "service": "user-crud-api",
        "framework": "TrainPress",
    }


@pytest.mark.asyncio
async def test_create_then_get_round_trip():
    app_state = AppState()
    app = build_app(app_state)
    created = await _create(app, "Alice", "alice@example.com")
    assert created.status == HTTPStatus.OK
    user = created.json()
    assert user["name"] == "Alice"
    assert user["email"] == "alice@example.com"
    assert app_state.users == [User(**user)]

    fetched = await dispatch(app, Request("GET", f"/users/{user['id']}"))
    assert fetched.json() == user


@pytest.mark.asyncio
async def test_ids_follow_user_count():
    app = build_app(AppState())
    ids = [
        (await _create(app, name, f"{name}@example.com")).json()["id"]
        for name in ("a", "b", "c")
    ]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    assert ids[0] == 1


@pytest.mark.asyncio
async def test_list_with_and_without_limit():
    app = build_app(AppState())
    names = ["a", "b", "c"]
    for name in names:
        await _create(app, name, f"{name}@example.com")

    everything = (await dispatch(app, Request("GET", "/users"))).json()
    assert everything["total"] == len(names)
    assert everything["count"] == len(everything["data"]) == len(names)
    assert [u["name"] for u in everything["data"]] == names

    limited = (await dispatch(app, Request("GET", "/users?limit=2"))).json()
    assert limited["count"] == len(limited["data"]) == 2
    assert limited["total"] == len(names)
    assert limited["data"] == everything["data"][:2]


@pytest.mark.asyncio
async def test_list_bad_limit_is_bad_request():
    app = build_app(AppState())
    for uri in ("/users?limit=abc", "/users?limit=-1"):
        response = await dispatch(app, Request("GET", uri))
        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json()["error"].startswith("invalid query")


@pytest.mark.asyncio
async def test_empty_name_rejected():
    app_state = AppState()
    response = await _create(build_app(app_state), "   ", "x@example.com")
    assert response.status == HTTPStatus.BAD_REQUEST
    assert response.json() == {"error": "bad request: name cannot be empty"}
    assert app_state.users == []


@pytest.mark.asyncio
async def test_empty_email_rejected():
    response = await _create(build_app(AppState()), "Bob", "")
    assert response.status == HTTPStatus.BAD_REQUEST
    assert "email cannot be empty" in response.json()["error"]


@pytest.mark.asyncio
async def test_invalid_json_body():
    request = Request("POST", "/users", body=b'{"name": ')
    response = await dispatch(build_app(AppState()), request)
    assert response.status == HTTPStatus.BAD_REQUEST
    assert "invalid json body" in response.json()["error"]


@pytest.mark.asyncio
async def test_missing_field_in_body():
    request = Request("POST", "/users", body=b'{"name": "Bob"}')
    response = await dispatch(build_app(AppState()), request)
    assert response.status == HTTPStatus.BAD_REQUEST


@pytest.mark.asyncio
async def test_get_unknown_user_is_not_found():
    response = await dispatch(build_app(AppState()), Request("GET", "/users/42"))
    assert response.status == HTTPStatus.NOT_FOUND
    assert response.json() == {"error": "not found"}


@pytest.mark.asyncio
async def test_non_numeric_id_is_bad_request():
    app = build_app(AppState())
    for uri in ("/users/abc", "/users/-1", "/users/1_0"):
        response = await dispatch(app, Request("GET", uri))
        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json()["error"].startswith("path param error: param 'id'")


@pytest.mark.asyncio
async def test_delete_user():
    app_state = AppState()
    app = build_app(app_state)
    user_id = (await _create(app, "Alice", "alice@example.com")).json()["id"]

    deleted = await dispatch(app, Request("DELETE", f"/users/{user_id}"))
    assert deleted.status == HTTPStatus.OK
    assert deleted.text == "User deleted successfully"
    assert app_state.users == []

    again = await dispatch(app, Request("DELETE", f"/users/{user_id}"))
    assert again.status == HTTPStatus.NOT_FOUND
    fetched = await dispatch(app, Request("GET", f"/users/{user_id}"))
    assert fetched.status == HTTPStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_request_id_middleware_applied():
    request = Request("GET", "/health", headers={"x-request-id": "req-7"})
    response = await dispatch(build_app(AppState()), request)
    assert response.headers["x-request-id"] == "req-7"


@pytest.mark.asyncio
async def test_handler_without_state_raises():
    with pytest.raises(MissingState):
        await list_users(Request("GET", "/users"))