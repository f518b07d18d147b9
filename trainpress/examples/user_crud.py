"""A CRUD API for users kept in shared in-memory state."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import re
from dataclasses import dataclass, field

from trainpress.app import App
from trainpress.error import BadRequest, InvalidQuery, NotFound
from trainpress.extract import json_body, path_param, query, state
from trainpress.messages import Request
from trainpress.middleware import Logger, RequestId
from trainpress.response import Json

_U64_MAX = 2**64 - 1
_UNSIGNED = re.compile(r"\+?[0-9]+")


@dataclass
class User:
    id: int
    name: str
    email: str


@dataclass
class CreateUser:
    name: str
    email: str


@dataclass
class ListQuery:
    limit: int | None = None


@dataclass
class ListUsersResponse:
    data: list[User]
    count: int
    total: int


@dataclass
class AppState:
    """Users shared between requests, guarded by a lock."""

    users: list[User] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)


def _parse_id(text: str) -> int:
    if not text:
        raise ValueError("cannot parse integer from empty string")
    if not _UNSIGNED.fullmatch(text):
        raise ValueError("invalid digit found in string")
    value = int(text)
    if value > _U64_MAX:
        raise ValueError("number too large to fit in target type")
    return value


async def root(request: Request) -> str:
    return (
        "🦀 Welcome to TrainPress User CRUD API!\n\n"
        "Available endpoints:\n"
        "- GET    /health       - Health check\n"
        "- GET    /users        - List all users (optional ?limit=N)\n"
        "- GET    /users/{id}   - Get user by ID\n"
        "- POST   /users        - Create new user (JSON body)\n"
        "- DELETE /users/{id}   - Delete user by ID\n"
    )


async def health(request: Request) -> Json:
    return Json({"status": "ok", "service": "user-crud-api", "framework": "TrainPress"})


async def list_users(request: Request) -> Json:
    params: ListQuery = query(request, ListQuery)
    if params.limit is not None and params.limit < 0:
        raise InvalidQuery("invalid digit found in string")
    app_state: AppState = state(request)
    async with app_state.lock:
        total = len(app_state.users)
        limit = total if params.limit is None else params.limit
        data = list(app_state.users[:limit])
    return Json(ListUsersResponse(data=data, count=len(data), total=total))


async def get_user(request: Request) -> Json:
    user_id = path_param(request, "id", _parse_id)
    app_state: AppState = state(request)
    async with app_state.lock:
        found = next((user for user in app_state.users if user.id == user_id), None)
    if found is None:
        raise NotFound()
    return Json(found)


async def create_user(request: Request) -> Json:
    app_state: AppState = state(request)
    body: CreateUser = await json_body(request, CreateUser)
    if not body.name.strip():
        raise BadRequest("name cannot be empty")
    if not body.email.strip():
        raise BadRequest("email cannot be empty")
    async with app_state.lock:
        user = User(id=len(app_state.users) + 1, name=body.name, email=body.email)
        app_state.users.append(user)
    return Json(user)


async def delete_user(request: Request) -> str:
    user_id = path_param(request, "id", _parse_id)
    app_state: AppState = state(request)
    async with app_state.lock:
        before = len(app_state.users)
        app_state.users[:] = [user for user in app_state.users if user.id != user_id]
        removed = len(app_state.users) != before
    if not removed:
        raise NotFound()
    return "User deleted successfully"


def build_app(state: AppState) -> App:
    """Return the CRUD app over `state`, with request-id and logging middleware."""
    return (
        App(state)
        .middleware(RequestId())
        .middleware(Logger())
        .get("/", root)
        .get("/health", health)
        .get("/users", list_users)
        .get("/users/{id}", get_user)
        .post("/users", create_user)
        .delete("/users/{id}", delete_user)
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="user_crud", description="Serve a user CRUD API.")
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    port = os.environ.get("PORT", "3000")
    addr = f"0.0.0.0:{port}"
    app = build_app(AppState())

    print(f"🚀 User CRUD API running on http://{addr}")
    print(f"📝 Visit http://{addr} for API documentation")
    print()
    print("Example curl commands:")
    print("  # List users")
    print(f"  curl http://{addr}/users")
    print()
    print("  # Create user")
    print(f"  curl -X POST http://{addr}/users \\")
    print("    -H 'Content-Type: application/json' \\")
    print('    -d \'{"name":"Alice","email":"alice@example.com"}\'')
    print()

    asyncio.run(app.listen(addr))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())