# trainpress

A small asyncio web framework. You register handlers for HTTP methods and
paths, stack middleware around them, and return plain values: strings,
status codes, `Json(...)` payloads, or raise errors. The built-in server
speaks HTTP/1.1 and shuts down gracefully on Ctrl+C or SIGTERM, giving open
connections up to 30 seconds to finish.

## Installation

```
pip install trainpress
```

For running the test suite:

```
pip install "trainpress[test]"
pytest
```

## A first application

```python
import asyncio

from trainpress.app import App
from trainpress.response import Json


async def hello(request):
    return Json({"text": "Hello from TrainPress!"})


async def health(request):
    return Json({"status": "healthy", "framework": "TrainPress"})


app = App().get("/", hello).get("/health", health)

asyncio.run(app.listen("127.0.0.1:3000"))
```

`App.listen(addr)` takes an address of the form `"host:port"` with a
numeric IP address (`"[::1]:8000"` for IPv6) and raises `ValueError` for
anything else.

Every builder method (`get`, `post`, `put`, `patch`, `delete`, `route`,
`middleware`) returns the application, so calls can be chained.
Registering the same method and path twice, or a pattern that clashes with
one already registered, raises `trainpress.router.RouteConflict`.

## What a handler may return

Handlers take the request and may be plain or async functions. Their return
value is turned into a response by `trainpress.response.into_response`:

| Returned value            | Response                                              |
|---------------------------|-------------------------------------------------------|
| `str`                     | 200, `text/plain; charset=utf-8`                      |
| `Json(value)`             | 200, `application/json`                               |
| an `int` / `HTTPStatus`   | that status, empty body                               |
| `(status, value)`         | `value` as above, with the status replaced            |
| `None`                    | 204 No Content                                        |
| a `Response`              | sent as is                                            |
| an `AppError`             | its status with `{"error": "<message>"}` as JSON      |

`Json` serialises dicts, lists and dataclasses; a value that cannot be
serialised becomes a 500 error response.

Errors live in `trainpress.error`: `NotFound` (404), `BadRequest`,
`InvalidJson`, `InvalidQuery` and `PathParamError` (400), `Unauthorized`
(401), and `BodyError`, `MissingState` and `InternalError` (500). Raise one
from a handler and the client gets the matching JSON error. Unknown routes
answer 404 with `{"error": "not found"}`; any other exception escaping a
handler becomes a 500 response.

## Path parameters, query strings, bodies and state

Route patterns take named segments such as `/users/{id}` and catch-all
segments such as `/files/{*path}`; static segments win over parameters. The
helpers in `trainpress.extract` read the request:

- `path_param(request, name, kind=str)` converts a captured segment with
  `kind`, raising `PathParamError` when it is missing or does not convert.
- `query(request, model=dict)` parses the query string into a dict, a
  dataclass (fields typed `str`, `int`, `float`, `bool` or optional ones)
  or any callable taking keyword arguments; bad input raises `InvalidQuery`.
- `await json_body(request, model=None)` decodes the body as JSON, into a
  dataclass when `model` is given; bad input raises `BadRequest`.
- `await body_bytes(request)` returns the raw body.
- `state(request)` returns the state the app was created with (`None` for an
  app made without one).

```python
from dataclasses import dataclass

from trainpress.app import App
from trainpress.error import BadRequest, NotFound
from trainpress.extract import json_body, path_param, query, state
from trainpress.response import Json


@dataclass
class Store:
    users: list


@dataclass
class ListQuery:
    limit: int | None = None


@dataclass
class CreateUser:
    name: str
    email: str


async def get_user(request):
    user_id = path_param(request, "id", int)
    store = state(request)
    for user in store.users:
        if user["id"] == user_id:
            return Json(user)
    raise NotFound()


async def list_users(request):
    params = query(request, ListQuery)
    store = state(request)
    limit = params.limit if params.limit is not None else len(store.users)
    return Json(store.users[:limit])


async def create_user(request):
    store = state(request)
    body = await json_body(request, CreateUser)
    if not body.name.strip():
        raise BadRequest("name cannot be empty")
    user = {"id": len(store.users) + 1, "name": body.name, "email": body.email}
    store.users.append(user)
    return Json(user)


app = (
    App(Store(users=[]))
    .get("/users", list_users)
    .get("/users/{id}", get_user)
    .post("/users", create_user)
)
```

## Middleware

A middleware subclasses `trainpress.middleware.Middleware` and has an async
`call(request, next)` method that decides whether and how to pass the
request on with `await next.run(request)`. Middleware runs in the order it
was added, outermost first.

```python
import time

from trainpress.app import App
from trainpress.middleware import Logger, Middleware, RequestId


class Timing(Middleware):
    async def call(self, request, next):
        start = time.perf_counter()
        response = await next.run(request)
        print(f"{request.path} took {time.perf_counter() - start:.6f}s")
        return response


app = App().middleware(RequestId()).middleware(Logger()).middleware(Timing())
```

Two are built in:

- `RequestId` keeps an incoming `x-request-id` header or makes one up, and
  echoes it on the response.
- `Logger` logs method, path, status and elapsed milliseconds for each
  request through the `logging` module.

## Handling requests without a socket

`trainpress.server.dispatch(app, request)` runs a request through the app's
middleware and routes and returns the response, which is handy in tests:

```python
import asyncio

from trainpress.messages import Request
from trainpress.server import dispatch

response = asyncio.run(dispatch(app, Request("GET", "/users?limit=1")))
print(response.status, response.json())
```

`Request` holds `method`, `uri`, `headers`, `body` and `extensions`, with
`path` and `query_string` derived from the URI. `Response` holds `status`,
`headers` and `body`, with `text` and `json()` for reading the body. Header
names are case-insensitive.

## Example servers

Three runnable examples come with the package:

```
trainpress-hello              # "/" and "/health" on 127.0.0.1:3000
trainpress-middleware-demo    # five stacked middleware layers on 127.0.0.1:3000
trainpress-user-crud          # in-memory user CRUD API on 0.0.0.0, port from $PORT or 3000
```

With the CRUD example running:

```
curl http://127.0.0.1:3000/users
curl -X POST http://127.0.0.1:3000/users \
  -H 'Content-Type: application/json' \
  -d '{"name":"Alice","email":"alice@example.com"}'
curl http://127.0.0.1:3000/users/1
curl -X DELETE http://127.0.0.1:3000/users/1
```

## What it does not do

The server speaks plain HTTP/1.1 only: there is no HTTP/2 and no TLS, so put
it behind a proxy for those. Request bodies are read whole into memory
before the handler runs, and responses are sent whole; there is no
streaming. Host names are not resolved by `listen`; give it an IP address.