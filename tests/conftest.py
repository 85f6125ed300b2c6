from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt

from api_client import StorefrontApi
from main import app, get_api, get_state
from storage import LocalStorage
from store import StorefrontState

UPSTREAM = "http://upstream.test/api"

PRODUCT_IDS = [
    "64b000000000000000000001",
    "64b000000000000000000002",
    "64b000000000000000000003",
]
ORDER_ID = "65a000000000000000000009"
USER_ID = "65a000000000000000000001"


def make_token(role: str = "user", expires_in: timedelta = timedelta(days=7)) -> str:
    payload = {"userId": USER_ID, "role": role, "exp": datetime.now(timezone.utc) + expires_in}
    return jwt.encode(payload, "test-secret", algorithm="HS256")


def make_product(_id: str, **fields) -> dict:
    product = {
        "_id": _id,
        "name": f"Product {_id[-1]}",
        "price": 1000,
        "originalPrice": 1500,
        "category": "ethnic-wear",
        "images": [f"https://cdn.test/{_id}.jpg"],
        "sizes": [],
        "colors": [],
    }
    product.update(fields)
    return product


def make_user(role: str = "user", **fields) -> dict:
    user = {
        "id": USER_ID,
        "name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "9876543210",
        "role": role,
        "addresses": [],
        "createdAt": "2024-01-01T00:00:00.000Z",
    }
    user.update(fields)
    return user


class FakeUpstream:
    """Stands in for the REST API behind an httpx.MockTransport."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method: str, path: str, json=None, status: int = 200, error: Exception = None):
        self.routes[(method, "/api" + path)] = (status, json, error)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        status, body, error = route
        if error is not None:
            raise error
        return httpx.Response(status, json=body if body is not None else {})

    def last(self, method: str, path: str) -> httpx.Request:
        for request in reversed(self.requests):
            if request.method == method and request.url.path == "/api" + path:
                return request
        raise AssertionError(f"no {method} {path} request")


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def api(upstream):
    client = StorefrontApi(base_url=UPSTREAM, transport=httpx.MockTransport(upstream))
    yield client
    client.close()


@pytest.fixture
def state():
    return StorefrontState(LocalStorage())


@pytest.fixture
def client(api, state):
    app.dependency_overrides[get_api] = lambda: api
    app.dependency_overrides[get_state] = lambda: state
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in(state):
    from schemas import User

    token = make_token()
    state.auth.login(token, User.model_validate(make_user()))
    return token


@pytest.fixture
def admin_token():
    return make_token(role="admin")
