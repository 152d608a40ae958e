"""Shared fixtures: settings, a temporary session store and a fake backend."""

import json
import os
import sys
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

# Ensure project root is on path
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from jobify.config import Settings  # noqa: E402
from jobify.models.schemas import SessionPayload, User  # noqa: E402
from jobify.storage import SessionStorage  # noqa: E402

API_ROOT = "http://testserver/api/v1"

USER = {
    "_id": "u1",
    "name": "Ada",
    "lastName": "Lovelace",
    "email": "a@b.com",
    "location": "Berlin",
}
TOKEN = "tok-123"

JOB_1 = {
    "_id": "j1",
    "position": "Backend Developer",
    "company": "Acme",
    "status": "interview",
    "jobType": "remote",
    "jobLocation": "Berlin",
    "createdAt": "2024-03-01T10:00:00Z",
}
JOB_2 = {
    "_id": "j2",
    "position": "Data Engineer",
    "company": "Globex",
    "status": "pending",
    "jobType": "full-time",
    "jobLocation": "Paris",
    "createdAt": "2024-02-11T08:30:00Z",
}


def respond(status: int = 200, **kwargs: Any) -> Callable[[httpx.Request], httpx.Response]:
    """Route handler returning a fresh response on every call."""
    return lambda request: httpx.Response(status, **kwargs)


def auth_response(user: Dict[str, Any] = USER, token: str = TOKEN, status: int = 200):
    return respond(status, headers={"user": json.dumps(user), "token": token}, json={})


class FakeBackend:
    """Callable for httpx.MockTransport that records requests per route."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], Any]] = {}

    def on(self, method: str, path: str, handler: Callable[[httpx.Request], Any]) -> None:
        self.routes[(method, "/api/v1/" + path.lstrip("/"))] = handler

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": f"No route {request.url.path}"})
        return handler(request)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        full = "/api/v1/" + path.lstrip("/")
        return [r for r in self.requests if r.method == method and r.url.path == full]


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        api_base_url=API_ROOT,
        storage_url=f"sqlite:///{tmp_path / 'session.db'}",
        alert_delay_ms=20,
        jobs_page_limit=10,
        request_timeout=5.0,
        log_level="DEBUG",
    )


@pytest.fixture()
def storage(settings):
    return SessionStorage(settings.storage_url)


@pytest.fixture()
def session_payload():
    user = User.model_validate(USER)
    return SessionPayload(user=user, token=TOKEN, location=user.location)


@pytest.fixture()
def seeded_storage(storage, session_payload):
    storage.add_user_to_storage(session_payload)
    return storage


@pytest.fixture()
def backend():
    return FakeBackend()
