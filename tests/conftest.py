"""
Shared fixtures for the Moodify test suite.

- every test gets its own data directory and no remote sentiment credential
- `mock_http` swaps a module's httpx client factory for a MockTransport
- `logged_in` creates a user with a long-lived token plus a session id
"""

import time
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from moodify import auth, config, datastore


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DATA_DIR", tmp_path / "appdata")
    monkeypatch.setattr(config, "HUGGINGFACE_API_KEY", "")
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_ID", "client-id")
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_SECRET", "client-secret")
    monkeypatch.setattr(config, "SPOTIFY_MARKET", "PH")


@pytest.fixture
def mock_http(monkeypatch):
    """
    mock_http(module, "_client", handler) -> list of captured requests.
    The handler receives an httpx.Request and returns an httpx.Response.
    """
    def _install(module: Any, attr: str, handler: Callable[[httpx.Request], httpx.Response]) -> List[httpx.Request]:
        seen: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        transport = httpx.MockTransport(_record)
        monkeypatch.setattr(module, attr, lambda: httpx.AsyncClient(transport=transport))
        return seen

    return _install


def make_user(spotify_id: str = "spotify-user-1", expires_in: int = 3600) -> Dict[str, Any]:
    return datastore.create_user({
        "spotify_id": spotify_id,
        "display_name": "Test Listener",
        "email": "listener@example.com",
        "access_token": f"access-{spotify_id}",
        "refresh_token": f"refresh-{spotify_id}",
        "token_expires_at": int(time.time()) + expires_in,
    })


@pytest.fixture
def user_factory() -> Callable[..., Dict[str, Any]]:
    return make_user


@pytest.fixture
def logged_in() -> Dict[str, Any]:
    user = make_user()
    sid = auth.create_session(user["id"])
    return {"user": user, "sid": sid, "headers": {"X-Session-Id": sid}}


@pytest.fixture
def client() -> TestClient:
    from moodify.api import app
    return TestClient(app)
