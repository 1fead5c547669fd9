"""
Shared test fixtures and configuration.
"""

import json
import os

import httpx
import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENVIRONMENT", "test")

from fastapi.testclient import TestClient

from hiiside.config import Settings
from hiiside.main import create_app

BSKY = "https://bsky.social"
PUBLIC_API = "https://public.api.bsky.app"
EMOJI = "https://www.emoji.family"

TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>HiiSide</title>
  <meta name="description" content="placeholder" />
  <meta property="og:title" content="placeholder" />
</head>
<body><div id="root"></div></body>
</html>
"""


class FakeUpstream:
    """
    Routes httpx requests to canned responses.

    Routes are keyed by "<origin><path>"; the value is either a
    (status, json_payload) tuple or a callable taking the httpx.Request.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, status=200, payload=None, handler=None):
        self.routes[url] = handler if handler is not None else (status, payload if payload is not None else {})

    def calls(self, url):
        return [r for r in self.requests if f"{r.url.scheme}://{r.url.host}{r.url.path}" == url]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"error": "NotFound", "message": key})
        if callable(route):
            return route(request)
        status, payload = route
        return httpx.Response(status, json=payload)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8")) if request.content else {}


@pytest.fixture
def site_dirs(tmp_path):
    """dist/ and public/ roots plus a source index.html template."""
    dist = tmp_path / "dist"
    public = tmp_path / "public"
    (dist / "assets").mkdir(parents=True)
    public.mkdir()
    (dist / "index.html").write_text(TEMPLATE, encoding="utf-8")
    (dist / "assets" / "app.js").write_text("console.log('hi');", encoding="utf-8")
    (public / "robots.txt").write_text("User-agent: *\n", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    (tmp_path / "index.html").write_text(TEMPLATE, encoding="utf-8")
    return tmp_path


@pytest.fixture
def test_settings(site_dirs):
    return Settings(
        site_url="https://hillside.example/",
        site_name="HiiSide",
        chat_allowed_origins="http://localhost:8080, https://app.hillside.example",
        dist_dir=str(site_dirs / "dist"),
        public_dir=str(site_dirs / "public"),
        index_template_path=str(site_dirs / "index.html"),
        bsky_service=BSKY,
        public_api=PUBLIC_API,
        emoji_api_origin=EMOJI,
        log_file_enabled=False,
        log_api_requests=True,
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def app(test_settings, upstream):
    return create_app(test_settings, http_client=upstream.client())


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def logged_in_client(client, upstream):
    """A client holding a session cookie for did:plc:alice."""
    upstream.add(f"{BSKY}/xrpc/com.atproto.server.createSession", payload={
        "did": "did:plc:alice",
        "handle": "alice.test",
        "accessJwt": "access-1",
        "refreshJwt": "refresh-1",
    })
    response = client.post("/api/chat/session", json={"identifier": "@alice.test", "appPassword": "app-pass"})
    assert response.status_code == 200
    return client
