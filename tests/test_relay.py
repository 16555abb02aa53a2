from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from config import RelaySettings
from relay.app import create_app
from relay.services.inline_code import ZERO_WIDTH_SPACE

DESTINATION = "https://discord.com/api/webhooks/1/token/github"

GITHUB_HEADERS = {
    "User-Agent": "GitHub-Hookshot/abc123",
    "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
    "X-GitHub-Event": "push",
    "X-GitHub-Hook-ID": "292430182",
    "X-GitHub-Hook-Installation-Target-ID": "79929171",
    "X-GitHub-Hook-Installation-Target-Type": "repository",
    "X-Hub-Signature-256": "sha256=deadbeef",
}


class Destination:
    def __init__(self, status_code: int = 204) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)

    @property
    def payload(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_client(destination, **overrides) -> TestClient:
    settings = RelaySettings(_env_file=None, **overrides)
    return TestClient(create_app(settings, transport=httpx.MockTransport(destination)))


def push_payload(*messages: str) -> dict:
    return {
        "ref": "refs/heads/main",
        "commits": [{"id": f"c{index}", "message": message} for index, message in enumerate(messages)],
        "head_commit": {"id": "c0", "message": messages[0]},
    }


def test_forwards_rewritten_payload() -> None:
    destination = Destination()
    message = ":bug: fix `" + "x" * 60 + "`"
    with make_client(destination) as client:
        response = client.post(
            "/api/github/webhook",
            params={"webhook_url": DESTINATION},
            json=push_payload(message),
            headers=GITHUB_HEADERS,
        )

    assert response.status_code == 204
    assert response.content == b""
    forwarded = destination.requests[0]
    assert str(forwarded.url) == DESTINATION
    assert forwarded.method == "POST"
    commit_message = destination.payload["commits"][0]["message"]
    assert commit_message.startswith("\U0001F41B fix `")
    assert ZERO_WIDTH_SPACE in commit_message
    assert destination.payload["head_commit"]["message"] == message
    assert destination.payload["ref"] == "refs/heads/main"


def test_forwards_only_github_headers() -> None:
    destination = Destination()
    with make_client(destination) as client:
        client.post(
            "/api/github/webhook",
            params={"webhook_url": DESTINATION},
            json={"zen": "Design for failure."},
            headers=GITHUB_HEADERS,
        )

    headers = destination.requests[0].headers
    assert headers["x-github-event"] == "push"
    assert headers["x-github-delivery"] == GITHUB_HEADERS["X-GitHub-Delivery"]
    assert headers["x-github-hook-installation-target-type"] == "repository"
    assert headers["user-agent"] == "GitHub-Hookshot/abc123"
    assert headers["content-type"] == "application/json"
    assert "x-hub-signature-256" not in headers
    assert destination.payload == {"zen": "Design for failure."}


def test_mirrors_destination_status() -> None:
    destination = Destination(status_code=429)
    with make_client(destination) as client:
        response = client.post("/api/github/webhook", params={"webhook_url": DESTINATION}, json={})
    assert response.status_code == 429


def test_missing_destination() -> None:
    destination = Destination()
    with make_client(destination) as client:
        response = client.post("/api/github/webhook", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "You must specify a destination webhook_url."}
    assert destination.requests == []


def test_repeated_destination() -> None:
    destination = Destination()
    with make_client(destination) as client:
        response = client.post(
            "/api/github/webhook?webhook_url=https://a.example/x&webhook_url=https://b.example/y",
            json={},
        )
    assert response.status_code == 400
    assert response.json() == {"error": "webhook_url must be a unique query parameter."}


@pytest.mark.parametrize("url", ["ftp://discord.com/hook", "discord.com/hook", "https://"])
def test_rejects_malformed_destination(url: str) -> None:
    destination = Destination()
    with make_client(destination) as client:
        response = client.post("/api/github/webhook", params={"webhook_url": url}, json={})
    assert response.status_code == 400
    assert "error" in response.json()
    assert destination.requests == []


def test_rejects_destination_outside_allow_list() -> None:
    destination = Destination()
    with make_client(destination, ALLOWED_WEBHOOK_HOSTS="discord.com") as client:
        denied = client.post("/api/github/webhook", params={"webhook_url": "https://evil.example/x"}, json={})
        allowed = client.post("/api/github/webhook", params={"webhook_url": DESTINATION}, json={})
    assert denied.status_code == 400
    assert allowed.status_code == 204
    assert len(destination.requests) == 1


def test_rejects_invalid_json() -> None:
    destination = Destination()
    with make_client(destination) as client:
        response = client.post(
            "/api/github/webhook",
            params={"webhook_url": DESTINATION},
            content=b"payload=%7B%7D",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    assert response.status_code == 400
    assert response.json() == {"error": "Request body must be valid JSON."}


def test_unreachable_destination() -> None:
    def destination(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with make_client(destination) as client:
        response = client.post("/api/github/webhook", params={"webhook_url": DESTINATION}, json={})
        health = client.get("/healthz").json()
    assert response.status_code == 502
    assert response.json() == {"error": "Failed to reach the destination webhook."}
    assert health["counters"]["webhooks.failed"] == 1


def test_only_post_is_accepted() -> None:
    destination = Destination()
    with make_client(destination, HOMEPAGE_URL="https://github.com/octo") as client:
        put = client.put("/api/github/webhook", params={"webhook_url": DESTINATION}, json={})
        get = client.get("/api/github/webhook", params={"webhook_url": DESTINATION}, follow_redirects=False)
    assert put.status_code == 405
    assert get.status_code == 405
    assert get.headers["allow"] == "POST"
    assert destination.requests == []


def test_healthz_reports_counters() -> None:
    destination = Destination()
    with make_client(destination) as client:
        client.post(
            "/api/github/webhook",
            params={"webhook_url": DESTINATION},
            json=push_payload("whoops, `i forgot to close this", "docs: readme"),
        )
        client.post("/api/github/webhook", json={})
        body = client.get("/healthz").json()

    assert body["service"] == "commit-relay"
    assert body["ok"] is True
    assert body["counters"]["webhooks.received"] == 2
    assert body["counters"]["webhooks.forwarded"] == 1
    assert body["counters"]["webhooks.rejected"] == 1
    assert body["counters"]["commits.rewritten"] == 1


def test_root_redirects_to_homepage() -> None:
    with make_client(Destination(), HOMEPAGE_URL="https://github.com/octo") as client:
        root = client.get("/", follow_redirects=False)
        other = client.get("/some/page", follow_redirects=False)
        api = client.get("/api/unknown", follow_redirects=False)
    assert root.status_code == 307
    assert root.headers["location"] == "https://github.com/octo"
    assert other.status_code == 307
    assert api.status_code == 404


def test_root_without_homepage_is_not_found() -> None:
    with make_client(Destination()) as client:
        assert client.get("/").status_code == 404
