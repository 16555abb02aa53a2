from __future__ import annotations

import json
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

import httpx
from loguru import logger

from relay.exceptions import ForwardingError, InvalidDestinationError

GITHUB_WEBHOOK_HEADERS = (
    "user-agent",
    "content-type",
    "x-github-delivery",
    "x-github-event",
    "x-github-hook-id",
    "x-github-hook-installation-target-id",
    "x-github-hook-installation-target-type",
)


def select_github_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Keep only the GitHub delivery headers the destination understands."""
    selected: dict[str, str] = {}
    for header in GITHUB_WEBHOOK_HEADERS:
        value = headers.get(header)
        if value:
            selected[header] = value
    return selected


def validate_destination(url: str, allowed_hosts: list[str] | None = None) -> str:
    parsed = urlsplit(url)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.hostname:
        raise InvalidDestinationError("webhook_url must be an absolute http(s) URL.")
    if allowed_hosts and parsed.hostname.lower() not in allowed_hosts:
        logger.warning("Rejected destination host {}", parsed.hostname)
        raise InvalidDestinationError(
            f"webhook_url host {parsed.hostname} is not allowed.",
            detail=", ".join(allowed_hosts),
        )
    return url


class WebhookForwarder:
    """Reposts rewritten deliveries to their destination webhook."""

    def __init__(self, *, timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def forward(self, url: str, *, headers: Mapping[str, str], payload: Any) -> int:
        body = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        try:
            response = await self._client.post(url, headers=dict(headers), content=body)
        except httpx.HTTPError as exc:
            logger.warning("Forwarding to {} failed: {}", urlsplit(url).hostname, exc)
            raise ForwardingError("Failed to reach the destination webhook.", detail=str(exc)) from exc
        return response.status_code

    async def aclose(self) -> None:
        await self._client.aclose()
