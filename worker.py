from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from loguru import logger

from config import RelaySettings
from relay.exceptions import ForwardingError
from relay.services.commits import format_commit_messages
from relay.services.forwarder import WebhookForwarder
from relay.services.metrics import MetricsRegistry


@dataclass(slots=True)
class RelayJob:
    destination: str
    headers: dict[str, str]
    payload: Any
    delivery_id: str | None = None


def count_rewritten(before: Any, after: Any) -> int:
    if before is after or not isinstance(before, dict) or not isinstance(after, dict):
        return 0
    return sum(
        1
        for old, new in zip(before.get("commits", []), after.get("commits", []))
        if old != new
    )


class RelayWorker:
    def __init__(self, settings: RelaySettings, forwarder: WebhookForwarder, metrics: MetricsRegistry) -> None:
        self.settings = settings
        self.forwarder = forwarder
        self.metrics = metrics

    async def process(self, job: RelayJob) -> int:
        """Rewrite the commit messages of ``job`` and repost it; returns the destination status."""
        payload = format_commit_messages(
            job.payload,
            limits=self.settings.display_limits,
            resolve_gitmoji=self.settings.resolve_gitmoji,
        )
        self.metrics.inc("commits.rewritten", count_rewritten(job.payload, payload))

        start = time.perf_counter()
        try:
            status = await self.forwarder.forward(job.destination, headers=job.headers, payload=payload)
        except ForwardingError:
            self.metrics.inc("webhooks.failed")
            raise
        self.metrics.observe("forward.latency", time.perf_counter() - start)
        self.metrics.inc("webhooks.forwarded")
        logger.info("Forwarded delivery {} with status {}", job.delivery_id or "-", status)
        return status
