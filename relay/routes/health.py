from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/healthz")
def healthz(request: Request) -> dict:
    metrics = request.app.state.metrics
    uptime = datetime.now(timezone.utc) - request.app.state.start_time
    return {
        "service": "commit-relay",
        "ok": True,
        "uptime": int(uptime.total_seconds()),
        "counters": metrics.snapshot(),
        "forward_latency_p95": metrics.percentile("forward.latency", 0.95),
    }
