from __future__ import annotations

import json

from fastapi import APIRouter, Request, Response
from loguru import logger

from relay.exceptions import InvalidPayloadError, MissingDestinationError
from relay.services.forwarder import select_github_headers, validate_destination
from worker import RelayJob

router = APIRouter(prefix="/api/github")


@router.post("/webhook")
async def github_webhook(request: Request) -> Response:
    """Rewrite a GitHub delivery and repost it to ``webhook_url``.

    The response mirrors the destination's status code so GitHub's delivery
    log shows what the destination answered.
    """
    state = request.app.state
    state.metrics.inc("webhooks.received")

    destinations = request.query_params.getlist("webhook_url")
    if not destinations or not destinations[0]:
        raise MissingDestinationError("You must specify a destination webhook_url.")
    if len(destinations) > 1:
        raise MissingDestinationError("webhook_url must be a unique query parameter.")
    destination = validate_destination(destinations[0], state.settings.webhook_hosts)

    try:
        payload = json.loads(await request.body())
    except ValueError as exc:
        logger.warning("Rejected delivery with undecodable body: {}", exc)
        raise InvalidPayloadError("Request body must be valid JSON.") from exc

    job = RelayJob(
        destination=destination,
        headers=select_github_headers(request.headers),
        payload=payload,
        delivery_id=request.headers.get("x-github-delivery"),
    )
    status = await state.worker.process(job)
    return Response(status_code=status)
