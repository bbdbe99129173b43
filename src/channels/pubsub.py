"""Pub/Sub push adapter — receives order messages from the commerce platform subscription.

Handles:
- POST /event → Pub/Sub push delivery ({"message": {"data": "<base64>"}})

Replies 204 for anything processed or deliberately skipped, 400 with a
``{"message": ...}`` body otherwise. Pub/Sub redelivers on non-2xx replies.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from src.assignment.dispatcher import OrderEventDispatcher

logger = logging.getLogger(__name__)

pubsub_router = APIRouter(tags=["pubsub"])


def _get_dispatcher(request: Request) -> OrderEventDispatcher:
    return request.app.state.dispatcher


@pubsub_router.post("/event")
async def receive_event(request: Request) -> Response:
    """Process one pushed message and translate the outcome into a status code."""
    body = await request.body()
    try:
        envelope = json.loads(body) if body else None
    except ValueError:
        logger.warning("Pub/Sub push body is not JSON")
        envelope = None

    result = await _get_dispatcher(request).dispatch(envelope)
    logger.debug("Event processed: outcome=%s status=%s", result.outcome.value, result.status_code)

    if result.status_code == 204:
        return Response(status_code=204)
    return JSONResponse(status_code=result.status_code, content={"message": result.message})
