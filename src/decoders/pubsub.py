"""Pub/Sub push envelope decoder.

Pure Python — no I/O. Turns the raw request body into one of three outcomes:

- ``DecodedOrder``  → an OrderCreated order worth matching
- ``IgnoredEvent``  → valid traffic we don't act on (other message types,
  orders without a customer or without line items)
- ``InvalidEvent``  → malformed envelope / payload
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from pydantic import ValidationError

from src.schemas.events import (
    ORDER_CREATED,
    DecodedOrder,
    DecodedOutcome,
    IgnoredEvent,
    InvalidEvent,
    OrderMessage,
)

logger = logging.getLogger(__name__)

MSG_NO_ENVELOPE = "Bad request: No Pub/Sub message was received"
MSG_WRONG_FORMAT = "Bad request: Wrong No Pub/Sub message format"
MSG_NO_DATA = "Bad request: No data in the Pub/Sub message"
MSG_NOT_JSON = "Bad request: Pub/Sub message data is not valid JSON"
MSG_NO_ORDER = "Bad request: No order data in the message"
MSG_BAD_ORDER = "Bad request: Malformed order data in the message"


def _decode_data(data: Any) -> str:
    """Base64-decode the message data; returns "" when there is nothing usable."""
    if not isinstance(data, str) or not data:
        return ""
    try:
        # Pub/Sub producers may drop the trailing "=" padding
        raw = base64.b64decode(data + "=" * (-len(data) % 4))
    except (binascii.Error, ValueError):
        return ""
    return raw.decode("utf-8", errors="replace").strip()


def decode_envelope(envelope: Any) -> DecodedOutcome:
    """Decode a Pub/Sub push body into a DecodedOutcome."""
    if not envelope:
        logger.error("Missing request body.")
        return InvalidEvent(MSG_NO_ENVELOPE)

    message = envelope.get("message") if isinstance(envelope, dict) else None
    if not message or not isinstance(message, dict):
        logger.error("Missing body message")
        return InvalidEvent(MSG_WRONG_FORMAT)

    decoded = _decode_data(message.get("data"))
    if not decoded:
        return InvalidEvent(MSG_NO_DATA)

    try:
        payload = json.loads(decoded)
    except ValueError:
        logger.error("Pub/Sub message data is not valid JSON")
        return InvalidEvent(MSG_NOT_JSON)

    if not isinstance(payload, dict):
        return InvalidEvent(MSG_NOT_JSON)

    event_type = payload.get("type")
    if event_type != ORDER_CREATED:
        logger.info("Skipping message of type: %s", event_type)
        return IgnoredEvent(f"message type {event_type}")

    if payload.get("order") is None:
        logger.error("No order data in the message")
        return InvalidEvent(MSG_NO_ORDER)

    try:
        order = OrderMessage.model_validate(payload).order
    except ValidationError as exc:
        logger.error("Malformed order in message: %s", exc.error_count())
        return InvalidEvent(MSG_BAD_ORDER)

    if not order.customer_id:
        logger.info("Order has no customer, skipping")
        return IgnoredEvent("order has no customer")

    if not order.line_items:
        logger.info("Order has no line items, skipping")
        return IgnoredEvent("order has no line items")

    return DecodedOrder(order)
