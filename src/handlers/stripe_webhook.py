"""POST stripe-webhook: verified Stripe events that place the Duffel order.

Responds ``{"received": true}`` for every handled outcome, including a failed
booking, so Stripe does not keep retrying; only a bad signature gets a 4xx.
"""

import logging
from typing import Any

from core.clients import get_duffel_client, get_dynamo_client
from core.config import get_config
from core.errors import CheckoutError, WebhookVerificationError
from core.http import error_response, get_header, json_response, raw_body
from core.services.booking_status import BookingStatusStore
from core.services.webhook import handle_event, verify_event

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    config = get_config()
    try:
        stripe_event = verify_event(raw_body(event), get_header(event, "stripe-signature"), config.stripe_webhook_secret)
    except WebhookVerificationError as e:
        logger.warning("Rejected webhook: %s", e.message)
        return error_response(e)

    logger.info("Stripe event received: %s", stripe_event.get("type"))

    try:
        store = BookingStatusStore(get_dynamo_client(), config.booking_status_table, config.booking_status_ttl_days)
        outcome = handle_event(stripe_event, store, get_duffel_client())
    except Exception as e:
        logger.exception("Webhook processing failed for event %s", stripe_event.get("id"))
        return error_response(CheckoutError(str(e)))

    logger.info("Stripe event %s handled: %s", stripe_event.get("id"), outcome)
    return json_response(200, {"received": True})
