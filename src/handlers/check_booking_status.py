"""POST check-booking-status: read the webhook's outcome for a checkout session."""

import logging
from typing import Any

from core.clients import get_dynamo_client
from core.config import get_config
from core.errors import CheckoutError
from core.http import error_response, is_preflight, json_response, parse_body
from core.services.booking_status import BookingStatusStore

logger = logging.getLogger(__name__)

_NO_CACHE = {"Cache-Control": "no-store, no-cache, must-revalidate, private", "Pragma": "no-cache"}


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    if is_preflight(event):
        return json_response(200, {}, _NO_CACHE)

    try:
        session_id = parse_body(event).get("sessionId")
        if not session_id:
            return json_response(400, {"error": "sessionId is required"}, _NO_CACHE)

        config = get_config()
        store = BookingStatusStore(get_dynamo_client(), config.booking_status_table, config.booking_status_ttl_days)
        status = store.get(session_id)
    except CheckoutError as e:
        return error_response(e)

    logger.info("Booking status for session %s: %s", session_id, status.status)
    return json_response(200, status.to_response(), _NO_CACHE)
