"""POST get-offer-lite: the offer's real passenger ids for ancillary selection."""

import logging
from typing import Any

from core.clients import get_duffel_client
from core.errors import CheckoutError
from core.http import error_response, is_preflight, json_response, parse_body
from core.services.offers import get_offer_passengers

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    if is_preflight(event):
        return json_response(200, {})

    try:
        offer_id = parse_body(event).get("offerId")
        if not offer_id:
            return json_response(400, {"error": "offerId is required"})

        passengers = get_offer_passengers(offer_id, get_duffel_client())
    except CheckoutError as e:
        logger.error("Offer lookup failed: %s", e.message)
        return error_response(e)

    return json_response(200, {"passengers": [p.model_dump() for p in passengers], "offerId": offer_id})
