"""POST offer-services: bookable baggage and seat maps for an offer."""

import logging
from typing import Any

from core.clients import get_duffel_client
from core.errors import CheckoutError
from core.http import error_response, is_preflight, json_response, parse_body
from core.services.offers import get_offer_services

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    if is_preflight(event):
        return json_response(200, {})

    try:
        offer_id = parse_body(event).get("offerId")
        if not offer_id:
            return json_response(400, {"error": "offerId is required"})

        services = get_offer_services(offer_id, get_duffel_client())
    except CheckoutError as e:
        logger.error("Offer services lookup failed: %s", e.message)
        return error_response(e)

    logger.info("Offer %s: %d baggage options, %d seat maps", offer_id, len(services["baggage"]), len(services["seatMaps"]))
    return json_response(200, services)
