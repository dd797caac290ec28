"""POST create-checkout-session: start a Stripe hosted payment for an offer."""

import logging
from typing import Any

import pydantic

from core.clients import get_stripe
from core.config import get_config
from core.errors import CheckoutError
from core.http import error_response, get_header, is_preflight, json_response, parse_body
from core.models import CheckoutRequest
from core.services.checkout import create_checkout_session

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    if is_preflight(event):
        return json_response(200, {})

    try:
        body = parse_body(event)
        try:
            request = CheckoutRequest.model_validate(body)
        except pydantic.ValidationError as e:
            logger.info("Rejected checkout request: %s", e)
            details = [{"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]} for err in e.errors()]
            return json_response(400, {"error": "Missing required fields", "details": details})

        origin = get_header(event, "origin") or get_config().site_url
        session = create_checkout_session(request, origin.rstrip("/"), get_stripe())
        return json_response(200, session.model_dump(by_alias=True))
    except CheckoutError as e:
        return error_response(e)
    except Exception as e:
        logger.exception("Unexpected error creating checkout session")
        return error_response(CheckoutError(str(e)))
