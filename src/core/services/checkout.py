"""Stripe Checkout Session creation for a priced offer plus ancillaries."""

import logging
from decimal import Decimal
from typing import Any

import stripe

from core.errors import ErrorCode, PaymentError, ValidationError
from core.metadata import pack_metadata, summarise_offer
from core.models import CheckoutRequest, CheckoutSession
from core.money import to_minor_units

logger = logging.getLogger(__name__)


def ancillary_totals(request: CheckoutRequest) -> tuple[Decimal, Decimal]:
    """(seats, baggage) totals; baggage is priced per bag."""
    seats = sum((s.unit_amount for s in request.services if s.type == "seat"), Decimal("0"))
    baggage = sum((s.unit_amount * s.quantity for s in request.services if s.type == "baggage"), Decimal("0"))
    return seats, baggage


def _route(offer: dict[str, Any] | None) -> tuple[str, str]:
    slices = (offer or {}).get("slices") or []
    if not slices:
        return "Origin", "Destination"
    origin = (slices[0].get("origin") or {}).get("iata_code") or "Origin"
    destination = (slices[-1].get("destination") or {}).get("iata_code") or "Destination"
    return origin, destination


def _line_item(currency: str, name: str, description: str, amount: Decimal) -> dict[str, Any]:
    return {
        "price_data": {
            "currency": currency.lower(),
            "product_data": {"name": name, "description": description},
            "unit_amount": to_minor_units(amount, currency),
        },
        "quantity": 1,
    }


def build_line_items(request: CheckoutRequest) -> list[dict[str, Any]]:
    """Flight, seat selection and checked baggage lines summing to the requested total."""
    seats, baggage = ancillary_totals(request)
    flight = request.total_amount - seats - baggage
    if flight <= 0:
        raise ValidationError("totalAmount does not cover the selected seats and baggage")

    origin, destination = _route(request.offer_data)
    count = len(request.passengers)
    items = [
        _line_item(
            request.currency,
            f"Flight: {origin} → {destination}",
            f"{count} passenger{'s' if count > 1 else ''}",
            flight,
        )
    ]
    if seats > 0:
        items.append(_line_item(request.currency, "Seat Selection", "Selected seats for your flight", seats))
    if baggage > 0:
        items.append(_line_item(request.currency, "Checked Baggage", "Additional checked baggage", baggage))
    return items


def build_metadata(request: CheckoutRequest) -> dict[str, str]:
    """Everything the webhook needs to place the order without asking the storefront again."""
    try:
        return pack_metadata(
            {"offerId": request.offer_id},
            {
                "passengers": [p.to_supplier() for p in request.passengers],
                "services": [s.model_dump(by_alias=True, exclude_none=True) for s in request.services],
                "offerData": summarise_offer(request.offer_data),
            },
        )
    except ValueError as e:
        raise ValidationError(f"Booking is too large to check out: {e}") from e


def create_checkout_session(request: CheckoutRequest, origin: str, stripe_module: Any = stripe) -> CheckoutSession:
    line_items = build_line_items(request)
    metadata = build_metadata(request)
    params: dict[str, Any] = {
        "payment_method_types": ["card"],
        "line_items": line_items,
        "mode": "payment",
        "success_url": f"{origin}/booking-success?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{origin}/passenger-details?canceled=true",
        "metadata": metadata,
    }
    if request.correlation_id:
        params["client_reference_id"] = request.correlation_id
    primary_email = request.passengers[0].email
    if primary_email:
        params["customer_email"] = primary_email

    try:
        session = stripe_module.checkout.Session.create(**params)
    except stripe.StripeError as e:
        logger.error("Stripe session creation failed for offer %s: %s", request.offer_id, e)
        raise PaymentError(f"Stripe session creation failed: {e}", code=ErrorCode.PAYMENT_SESSION_FAILED) from e

    logger.info("Checkout session %s created for offer %s", session.id, request.offer_id)
    return CheckoutSession(session_id=session.id, url=session.url)
