"""Stripe webhook processing: turns a captured payment into a Duffel order.

Runs unattended once per delivery. The outcome is only ever observable
through the booking status record, so every failure after the claim is
written down as ``failed`` rather than raised.
"""

import json
import logging
from typing import Any

import pydantic
import stripe

from core.duffel import DuffelClient
from core.errors import ValidationError, WebhookVerificationError
from core.metadata import read_json_field
from core.models import BookingStatus, PassengerDetails, SelectedService
from core.money import format_amount, from_minor_units
from core.services.booking_status import BookingStatusStore, utc_now

logger = logging.getLogger(__name__)

COMPLETED = "checkout.session.completed"
ASYNC_SUCCEEDED = "checkout.session.async_payment_succeeded"
_PAID = ("paid", "no_payment_required")


def verify_event(payload: str, signature: str | None, secret: str) -> dict[str, Any]:
    """Check the Stripe-Signature header and return the decoded event."""
    if not secret:
        raise WebhookVerificationError("STRIPE_WEBHOOK_SECRET not configured")
    if not signature:
        raise WebhookVerificationError("Missing Stripe-Signature header")
    try:
        stripe.WebhookSignature.verify_header(payload, signature, secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE)
    except stripe.SignatureVerificationError as e:
        raise WebhookVerificationError(f"Webhook signature verification failed: {e}") from e

    try:
        return json.loads(payload)
    except ValueError as e:
        raise WebhookVerificationError("Webhook payload is not valid JSON") from e


def parse_booking(session: dict[str, Any]) -> tuple[str, list[PassengerDetails], list[SelectedService]]:
    """Rebuild offer id, passengers and services from the session metadata."""
    metadata = session.get("metadata") or {}
    offer_id = metadata.get("offerId")
    try:
        raw_passengers = read_json_field(metadata, "passengers")
        raw_services = read_json_field(metadata, "services") or []
    except ValueError as e:
        raise ValidationError(f"Booking data in session metadata is corrupt: {e}") from e

    if not offer_id or not raw_passengers:
        raise ValidationError("Missing booking data in session metadata")

    try:
        passengers = [PassengerDetails.model_validate(p) for p in raw_passengers]
        services = [SelectedService.model_validate(s) for s in raw_services]
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid booking data in session metadata: {e}") from e
    return offer_id, passengers, services


def _captured(session: dict[str, Any]) -> tuple[str, str]:
    currency = (session.get("currency") or "usd").upper()
    amount = from_minor_units(int(session.get("amount_total") or 0), currency)
    return format_amount(amount), currency


def _record_outcome(store: BookingStatusStore, session_id: str, status: BookingStatus) -> None:
    # Redeliveries stop at the claim; this log is the only trace of a lost outcome.
    try:
        store.record(session_id, status)
    except Exception:
        logger.exception(
            "Could not record %s outcome for session %s (order %s, reference %s, error %s)",
            status.status,
            session_id,
            status.duffel_order_id,
            status.booking_reference,
            status.error,
        )
        raise


def fulfil_session(session: dict[str, Any], store: BookingStatusStore, duffel: DuffelClient) -> str:
    session_id = session["id"]
    if not store.claim(session_id):
        logger.warning("Session %s already claimed, ignoring redelivered event", session_id)
        return "duplicate"

    amount, currency = _captured(session)
    logger.info("Payment captured for session %s: %s %s", session_id, amount, currency)

    try:
        offer_id, passengers, services = parse_booking(session)
        supplier_passengers = [p.to_supplier() for p in passengers]
        order = duffel.create_order(
            offer_id,
            supplier_passengers,
            amount=amount,
            currency=currency,
            services=[s.minimal() for s in services],
        )
        status = BookingStatus(
            status="confirmed",
            booking_reference=order["booking_reference"],
            duffel_order_id=order["id"],
            amount=amount,
            currency=currency,
            passengers_data=supplier_passengers,
            services_data=[
                {
                    "id": s.id,
                    "type": s.type,
                    "quantity": s.quantity,
                    "amount": s.amount,
                    "designator": s.designator,
                    "passenger_id": s.passenger_id,
                    "segment_id": s.segment_id,
                }
                for s in services
            ],
            primary_email=(passengers[0].email or (session.get("customer_details") or {}).get("email") or ""),
            timestamp=utc_now(),
        )
    except Exception as e:
        message = getattr(e, "message", None) or str(e) or "Booking creation failed"
        logger.exception("Booking failed for paid session %s; payment must be refunded", session_id)
        _record_outcome(store, session_id, BookingStatus(status="failed", error=message, timestamp=utc_now()))
        return "failed"

    _record_outcome(store, session_id, status)
    logger.info("Order %s confirmed for session %s (%s)", status.duffel_order_id, session_id, status.booking_reference)
    return "confirmed"


def handle_event(event: dict[str, Any], store: BookingStatusStore, duffel: DuffelClient) -> str:
    """Dispatch a verified event; returns a short outcome label for logging."""
    event_type = event.get("type")
    if event_type not in (COMPLETED, ASYNC_SUCCEEDED):
        logger.info("Ignoring Stripe event %s", event_type)
        return "ignored"

    session = event["data"]["object"]
    if event_type == COMPLETED and session.get("payment_status") not in _PAID:
        logger.info("Session %s completed without payment yet, waiting for async result", session.get("id"))
        return "awaiting_payment"

    return fulfil_session(session, store, duffel)
