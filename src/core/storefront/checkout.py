"""Start checkout: validate locally, price the cart item, then hand off to Stripe."""

import logging
import re
from collections.abc import Callable
from typing import Any

import pydantic

from core.errors import ErrorCode, ValidationError
from core.models import CartItem, CheckoutSession, PassengerDetails, compute_grand_total
from core.money import format_amount, is_known_currency
from core.storefront.api import StorefrontApi
from core.storefront.storage import Storage, get_or_create_session_id

logger = logging.getLogger(__name__)

__all__ = ["CheckoutInitiator", "compute_grand_total", "validate_passengers"]

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE = re.compile(r"^\+?[0-9][0-9 ()-]{5,}$")
_REQUIRED = {
    "title": "title",
    "gender": "gender",
    "given_name": "first name",
    "family_name": "last name",
    "born_on": "date of birth",
    "email": "email",
    "phone_number": "phone number",
}


def validate_passengers(passengers: list[PassengerDetails]) -> None:
    problems = []
    for index, passenger in enumerate(passengers, start=1):
        for name, label in _REQUIRED.items():
            if not getattr(passenger, name):
                problems.append(f"Passenger {index}: {label} is required")
        if passenger.email and not _EMAIL.match(passenger.email):
            problems.append(f"Passenger {index}: email address is invalid")
        if passenger.phone_number and not _PHONE.match(passenger.phone_number):
            problems.append(f"Passenger {index}: phone number is invalid")
    if problems:
        raise ValidationError("; ".join(problems))


def _parse_passengers(passengers: list[dict[str, Any] | PassengerDetails]) -> list[PassengerDetails]:
    try:
        return [p if isinstance(p, PassengerDetails) else PassengerDetails.model_validate(p) for p in passengers]
    except pydantic.ValidationError as e:
        raise ValidationError(f"Passenger details are invalid: {e}") from e


class CheckoutInitiator:
    """Turns a cart item and passenger details into a hosted-payment redirect.

    Nothing is mutated on failure, so the traveller can fix the problem and retry.
    """

    def __init__(self, api: StorefrontApi, redirect: Callable[[str], None], storage: Storage | None = None) -> None:
        self._api = api
        self._redirect = redirect
        self._storage = storage

    def build_payload(self, item: CartItem, passengers: list[dict[str, Any] | PassengerDetails]) -> dict[str, Any]:
        if not item.offer_id:
            raise ValidationError("offerId is required")
        if not passengers:
            raise ValidationError("At least one passenger is required")

        parsed = _parse_passengers(passengers)
        validate_passengers(parsed)

        total = item.grand_total
        if total <= 0:
            raise ValidationError("Total amount must be positive")
        currency = item.currency
        if not is_known_currency(currency):
            raise ValidationError(f"Unsupported currency: {currency}", code=ErrorCode.UNSUPPORTED_CURRENCY)

        payload: dict[str, Any] = {
            "offerId": item.offer_id,
            "passengers": [p.to_supplier() for p in parsed],
            "services": [s.model_dump(mode="json", by_alias=True, exclude_none=True) for s in item.services],
            "totalAmount": format_amount(total),
            "currency": currency.upper(),
            "offerData": item.offer,
        }
        if self._storage is not None:
            payload["correlationId"] = get_or_create_session_id(self._storage)
        return payload

    def start(self, item: CartItem, passengers: list[dict[str, Any] | PassengerDetails]) -> CheckoutSession:
        payload = self.build_payload(item, passengers)
        session = self._api.create_checkout_session(payload)
        logger.info("Redirecting to payment for offer %s (session %s)", item.offer_id, session.session_id)
        self._redirect(session.url)
        return session
