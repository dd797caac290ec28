"""Unit tests for Stripe checkout session creation."""

from unittest.mock import MagicMock

import pytest
import stripe

from core.errors import PaymentError, ValidationError
from core.metadata import read_json_field
from core.models import CheckoutRequest
from core.services.checkout import build_line_items, create_checkout_session


@pytest.fixture
def request_body(offer, passenger_form):
    return {
        "offerId": "off_123",
        "passengers": [passenger_form],
        "services": [
            {"id": "ase_seat", "type": "seat", "amount": "25.00", "passengerId": "pas_1", "segmentId": "seg_1", "designator": "12A"},
            {"id": "ase_bag", "type": "baggage", "amount": "40.00", "quantity": 2, "passengerId": "pas_1"},
        ],
        "totalAmount": "605.00",
        "currency": "AUD",
        "offerData": offer,
        "correlationId": "session_1_abc",
    }


@pytest.fixture
def stripe_module():
    module = MagicMock()
    module.checkout.Session.create.return_value = MagicMock(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1")
    return module


def test_line_items_split_flight_seats_and_baggage(request_body):
    items = build_line_items(CheckoutRequest.model_validate(request_body))

    assert [i["price_data"]["product_data"]["name"] for i in items] == [
        "Flight: SYD → MEL",
        "Seat Selection",
        "Checked Baggage",
    ]
    assert [i["price_data"]["unit_amount"] for i in items] == [50000, 2500, 8000]
    assert all(i["price_data"]["currency"] == "aud" for i in items)


def test_line_items_reject_total_below_ancillaries(request_body):
    request = CheckoutRequest.model_validate({**request_body, "totalAmount": "100.00"})
    with pytest.raises(ValidationError):
        build_line_items(request)


def test_create_session_returns_id_and_url(request_body, stripe_module):
    session = create_checkout_session(CheckoutRequest.model_validate(request_body), "https://eventescapes.test", stripe_module)

    assert session.session_id == "cs_test_1"
    assert session.url == "https://checkout.stripe.com/c/pay/cs_test_1"
    assert session.model_dump(by_alias=True) == {"sessionId": "cs_test_1", "url": "https://checkout.stripe.com/c/pay/cs_test_1"}


def test_create_session_metadata_carries_booking(request_body, stripe_module):
    create_checkout_session(CheckoutRequest.model_validate(request_body), "https://eventescapes.test", stripe_module)

    kwargs = stripe_module.checkout.Session.create.call_args.kwargs
    metadata = kwargs["metadata"]
    assert metadata["offerId"] == "off_123"
    assert read_json_field(metadata, "passengers")[0]["born_on"] == "1987-07-24"
    assert [s["id"] for s in read_json_field(metadata, "services")] == ["ase_seat", "ase_bag"]
    assert read_json_field(metadata, "offerData")["id"] == "off_123"
    assert kwargs["success_url"] == "https://eventescapes.test/booking-success?session_id={CHECKOUT_SESSION_ID}"
    assert kwargs["cancel_url"] == "https://eventescapes.test/passenger-details?canceled=true"
    assert kwargs["client_reference_id"] == "session_1_abc"
    assert kwargs["customer_email"] == "amelia@example.com"


def test_create_session_stripe_failure(request_body, stripe_module):
    stripe_module.checkout.Session.create.side_effect = stripe.InvalidRequestError("Amount too small", param="amount")

    with pytest.raises(PaymentError):
        create_checkout_session(CheckoutRequest.model_validate(request_body), "https://eventescapes.test", stripe_module)
