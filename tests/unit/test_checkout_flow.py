"""Cart to confirmed booking, with the storefront calling the handlers in-process."""

import hashlib
import hmac
import json
import os
import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from core.errors import ErrorCode, SupplierError
from core.storefront.api import StorefrontApi
from core.storefront.cart import CartStore
from core.storefront.checkout import CheckoutInitiator
from core.storefront.poller import BookingStatusPoller, PollState, render_outcome
from core.storefront.storage import MemoryStorage
from handlers import check_booking_status, create_checkout_session, stripe_webhook

SECRET = "whsec_test_secret"
ORIGIN = "https://eventescapes.test"

HANDLERS = {
    "create-checkout-session": create_checkout_session.handler,
    "check-booking-status": check_booking_status.handler,
}


class FakeDynamo:
    """Just enough of the DynamoDB client for conditional puts and reads."""

    class exceptions:
        class ConditionalCheckFailedException(Exception):
            pass

    def __init__(self):
        self.items = {}

    def put_item(self, TableName, Item, ConditionExpression, **kwargs):
        existing = self.items.get(Item["sessionId"]["S"])
        if existing is not None:
            overwrite_processing = "#status = :processing" in ConditionExpression
            if not (overwrite_processing and existing["status"]["S"] == "processing"):
                raise self.exceptions.ConditionalCheckFailedException()
        self.items[Item["sessionId"]["S"]] = Item

    def get_item(self, TableName, Key, ConsistentRead=False):
        item = self.items.get(Key["sessionId"]["S"])
        return {"Item": item} if item else {}


_dumps = json.dumps
_loads = json.loads


class InProcessSession:
    """A requests.Session stand-in that dispatches to the Lambda handlers."""

    def post(self, url, json=None, timeout=None):
        function = url.rsplit("/", 1)[-1]
        event = {"httpMethod": "POST", "headers": {"Origin": ORIGIN}, "body": _dumps(json)}
        result = HANDLERS[function](event, None)
        response = MagicMock()
        response.status_code = result["statusCode"]
        response.ok = result["statusCode"] < 400
        response.json.return_value = _loads(result["body"])
        return response


def _signed(payload: dict) -> dict:
    body = json.dumps(payload)
    timestamp = int(time.time())
    signature = hmac.new(SECRET.encode(), f"{timestamp}.{body}".encode(), hashlib.sha256).hexdigest()
    return {"httpMethod": "POST", "headers": {"Stripe-Signature": f"t={timestamp},v1={signature}"}, "body": body}


@pytest.fixture
def env():
    dynamo = FakeDynamo()
    duffel = MagicMock()
    duffel.create_order.return_value = {"id": "ord_0000A", "booking_reference": "RZPNX8"}
    stripe_module = MagicMock()
    stripe_module.checkout.Session.create.return_value = SimpleNamespace(
        id="cs_test_e2e", url="https://checkout.stripe.com/c/pay/cs_test_e2e"
    )

    with (
        patch.dict(os.environ, {"STRIPE_WEBHOOK_SECRET": SECRET}),
        patch("handlers.create_checkout_session.get_stripe", return_value=stripe_module),
        patch("handlers.stripe_webhook.get_dynamo_client", return_value=dynamo),
        patch("handlers.stripe_webhook.get_duffel_client", return_value=duffel),
        patch("handlers.check_booking_status.get_dynamo_client", return_value=dynamo),
    ):
        yield SimpleNamespace(dynamo=dynamo, duffel=duffel, stripe=stripe_module)


@pytest.fixture
def passenger():
    return {
        "id": "P1",
        "type": "adult",
        "title": "Ms",
        "gender": "Female",
        "given_name": "Ada",
        "family_name": "Lovelace",
        "born_on": "10/12/1985",
        "email": "ada@example.com",
        "phone_number": "+442071234567",
    }


def _start_checkout(passenger):
    cart = CartStore(MemoryStorage())
    cart.add_offer({"id": "OF123", "total_amount": "350.00", "total_currency": "AUD"})
    api = StorefrontApi("https://fn.eventescapes.test", session=InProcessSession())
    redirect = MagicMock()
    CheckoutInitiator(api, redirect).start(cart.get("OF123"), [passenger])
    return api, redirect


def _completed_event(env):
    params = env.stripe.checkout.Session.create.call_args.kwargs
    return {
        "id": "evt_e2e",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": "cs_test_e2e",
                "amount_total": 35000,
                "currency": "aud",
                "payment_status": "paid",
                "metadata": params["metadata"],
            }
        },
    }


def test_paid_checkout_is_confirmed(env, passenger):
    api, redirect = _start_checkout(passenger)
    redirect.assert_called_once_with("https://checkout.stripe.com/c/pay/cs_test_e2e")

    params = env.stripe.checkout.Session.create.call_args.kwargs
    assert params["line_items"][0]["price_data"]["unit_amount"] == 35000
    assert params["success_url"] == f"{ORIGIN}/booking-success?session_id={{CHECKOUT_SESSION_ID}}"

    deliveries = []

    def sleep(seconds):
        # The webhook lands while the traveller's page is waiting.
        if not deliveries:
            deliveries.append(stripe_webhook.handler(_signed(_completed_event(env)), None))

    outcome = BookingStatusPoller(api, sleep=sleep).poll_return_url(f"{ORIGIN}/booking-success?session_id=cs_test_e2e")

    assert deliveries[0]["statusCode"] == 200
    assert outcome.state == PollState.CONFIRMED
    assert outcome.status.booking_reference == "RZPNX8"
    assert outcome.status.duffel_order_id == "ord_0000A"

    args, kwargs = env.duffel.create_order.call_args
    assert args[0] == "OF123"
    assert args[1][0]["id"] == "P1"
    assert args[1][0]["born_on"] == "1985-12-10"
    assert kwargs["amount"] == "350.00"
    assert kwargs["currency"] == "AUD"


def test_redelivered_event_places_one_order(env, passenger):
    _start_checkout(passenger)
    event = _signed(_completed_event(env))

    first = stripe_webhook.handler(event, None)
    second = stripe_webhook.handler(event, None)

    assert first["statusCode"] == second["statusCode"] == 200
    env.duffel.create_order.assert_called_once()
    record = json.loads(env.dynamo.items["cs_test_e2e"]["record"]["S"])
    assert record["status"] == "confirmed"


def test_failed_order_reports_refund(env, passenger):
    env.duffel.create_order.side_effect = SupplierError(
        "Duffel booking failed: offer expired", code=ErrorCode.BOOKING_FAILED
    )
    api, _ = _start_checkout(passenger)

    result = stripe_webhook.handler(_signed(_completed_event(env)), None)
    outcome = BookingStatusPoller(api, sleep=MagicMock()).poll("cs_test_e2e")

    assert json.loads(result["body"]) == {"received": True}
    assert outcome.state == PollState.FAILED
    assert outcome.status.error == "Duffel booking failed: offer expired"
    assert "refunded automatically" in render_outcome(outcome)


def test_payment_never_confirmed_times_out(env, passenger):
    api, _ = _start_checkout(passenger)

    outcome = BookingStatusPoller(api, sleep=MagicMock()).poll("cs_test_e2e")

    assert outcome.state == PollState.TIMEOUT
    env.duffel.create_order.assert_not_called()
