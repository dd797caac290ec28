"""Unit tests for the get-offer-lite and offer-services handlers."""

import json
from unittest.mock import MagicMock, patch

from core.errors import ErrorCode, SupplierError
from core.models import OfferPassenger
from handlers import get_offer_lite, offer_services


def _event(body):
    return {"httpMethod": "POST", "body": json.dumps(body)}


def test_offer_lite_returns_passengers():
    passengers = [OfferPassenger(id="pas_1", type="adult"), OfferPassenger(id="pas_2", type="child")]
    with (
        patch("handlers.get_offer_lite.get_duffel_client", return_value=MagicMock()),
        patch("handlers.get_offer_lite.get_offer_passengers", return_value=passengers),
    ):
        result = get_offer_lite.handler(_event({"offerId": "off_123"}), None)

    assert result["statusCode"] == 200
    body = json.loads(result["body"])
    assert body["offerId"] == "off_123"
    assert [p["id"] for p in body["passengers"]] == ["pas_1", "pas_2"]
    assert set(body["passengers"][0]) == {"id", "type", "given_name", "family_name"}


def test_offer_lite_requires_offer_id():
    result = get_offer_lite.handler(_event({}), None)
    assert result["statusCode"] == 400


def test_offer_lite_supplier_failure():
    with (
        patch("handlers.get_offer_lite.get_duffel_client", return_value=MagicMock()),
        patch("handlers.get_offer_lite.get_offer_passengers", side_effect=SupplierError("boom")),
    ):
        result = get_offer_lite.handler(_event({"offerId": "off_123"}), None)

    assert result["statusCode"] == 502


def test_offer_services_expired_offer_is_404():
    with (
        patch("handlers.offer_services.get_duffel_client", return_value=MagicMock()),
        patch("handlers.offer_services.get_offer_services", side_effect=SupplierError("gone", code=ErrorCode.OFFER_NOT_FOUND)),
    ):
        result = offer_services.handler(_event({"offerId": "off_old"}), None)

    assert result["statusCode"] == 404
    assert json.loads(result["body"])["code"] == "OFFER_NOT_FOUND"


def test_offer_services_returns_extras():
    extras = {"offerId": "off_123", "baggage": [], "seatMaps": []}
    with (
        patch("handlers.offer_services.get_duffel_client", return_value=MagicMock()),
        patch("handlers.offer_services.get_offer_services", return_value=extras),
    ):
        result = offer_services.handler(_event({"offerId": "off_123"}), None)

    assert json.loads(result["body"]) == extras
