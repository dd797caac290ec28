"""Unit tests for offer passenger and extras lookups."""

from unittest.mock import MagicMock

from core.services.offers import get_offer_passengers, get_offer_services


def test_get_offer_passengers(offer):
    duffel = MagicMock()
    duffel.get_offer.return_value = offer

    passengers = get_offer_passengers("off_123", duffel)

    assert [p.model_dump() for p in passengers] == [{"id": "pas_1", "type": "adult", "given_name": None, "family_name": None}]
    duffel.get_offer.assert_called_once_with("off_123")


def test_get_offer_services_normalises_baggage(offer, seat_maps):
    duffel = MagicMock()
    duffel.get_offer.return_value = {
        **offer,
        "available_services": [
            {
                "id": "ase_bag_1",
                "type": "baggage",
                "total_amount": "40.00",
                "total_currency": "AUD",
                "maximum_quantity": 2,
                "passenger_ids": ["pas_1"],
                "segment_ids": ["seg_1"],
                "metadata": {"type": "checked", "maximum_weight_kg": 23},
            },
            {"id": "ase_cfar", "type": "cancel_for_any_reason", "total_amount": "30.00"},
        ],
    }
    duffel.get_seat_maps.return_value = seat_maps

    result = get_offer_services("off_123", duffel)

    assert result["offerId"] == "off_123"
    assert result["baggage"] == [
        {
            "id": "ase_bag_1",
            "type": "checked",
            "amount": "40.00",
            "currency": "AUD",
            "maximum_quantity": 2,
            "passenger_id": "pas_1",
            "passenger_ids": ["pas_1"],
            "segment_ids": ["seg_1"],
        }
    ]
    assert result["seatMaps"] == seat_maps
    duffel.get_offer.assert_called_once_with("off_123", return_available_services=True)
