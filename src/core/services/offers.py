"""Offer lookups used before checkout: passenger ids and bookable extras."""

from typing import Any

from core.duffel import DuffelClient
from core.models import OfferPassenger


def get_offer_passengers(offer_id: str, duffel: DuffelClient) -> list[OfferPassenger]:
    offer = duffel.get_offer(offer_id) or {}
    return [
        OfferPassenger(
            id=p["id"],
            type=p.get("type"),
            given_name=p.get("given_name"),
            family_name=p.get("family_name"),
        )
        for p in offer.get("passengers") or []
    ]


def normalise_baggage(service: dict[str, Any], offer: dict[str, Any]) -> dict[str, Any]:
    passenger_ids = service.get("passenger_ids") or ([service["passenger_id"]] if service.get("passenger_id") else [])
    amount = service.get("total_amount") or service.get("price") or service.get("amount")
    currency = service.get("total_currency") or service.get("currency") or offer.get("total_currency") or "USD"
    return {
        "id": service["id"],
        "type": (service.get("metadata") or {}).get("type", "checked"),
        "amount": amount,
        "currency": currency,
        "maximum_quantity": int(service.get("maximum_quantity") or 1),
        "passenger_id": passenger_ids[0] if passenger_ids else None,
        "passenger_ids": passenger_ids,
        "segment_ids": service.get("segment_ids") or [],
    }


def get_offer_services(offer_id: str, duffel: DuffelClient) -> dict[str, Any]:
    """Purchasable baggage and the seat maps for every segment of the offer."""
    offer = duffel.get_offer(offer_id, return_available_services=True) or {}
    baggage = [
        normalise_baggage(service, offer)
        for service in offer.get("available_services") or []
        if service.get("type") == "baggage"
    ]
    return {
        "offerId": offer.get("id", offer_id),
        "baggage": baggage,
        "seatMaps": duffel.get_seat_maps(offer_id),
    }
