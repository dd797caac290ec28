"""
Pydantic models for Event Escapes checkout.
"""

from core.models.booking import BookingStatus, CheckoutRequest, CheckoutSession, OfferPassenger
from core.models.cart import CartItem, CartState, SelectedService, compute_grand_total
from core.models.passenger import IdentityDocument, LoyaltyAccount, PassengerDetails

__all__ = [
    "BookingStatus",
    "CartItem",
    "CartState",
    "CheckoutRequest",
    "CheckoutSession",
    "IdentityDocument",
    "LoyaltyAccount",
    "OfferPassenger",
    "PassengerDetails",
    "SelectedService",
    "compute_grand_total",
]
