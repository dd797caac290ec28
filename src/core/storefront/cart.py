"""Offer cart: a reducer-driven state container with one persistence boundary.

Every mutation is an action passed through ``reduce``; ``CartStore.dispatch``
is the only place state changes and the only place it is written to storage.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import pydantic

from core.models import CartItem, CartState, SelectedService
from core.storefront.storage import Storage

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "eventescapes-flight-cart"
CART_VERSION = 0


@dataclass(frozen=True)
class AddOffer:
    offer: dict[str, Any]
    search_params: dict[str, Any] | None = None


@dataclass(frozen=True)
class SetServicesForOffer:
    offer_id: str
    services: tuple[SelectedService, ...]


@dataclass(frozen=True)
class ClearOffer:
    offer_id: str


@dataclass(frozen=True)
class ClearAll:
    pass


CartAction = AddOffer | SetServicesForOffer | ClearOffer | ClearAll


def reduce(state: CartState, action: CartAction) -> CartState:
    """Pure transition; returns ``state`` itself when the action changes nothing."""
    if isinstance(action, AddOffer):
        offer_id = action.offer.get("id")
        if not offer_id or state.find(offer_id) is not None:
            return state
        item = CartItem(offer_id=offer_id, offer=action.offer, services=[], search_params=action.search_params)
        return CartState(items=(*state.items, item))

    if isinstance(action, SetServicesForOffer):
        if state.find(action.offer_id) is None:
            return state
        items = tuple(
            CartItem.model_validate({**item.model_dump(), "services": list(action.services)})
            if item.offer_id == action.offer_id
            else item
            for item in state.items
        )
        return CartState(items=items)

    if isinstance(action, ClearOffer):
        if state.find(action.offer_id) is None:
            return state
        return CartState(items=tuple(item for item in state.items if item.offer_id != action.offer_id))

    if isinstance(action, ClearAll):
        return CartState() if state.items else state

    raise TypeError(f"Unknown cart action: {action!r}")


class CartStore:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._state = self._load()

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def items(self) -> tuple[CartItem, ...]:
        return self._state.items

    def _load(self) -> CartState:
        raw = self._storage.get(CART_STORAGE_KEY)
        if not raw:
            return CartState()
        try:
            return CartState(items=tuple(CartItem.model_validate(item) for item in raw.get("items", [])))
        except (pydantic.ValidationError, AttributeError):
            logger.warning("Discarding unreadable cart from storage")
            return CartState()

    def _persist(self) -> None:
        self._storage.set(
            CART_STORAGE_KEY,
            {
                "items": [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in self._state.items],
                "version": CART_VERSION,
            },
        )

    def dispatch(self, action: CartAction) -> CartState:
        new_state = reduce(self._state, action)
        if new_state is not self._state:
            self._state = new_state
            self._persist()
        return self._state

    def add_offer(self, offer: dict[str, Any], search_params: dict[str, Any] | None = None) -> CartState:
        return self.dispatch(AddOffer(offer, search_params))

    def set_services_for_offer(self, offer_id: str, services: list[SelectedService]) -> CartState:
        return self.dispatch(SetServicesForOffer(offer_id, tuple(services)))

    def clear_offer(self, offer_id: str) -> CartState:
        return self.dispatch(ClearOffer(offer_id))

    def clear_all(self) -> CartState:
        return self.dispatch(ClearAll())

    def get(self, offer_id: str) -> CartItem | None:
        return self._state.find(offer_id)

    def get_total(self, offer_id: str) -> Decimal:
        item = self.get(offer_id)
        return item.grand_total if item else Decimal("0")

    def get_seats(self, offer_id: str) -> list[SelectedService]:
        item = self.get(offer_id)
        return item.seats if item else []

    def get_baggage(self, offer_id: str) -> list[SelectedService]:
        item = self.get(offer_id)
        return item.baggage if item else []
