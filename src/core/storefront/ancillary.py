"""Seat and baggage selection for one offer, run before passenger details.

The flow is a small state machine::

    choosing -> [seats] -> [baggage] -> done

Seats always resolve before baggage is offered. Closing a step without a
selection counts as choosing nothing of that type.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from core.errors import CheckoutError
from core.models import OfferPassenger, SelectedService, compute_grand_total
from core.money import to_decimal
from core.storefront.api import StorefrontApi
from core.storefront.cart import CartStore

logger = logging.getLogger(__name__)


class Step(str, Enum):
    CHOOSING = "choosing"
    SEATS = "seats"
    BAGGAGE = "baggage"
    DONE = "done"


def _passenger_count(search_params: dict[str, Any] | None) -> int:
    count = (search_params or {}).get("passengers") or 1
    if isinstance(count, dict):
        count = sum(int(v or 0) for v in count.values())
    return max(int(count), 1)


def resolve_passengers(
    api: StorefrontApi, offer_id: str, search_params: dict[str, Any] | None = None
) -> list[OfferPassenger]:
    """Real passenger ids for the offer, or ``passenger_1..N`` when the lookup fails."""
    try:
        passengers = api.get_offer_passengers(offer_id)
        if passengers:
            return passengers
    except CheckoutError as e:
        logger.warning("Passenger lookup for offer %s failed, using placeholders: %s", offer_id, e.message)

    return [OfferPassenger(id=f"passenger_{i + 1}", type="adult") for i in range(_passenger_count(search_params))]


@dataclass(frozen=True)
class SeatChoice:
    segment_id: str
    designator: str
    passenger_id: str
    service_id: str
    amount: str
    currency: str | None

    def to_service(self) -> SelectedService:
        return SelectedService(
            id=self.service_id,
            type="seat",
            quantity=1,
            amount=self.amount,
            currency=self.currency,
            passenger_id=self.passenger_id,
            segment_id=self.segment_id,
            designator=self.designator,
        )


def _index_seats(seat_maps: list[dict[str, Any]]) -> dict[tuple[str, str], dict[str, Any]]:
    seats: dict[tuple[str, str], dict[str, Any]] = {}
    for seat_map in seat_maps:
        segment_id = seat_map.get("segment_id")
        for cabin in seat_map.get("cabins") or []:
            for row in cabin.get("rows") or []:
                for section in row.get("sections") or []:
                    for element in section.get("elements") or []:
                        if element.get("type") == "seat" and element.get("designator"):
                            seats[(segment_id, element["designator"])] = element
    return seats


class SeatSelection:
    """One seat per passenger per segment; a held seat must be released before anyone else takes it."""

    def __init__(self, seat_maps: list[dict[str, Any]]) -> None:
        self._seats = _index_seats(seat_maps)
        self._chosen: dict[tuple[str, str], SeatChoice] = {}

    def holder(self, segment_id: str, designator: str) -> str | None:
        return next(
            (c.passenger_id for c in self._chosen.values() if c.segment_id == segment_id and c.designator == designator),
            None,
        )

    def select(self, passenger_id: str, segment_id: str, designator: str) -> bool:
        """Assign the seat; False when it is unknown, not sold to this passenger, or held by someone else."""
        element = self._seats.get((segment_id, designator))
        if element is None:
            return False

        service = next(
            (s for s in element.get("available_services") or [] if s.get("passenger_id") == passenger_id),
            None,
        )
        if service is None:
            return False

        holder = self.holder(segment_id, designator)
        if holder is not None and holder != passenger_id:
            return False

        self._chosen[(segment_id, passenger_id)] = SeatChoice(
            segment_id=segment_id,
            designator=designator,
            passenger_id=passenger_id,
            service_id=service["id"],
            amount=str(service.get("total_amount") or "0"),
            currency=service.get("total_currency"),
        )
        return True

    def deselect(self, passenger_id: str, segment_id: str) -> None:
        self._chosen.pop((segment_id, passenger_id), None)

    @property
    def choices(self) -> list[SeatChoice]:
        return list(self._chosen.values())

    def to_services(self) -> list[SelectedService]:
        return [choice.to_service() for choice in self._chosen.values()]


class BaggageSelection:
    """Bag counts per baggage service, clamped to the service's maximum quantity."""

    def __init__(self, options: list[dict[str, Any]]) -> None:
        self._options = {option["id"]: option for option in options}
        self._quantities: dict[str, int] = {}

    def change_quantity(self, service_id: str, delta: int) -> int:
        option = self._options.get(service_id)
        if option is None:
            return 0
        maximum = int(option.get("maximum_quantity") or 1)
        quantity = max(0, min(self._quantities.get(service_id, 0) + delta, maximum))
        if quantity == 0:
            self._quantities.pop(service_id, None)
        else:
            self._quantities[service_id] = quantity
        return quantity

    def quantity(self, service_id: str) -> int:
        return self._quantities.get(service_id, 0)

    def to_services(self) -> list[SelectedService]:
        services = []
        for service_id, quantity in self._quantities.items():
            option = self._options[service_id]
            services.append(
                SelectedService(
                    id=service_id,
                    type="baggage",
                    quantity=quantity,
                    amount=to_decimal(option.get("amount"), default=Decimal("0")),
                    currency=option.get("currency"),
                    passenger_id=option.get("passenger_id"),
                    segment_id=(option.get("segment_ids") or [None])[0],
                )
            )
        return services


@dataclass
class AncillaryResult:
    """Verbose services for the cart and the minimal ``{id, quantity}`` list for the order."""

    verbose: list[SelectedService] = field(default_factory=list)

    @property
    def minimal(self) -> list[dict[str, Any]]:
        return [service.minimal() for service in self.verbose]


class AncillarySelector:
    def __init__(self, offer_id: str, passengers: list[OfferPassenger], offer_price: Decimal) -> None:
        self.offer_id = offer_id
        self.passengers = passengers
        self.offer_price = offer_price
        self.step = Step.CHOOSING
        self._want_baggage = False
        self._seats: list[SelectedService] = []
        self._baggage: list[SelectedService] = []

    def _require(self, step: Step) -> None:
        if self.step != step:
            raise CheckoutError(f"Ancillary selection is at '{self.step.value}', expected '{step.value}'")

    def choose(self, want_seats: bool, want_baggage: bool) -> Step:
        self._require(Step.CHOOSING)
        self._want_baggage = want_baggage
        if want_seats:
            self.step = Step.SEATS
        elif want_baggage:
            self.step = Step.BAGGAGE
        else:
            self.step = Step.DONE
        return self.step

    def skip(self) -> Step:
        """Skip extras entirely from the choice screen."""
        self._require(Step.CHOOSING)
        self.step = Step.DONE
        return self.step

    def complete_seats(self, selection: SeatSelection | None) -> Step:
        """Finish the seat step; ``None`` means the seat map was closed or skipped."""
        self._require(Step.SEATS)
        self._seats = selection.to_services() if selection else []
        self.step = Step.BAGGAGE if self._want_baggage else Step.DONE
        return self.step

    def complete_baggage(self, selection: BaggageSelection | None) -> Step:
        self._require(Step.BAGGAGE)
        self._baggage = selection.to_services() if selection else []
        self.step = Step.DONE
        return self.step

    def result(self) -> AncillaryResult:
        self._require(Step.DONE)
        return AncillaryResult(verbose=[*self._seats, *self._baggage])

    def total(self) -> Decimal:
        return compute_grand_total(self.offer_price, [*self._seats, *self._baggage])

    def apply_to(self, cart: CartStore) -> AncillaryResult:
        """Write the selected services onto the offer's cart item."""
        result = self.result()
        cart.set_services_for_offer(self.offer_id, result.verbose)
        logger.info(
            "Offer %s: %d seats, %d bags selected",
            self.offer_id,
            len(self._seats),
            sum(s.quantity for s in self._baggage),
        )
        return result
