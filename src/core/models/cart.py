from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.money import format_amount, to_decimal

_WIRE = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SelectedService(BaseModel):
    model_config = _WIRE

    id: str = Field(..., min_length=1)
    type: Literal["seat", "baggage"]
    quantity: int = Field(default=1, ge=1)
    amount: str = "0.00"
    currency: str | None = None
    passenger_id: str | None = None
    segment_id: str | None = None
    designator: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def normalise_amount(cls, value: Any) -> str:
        return format_amount(to_decimal(value, default=Decimal("0")))

    @model_validator(mode="after")
    def one_seat_per_service(self) -> "SelectedService":
        if self.type == "seat" and self.quantity != 1:
            raise ValueError("seat services always have quantity 1")
        return self

    @property
    def unit_amount(self) -> Decimal:
        return Decimal(self.amount)

    def minimal(self) -> dict[str, Any]:
        """The {id, quantity} shape Duffel's order creation accepts."""
        return {"id": self.id, "quantity": self.quantity}


def compute_grand_total(base_amount: Decimal, services: list[SelectedService]) -> Decimal:
    """Flight price plus each seat plus each bag times its quantity, the amount charged."""
    seats = sum((s.unit_amount for s in services if s.type == "seat"), Decimal("0"))
    baggage = sum((s.unit_amount * s.quantity for s in services if s.type == "baggage"), Decimal("0"))
    return base_amount + seats + baggage


class CartItem(BaseModel):
    model_config = _WIRE

    offer_id: str = Field(..., min_length=1)
    offer: dict[str, Any]
    services: list[SelectedService] = []
    search_params: dict[str, Any] | None = None

    @model_validator(mode="after")
    def seats_are_unique(self) -> "CartItem":
        taken: set[tuple[str | None, str | None]] = set()
        seated: set[tuple[str | None, str | None]] = set()
        for service in self.services:
            if service.type != "seat":
                continue
            seat_key = (service.segment_id, service.designator)
            passenger_key = (service.segment_id, service.passenger_id)
            if service.designator and seat_key in taken:
                raise ValueError(f"seat {service.designator} is assigned twice")
            if service.passenger_id and passenger_key in seated:
                raise ValueError(f"passenger {service.passenger_id} has more than one seat on a segment")
            taken.add(seat_key)
            seated.add(passenger_key)
        return self

    @property
    def seats(self) -> list[SelectedService]:
        return [s for s in self.services if s.type == "seat"]

    @property
    def baggage(self) -> list[SelectedService]:
        return [s for s in self.services if s.type == "baggage"]

    @property
    def flight_amount(self) -> Decimal:
        return to_decimal(self.offer.get("total_amount"), default=Decimal("0"))

    @property
    def currency(self) -> str | None:
        return self.offer.get("total_currency")

    @property
    def grand_total(self) -> Decimal:
        return compute_grand_total(self.flight_amount, self.services)


class CartState(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[CartItem, ...] = ()

    def find(self, offer_id: str) -> CartItem | None:
        return next((item for item in self.items if item.offer_id == offer_id), None)
