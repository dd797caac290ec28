from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.models.cart import SelectedService
from core.models.passenger import PassengerDetails
from core.money import is_known_currency

BookingState = Literal["processing", "confirmed", "failed"]


class BookingStatus(BaseModel):
    status: BookingState = "processing"
    booking_reference: str | None = None
    duffel_order_id: str | None = None
    error: str | None = None
    timestamp: str | None = None
    amount: str | None = None
    currency: str | None = None
    passengers_data: list[dict[str, Any]] | None = None
    services_data: list[dict[str, Any]] | None = None
    primary_email: str | None = None

    @model_validator(mode="after")
    def fields_match_status(self) -> "BookingStatus":
        if self.status == "confirmed":
            if not self.booking_reference or not self.duffel_order_id:
                raise ValueError("confirmed status requires booking_reference and duffel_order_id")
        elif self.booking_reference or self.duffel_order_id:
            raise ValueError("booking_reference and duffel_order_id are only set when confirmed")

        if self.status == "failed":
            if not self.error:
                raise ValueError("failed status requires an error")
        elif self.error:
            raise ValueError("error is only set when failed")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status in ("confirmed", "failed")

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    offer_id: str = Field(..., min_length=1)
    passengers: list[PassengerDetails] = Field(..., min_length=1)
    services: list[SelectedService] = []
    total_amount: Decimal = Field(..., gt=0)
    currency: str
    offer_data: dict[str, Any] | None = None
    correlation_id: str | None = None

    @field_validator("currency")
    @classmethod
    def known_currency(cls, value: str) -> str:
        if not is_known_currency(value):
            raise ValueError(f"unrecognised currency: {value}")
        return value.upper()


class CheckoutSession(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str
    url: str


class OfferPassenger(BaseModel):
    id: str
    type: str | None = None
    given_name: str | None = None
    family_name: str | None = None
