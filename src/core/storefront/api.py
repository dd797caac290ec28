"""HTTP client for the checkout functions."""

import logging
from typing import Any, TypeVar

import pydantic
import requests

from core.errors import ApiError, ErrorCode
from core.models import BookingStatus, CheckoutSession, OfferPassenger

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


class StorefrontApi:
    def __init__(self, base_url: str, session: requests.Session | None = None, timeout: float = 30) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def _post(self, function: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._session.post(f"{self._base_url}/{function}", json=body, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning("Call to %s failed: %s", function, e)
            raise ApiError("Network error. Please check your connection and try again.", code=ErrorCode.TIMEOUT) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get("error") if isinstance(data, dict) else None
            code = ErrorCode(data["code"]) if isinstance(data, dict) and data.get("code") in ErrorCode.__members__ else ErrorCode.INTERNAL_ERROR
            raise ApiError(message or f"Request failed ({response.status_code})", code=code, status=response.status_code)
        return data

    def _parse(self, model: type[ModelT], data: Any, function: str) -> ModelT:
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            logger.warning("Unexpected response from %s: %s", function, e)
            raise ApiError("Unexpected response from the server. Please try again.", code=ErrorCode.INTERNAL_ERROR) from e

    def get_offer_passengers(self, offer_id: str) -> list[OfferPassenger]:
        data = self._post("get-offer-lite", {"offerId": offer_id})
        return [self._parse(OfferPassenger, p, "get-offer-lite") for p in data.get("passengers") or []]

    def get_offer_services(self, offer_id: str) -> dict[str, Any]:
        return self._post("offer-services", {"offerId": offer_id})

    def create_checkout_session(self, payload: dict[str, Any]) -> CheckoutSession:
        return self._parse(CheckoutSession, self._post("create-checkout-session", payload), "create-checkout-session")

    def check_booking_status(self, session_id: str) -> BookingStatus:
        data = self._post("check-booking-status", {"sessionId": session_id})
        return self._parse(BookingStatus, data, "check-booking-status")
