"""Duffel flights API client: offers, seat maps and order creation."""

import logging
from typing import Any

import requests

from core.errors import ErrorCode, SupplierError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def _error_message(response: requests.Response) -> str:
    try:
        errors = response.json().get("errors") or []
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if errors and errors[0].get("message"):
        return errors[0]["message"]
    return "Unknown error"


class DuffelClient:
    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.duffel.com",
        version: str = "v2",
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._version = version
        self._session = session or requests.Session()
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Duffel-Version": self._version,
            "Authorization": f"Bearer {self._access_token}",
        }

    def _request(
        self,
        method: str,
        path: str,
        failure_code: ErrorCode,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        if not self._access_token:
            raise SupplierError("DUFFEL_ACCESS_TOKEN not configured", code=ErrorCode.SUPPLIER_UNAVAILABLE)

        try:
            response = self._session.request(
                method,
                f"{self._base_url}{path}",
                headers=self._headers(),
                params=params,
                json=body,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise SupplierError(f"Duffel request failed: {e}", code=ErrorCode.SUPPLIER_UNAVAILABLE) from e

        if not response.ok:
            message = _error_message(response)
            logger.error("Duffel %s %s returned %d: %s", method, path, response.status_code, message)
            code = failure_code
            if response.status_code == 404:
                code = ErrorCode.OFFER_NOT_FOUND
            elif response.status_code == 422 and failure_code != ErrorCode.BOOKING_FAILED:
                code = ErrorCode.OFFER_UNAVAILABLE
            elif response.status_code >= 500:
                code = ErrorCode.SUPPLIER_UNAVAILABLE
            raise SupplierError(message, code=code, status=response.status_code)

        return response.json().get("data")

    def get_offer(self, offer_id: str, return_available_services: bool = False) -> dict[str, Any]:
        params = {"return_available_services": "true"} if return_available_services else None
        return self._request("GET", f"/air/offers/{offer_id}", ErrorCode.SUPPLIER_UNAVAILABLE, params=params)

    def get_seat_maps(self, offer_id: str) -> list[dict[str, Any]]:
        return self._request("GET", "/air/seat_maps", ErrorCode.SUPPLIER_UNAVAILABLE, params={"offer_id": offer_id}) or []

    def create_order(
        self,
        offer_id: str,
        passengers: list[dict[str, Any]],
        amount: str,
        currency: str,
        services: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Create an instant order paid from the Duffel balance."""
        data: dict[str, Any] = {
            "selected_offers": [offer_id],
            "passengers": passengers,
            "type": "instant",
            "payments": [{"type": "balance", "amount": amount, "currency": currency.upper()}],
        }
        if services:
            data["services"] = services

        try:
            return self._request("POST", "/air/orders", ErrorCode.BOOKING_FAILED, body={"data": data})
        except SupplierError as e:
            raise SupplierError(f"Duffel booking failed: {e.message}", code=ErrorCode.BOOKING_FAILED, status=e.status) from e
