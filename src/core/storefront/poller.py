"""Booking status polling after the traveller returns from payment.

The webhook that places the order runs independently of the redirect, so
the status is polled with exponential backoff until it is final or the
attempt budget runs out. Running out is a ``timeout``, never a ``failed``.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs, urlparse

from core.errors import CheckoutError
from core.models import BookingStatus
from core.storefront.api import StorefrontApi

logger = logging.getLogger(__name__)

SEARCH_PATH = "/flights"


class PollState(str, Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMEOUT = "timeout"
    MISSING_SESSION = "missing_session"


@dataclass(frozen=True)
class PollPolicy:
    minimum_wait: float = 3.0
    initial_interval: float = 1.0
    max_interval: float = 10.0
    multiplier: float = 2.0
    max_attempts: int = 12

    def intervals(self) -> list[float]:
        """Sleep before each retry (one fewer than attempts)."""
        delays = []
        delay = self.initial_interval
        for _ in range(self.max_attempts - 1):
            delays.append(delay)
            delay = min(delay * self.multiplier, self.max_interval)
        return delays


@dataclass(frozen=True)
class PollOutcome:
    state: PollState
    session_id: str | None = None
    status: BookingStatus | None = None
    attempts: int = 0
    last_error: str | None = None


def extract_session_id(return_url: str) -> str | None:
    values = parse_qs(urlparse(return_url).query).get("session_id") or []
    return values[0] if values and values[0] else None


class BookingStatusPoller:
    def __init__(
        self,
        api: StorefrontApi,
        policy: PollPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        on_update: Callable[[BookingStatus | None], None] | None = None,
    ) -> None:
        self._api = api
        self._policy = policy or PollPolicy()
        self._sleep = sleep
        self._on_update = on_update

    def poll_return_url(self, return_url: str) -> PollOutcome:
        session_id = extract_session_id(return_url)
        if session_id is None:
            logger.warning("Returned from payment without a session id: %s", return_url)
            return PollOutcome(state=PollState.MISSING_SESSION)
        return self.poll(session_id)

    def poll(self, session_id: str) -> PollOutcome:
        self._sleep(self._policy.minimum_wait)

        delays = self._policy.intervals()
        last_error = None
        status = None
        for attempt in range(1, self._policy.max_attempts + 1):
            try:
                status = self._api.check_booking_status(session_id)
                last_error = None
            except CheckoutError as e:
                logger.warning("Status check %d for %s failed: %s", attempt, session_id, e.message)
                last_error = e.user_message
                status = None

            if self._on_update is not None:
                self._on_update(status)

            if status is not None and status.is_terminal:
                state = PollState.CONFIRMED if status.status == "confirmed" else PollState.FAILED
                return PollOutcome(state=state, session_id=session_id, status=status, attempts=attempt)

            if attempt <= len(delays):
                self._sleep(delays[attempt - 1])

        logger.warning("Booking for session %s still processing after %d checks", session_id, self._policy.max_attempts)
        return PollOutcome(
            state=PollState.TIMEOUT,
            session_id=session_id,
            status=status,
            attempts=self._policy.max_attempts,
            last_error=last_error,
        )


def _passenger_name(passenger: dict) -> str:
    name = " ".join(part for part in (passenger.get("given_name"), passenger.get("family_name")) if part)
    return name or passenger.get("id", "Passenger")


def _service_line(service: dict) -> str:
    if service.get("type") == "seat":
        return f"Seat {service.get('designator') or service.get('id')}"
    quantity = service.get("quantity") or 1
    return f"{quantity} x checked bag"


def render_outcome(outcome: PollOutcome) -> str:
    """Plain-text confirmation, failure, timeout or missing-session view."""
    if outcome.state == PollState.MISSING_SESSION:
        return "\n".join(
            [
                "Something went wrong",
                "No session ID found. We couldn't find your payment session.",
                "Return to Home: /",
            ]
        )

    if outcome.state == PollState.CONFIRMED and outcome.status is not None:
        status = outcome.status
        lines = [
            "Booking confirmed!",
            f"Booking reference: {status.booking_reference}",
            f"Order: {status.duffel_order_id}",
        ]
        if status.amount:
            lines.append(f"Total paid: {status.amount} {status.currency or ''}".rstrip())
        if status.passengers_data:
            lines.append("Passengers:")
            lines.extend(f"  - {_passenger_name(p)}" for p in status.passengers_data)
        if status.services_data:
            lines.append("Extras:")
            lines.extend(f"  - {_service_line(s)}" for s in status.services_data)
        if status.primary_email:
            lines.append(f"Your e-tickets will be sent to {status.primary_email}.")
        return "\n".join(lines)

    if outcome.state == PollState.FAILED:
        error = outcome.status.error if outcome.status else None
        lines = ["We're sorry, we couldn't complete your booking."]
        if error:
            lines.append(f"Reason: {error}")
        lines.extend(
            [
                "Your payment will be refunded automatically. Refunds appear within 5-10 business days.",
                f"Search for another flight: {SEARCH_PATH}",
            ]
        )
        return "\n".join(lines)

    return "\n".join(
        [
            "Your booking is still being processed.",
            "This is taking longer than usual. We'll email your confirmation as soon as it's ready.",
            f"Payment reference: {outcome.session_id}",
            "If your booking can't be completed, your payment will be refunded automatically.",
        ]
    )
