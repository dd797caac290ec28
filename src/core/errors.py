"""
Custom exceptions and error handling for Event Escapes checkout.

Defines application-specific exceptions with error codes for consistent
error handling across Lambda functions and storefront clients.

Usage:
    from core.errors import SupplierError, ErrorCode

    raise SupplierError("Offer has expired", code=ErrorCode.OFFER_NOT_FOUND)
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Input errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNSUPPORTED_CURRENCY = "UNSUPPORTED_CURRENCY"

    # Supplier errors
    OFFER_NOT_FOUND = "OFFER_NOT_FOUND"
    OFFER_UNAVAILABLE = "OFFER_UNAVAILABLE"
    SUPPLIER_UNAVAILABLE = "SUPPLIER_UNAVAILABLE"
    BOOKING_FAILED = "BOOKING_FAILED"

    # Payment errors
    PAYMENT_SESSION_FAILED = "PAYMENT_SESSION_FAILED"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"

    # Status errors
    STATUS_UNAVAILABLE = "STATUS_UNAVAILABLE"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TIMEOUT = "TIMEOUT"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Some of your details are missing or invalid. Please check and try again.",
    ErrorCode.INVALID_REQUEST: "Invalid request format. Please try again.",
    ErrorCode.UNSUPPORTED_CURRENCY: "This currency is not supported for payment.",
    ErrorCode.OFFER_NOT_FOUND: "This flight offer was not found or has expired. Please search again.",
    ErrorCode.OFFER_UNAVAILABLE: "This flight offer is no longer available. Please search again.",
    ErrorCode.SUPPLIER_UNAVAILABLE: "The airline system is temporarily unavailable. Please try again.",
    ErrorCode.BOOKING_FAILED: "Your booking could not be completed. Any payment taken will be refunded automatically.",
    ErrorCode.PAYMENT_SESSION_FAILED: "We couldn't start the payment. Nothing has been charged, please try again.",
    ErrorCode.SIGNATURE_INVALID: "Webhook signature verification failed.",
    ErrorCode.STATUS_UNAVAILABLE: "We couldn't check your booking status. Please try again.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again.",
    ErrorCode.TIMEOUT: "The request timed out. Please try again.",
}


class CheckoutError(Exception):
    """Base exception for all checkout errors."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        self.message = message
        self.code = code
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])


class ValidationError(CheckoutError):
    """Input validation failed before any network call."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR):
        super().__init__(message, code)


class SupplierError(CheckoutError):
    """Duffel request failed or returned an error."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.SUPPLIER_UNAVAILABLE, status: int | None = None):
        self.status = status
        super().__init__(message, code)


class PaymentError(CheckoutError):
    """Stripe session creation failed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.PAYMENT_SESSION_FAILED):
        super().__init__(message, code)


class WebhookVerificationError(CheckoutError):
    """Webhook signature missing or invalid."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.SIGNATURE_INVALID):
        super().__init__(message, code)


class StatusLookupError(CheckoutError):
    """Booking status could not be read."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.STATUS_UNAVAILABLE):
        super().__init__(message, code)


class ApiError(CheckoutError):
    """A storefront call to a checkout function returned an error body.

    The message was written by the function for the traveller, so it is shown as-is.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR, status: int | None = None):
        self.status = status
        super().__init__(message, code)

    @property
    def user_message(self) -> str:
        return self.message
