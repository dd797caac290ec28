"""API Gateway proxy event parsing and JSON responses for the HTTP handlers."""

import base64
import json
from typing import Any

from core.config import get_config
from core.errors import CheckoutError, ErrorCode, ValidationError

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.UNSUPPORTED_CURRENCY: 400,
    ErrorCode.SIGNATURE_INVALID: 400,
    ErrorCode.OFFER_NOT_FOUND: 404,
    ErrorCode.OFFER_UNAVAILABLE: 422,
    ErrorCode.SUPPLIER_UNAVAILABLE: 502,
    ErrorCode.PAYMENT_SESSION_FAILED: 502,
    ErrorCode.TIMEOUT: 504,
}


def raw_body(event: dict[str, Any]) -> str:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body).decode("utf-8")
    return body


def parse_body(event: dict[str, Any]) -> dict[str, Any]:
    try:
        parsed = json.loads(raw_body(event) or "{}")
    except ValueError as e:
        raise ValidationError("Request body is not valid JSON", code=ErrorCode.INVALID_REQUEST) from e
    if not isinstance(parsed, dict):
        raise ValidationError("Request body must be a JSON object", code=ErrorCode.INVALID_REQUEST)
    return parsed


def get_header(event: dict[str, Any], name: str) -> str | None:
    """Case-insensitive header lookup; API Gateway keeps the client's casing."""
    headers = event.get("headers") or {}
    wanted = name.lower()
    return next((value for key, value in headers.items() if key.lower() == wanted), None)


def is_preflight(event: dict[str, Any]) -> bool:
    method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method")
    return method == "OPTIONS"


def json_response(status_code: int, body: Any, headers: dict[str, str] | None = None) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {
            "Access-Control-Allow-Origin": get_config().allowed_origin,
            "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
            "Access-Control-Allow-Methods": "POST, OPTIONS",
            "Content-Type": "application/json",
            **(headers or {}),
        },
        "body": json.dumps(body),
    }


def error_response(err: CheckoutError) -> dict[str, Any]:
    # Validation messages describe the caller's own input; everything else gets the safe message.
    message = err.message if isinstance(err, ValidationError) else err.user_message
    return json_response(_STATUS_BY_CODE.get(err.code, 500), {"error": message, "code": err.code.value})
