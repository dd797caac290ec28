"""Booking status records in DynamoDB, keyed by Stripe checkout session id.

A record is claimed once (``processing``) before the supplier order is
attempted and then moved to a terminal state exactly once. Both writes are
conditional, so redelivered webhook events cannot create a second order or
overwrite an outcome.
"""

import logging
from datetime import datetime, timezone
from time import time
from typing import Any

import pydantic
from botocore.exceptions import ClientError

from core.errors import StatusLookupError
from core.models import BookingStatus

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BookingStatusStore:
    def __init__(self, dynamo_client: Any, table_name: str, ttl_days: int = 30) -> None:
        self._client = dynamo_client
        self._table = table_name
        self._ttl_seconds = ttl_days * 86400

    def _item(self, session_id: str, status: BookingStatus) -> dict[str, Any]:
        ttl = int(time()) + self._ttl_seconds
        return {
            "sessionId": {"S": session_id},
            "status": {"S": status.status},
            "record": {"S": status.model_dump_json(exclude_none=True)},
            "ttl": {"N": str(ttl)},
        }

    def claim(self, session_id: str) -> bool:
        """Create the ``processing`` record if none exists. False means someone already did."""
        try:
            self._client.put_item(
                TableName=self._table,
                Item=self._item(session_id, BookingStatus(status="processing", timestamp=utc_now())),
                ConditionExpression="attribute_not_exists(sessionId)",
            )
        except self._client.exceptions.ConditionalCheckFailedException:
            return False
        return True

    def record(self, session_id: str, status: BookingStatus) -> bool:
        """Move a claimed record to its terminal state. False if it was already terminal."""
        if not status.is_terminal:
            raise ValueError("only confirmed or failed outcomes can be recorded")
        try:
            self._client.put_item(
                TableName=self._table,
                Item=self._item(session_id, status),
                ConditionExpression="attribute_not_exists(sessionId) OR #status = :processing",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={":processing": {"S": "processing"}},
            )
        except self._client.exceptions.ConditionalCheckFailedException:
            logger.warning("Booking status for session %s is already final, not overwriting", session_id)
            return False
        return True

    def get(self, session_id: str) -> BookingStatus:
        """Current status; an absent record reads as ``processing``."""
        try:
            response = self._client.get_item(
                TableName=self._table,
                Key={"sessionId": {"S": session_id}},
                ConsistentRead=True,
            )
        except ClientError as e:
            raise StatusLookupError(f"Failed to read booking status: {e}") from e

        item = response.get("Item")
        if not item:
            return BookingStatus(status="processing")
        try:
            return BookingStatus.model_validate_json(item["record"]["S"])
        except (KeyError, pydantic.ValidationError) as e:
            raise StatusLookupError(f"Stored booking status for {session_id} is unreadable: {e}") from e
