"""Shared test fixtures for Event Escapes checkout."""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (DynamoDB Local doesn't need it)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _fresh_config():
    from core.clients import get_duffel_client, get_dynamo_client, get_stripe
    from core.config import _reset_config

    _reset_config()
    get_dynamo_client.cache_clear()
    get_duffel_client.cache_clear()
    get_stripe.cache_clear()
    yield
    _reset_config()


@pytest.fixture
def offer():
    """A trimmed Duffel offer for SYD -> MEL with one adult."""
    return {
        "id": "off_123",
        "total_amount": "500.00",
        "total_currency": "AUD",
        "expires_at": "2026-11-01T10:00:00Z",
        "owner": {"name": "Qantas"},
        "passengers": [{"id": "pas_1", "type": "adult", "given_name": None, "family_name": None}],
        "slices": [
            {
                "origin": {"iata_code": "SYD"},
                "destination": {"iata_code": "MEL"},
                "segments": [
                    {
                        "id": "seg_1",
                        "departing_at": "2026-11-02T08:00:00",
                        "arriving_at": "2026-11-02T09:35:00",
                    }
                ],
            }
        ],
    }


@pytest.fixture
def seat_maps():
    """One segment, one row: 12A and 12B sold to both passengers, 12C unavailable."""

    def seat(designator, price):
        return {
            "type": "seat",
            "designator": designator,
            "available_services": [
                {"id": f"ase_{designator}_{pid}", "passenger_id": pid, "total_amount": price, "total_currency": "AUD"}
                for pid in ("pas_1", "pas_2")
            ],
        }

    return [
        {
            "id": "sea_1",
            "segment_id": "seg_1",
            "cabins": [
                {
                    "cabin_class": "economy",
                    "rows": [
                        {
                            "sections": [
                                {
                                    "elements": [
                                        seat("12A", "25.00"),
                                        seat("12B", "20.00"),
                                        {"type": "seat", "designator": "12C", "available_services": []},
                                    ]
                                }
                            ]
                        }
                    ],
                }
            ],
        }
    ]


@pytest.fixture
def baggage_options():
    return [
        {
            "id": "ase_bag_1",
            "type": "checked",
            "amount": "40.00",
            "currency": "AUD",
            "maximum_quantity": 2,
            "passenger_id": "pas_1",
            "passenger_ids": ["pas_1"],
            "segment_ids": ["seg_1"],
        }
    ]


@pytest.fixture
def passenger_form():
    return {
        "id": "pas_1",
        "type": "adult",
        "title": "Ms",
        "gender": "Female",
        "given_name": "Amelia",
        "family_name": "Earhart",
        "born_on": "24/07/1987",
        "email": "amelia@example.com",
        "phone_number": "+61412345678",
    }


# DynamoDB fixtures
@pytest.fixture
def dynamodb_client():
    """Provide a DynamoDB client for integration tests."""
    import boto3
    from core.config import get_config

    config = get_config()

    return boto3.client(
        "dynamodb",
        endpoint_url=config.dynamodb_endpoint or "http://localhost:8000",
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )


@pytest.fixture
def booking_status_table(dynamodb_client):
    """Provide the booking status table name, emptied after the test."""
    from core.config import get_config

    table_name = get_config().booking_status_table
    yield table_name

    # Cleanup: scan and delete all items created during test
    response = dynamodb_client.scan(TableName=table_name)
    for item in response.get("Items", []):
        dynamodb_client.delete_item(TableName=table_name, Key={"sessionId": item["sessionId"]})
