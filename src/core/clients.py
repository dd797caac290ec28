"""Lazy-initialized clients, reused across warm Lambda invocations."""

from functools import lru_cache
from typing import Any

import boto3
import stripe
from botocore.config import Config as BotoConfig

from core.config import get_config
from core.duffel import DuffelClient


@lru_cache(maxsize=1)
def get_dynamo_client() -> Any:
    config = get_config()
    return boto3.client(
        "dynamodb",
        endpoint_url=config.dynamodb_endpoint,
        region_name=config.aws_region,
        config=BotoConfig(retries={"max_attempts": 10, "mode": "standard"}),
    )


@lru_cache(maxsize=1)
def get_duffel_client() -> DuffelClient:
    config = get_config()
    return DuffelClient(
        access_token=config.duffel_access_token,
        base_url=config.duffel_api_url,
        version=config.duffel_version,
    )


@lru_cache(maxsize=1)
def get_stripe() -> Any:
    """Return the stripe module with the secret key applied."""
    config = get_config()
    stripe.api_key = config.stripe_secret_key
    return stripe
