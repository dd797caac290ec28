from os import environ

import boto3
from pydantic import BaseModel, ConfigDict

_cached_secrets: dict[str, str] = {}


def _resolve_secret(name: str) -> str:
    """Fetch a secret from Secrets Manager at runtime, with caching.

    ``name`` is the env var holding the value locally; ``<name>_ARN`` holds the
    Secrets Manager ARN when deployed.
    """
    if name in _cached_secrets:
        return _cached_secrets[name]

    # Local dev: use env var directly
    direct = environ.get(name, "")
    if direct:
        _cached_secrets[name] = direct
        return direct

    # Deployed: fetch from Secrets Manager by ARN
    arn = environ.get(f"{name}_ARN", "")
    if not arn:
        return ""

    client = boto3.client("secretsmanager")
    _cached_secrets[name] = client.get_secret_value(SecretId=arn)["SecretString"]
    return _cached_secrets[name]


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    dynamodb_endpoint: str | None = None
    booking_status_table: str
    booking_status_ttl_days: int
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    duffel_access_token: str = ""
    duffel_api_url: str
    duffel_version: str
    site_url: str
    allowed_origin: str
    environment: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config (testing only)."""
    global _cached_config
    _cached_config = None
    _cached_secrets.clear()


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        dynamodb_endpoint=environ.get("DYNAMODB_ENDPOINT"),
        booking_status_table=environ.get("BOOKING_STATUS_TABLE", "BookingStatus"),
        booking_status_ttl_days=int(environ.get("BOOKING_STATUS_TTL_DAYS", "30")),
        stripe_secret_key=_resolve_secret("STRIPE_SECRET_KEY"),
        stripe_webhook_secret=_resolve_secret("STRIPE_WEBHOOK_SECRET"),
        duffel_access_token=_resolve_secret("DUFFEL_ACCESS_TOKEN"),
        duffel_api_url=environ.get("DUFFEL_API_URL", "https://api.duffel.com"),
        duffel_version=environ.get("DUFFEL_VERSION", "v2"),
        site_url=environ.get("SITE_URL", "http://localhost:5173"),
        allowed_origin=environ.get("ALLOWED_ORIGIN", "*"),
        environment=environ.get("ENVIRONMENT", "local"),
    )
    return _cached_config
