"""
Business services for Event Escapes checkout.

- booking_status.py: DynamoDB booking status records keyed by checkout session
- checkout.py: Stripe Checkout Session creation
- offers.py: Duffel offer passenger and extras lookups
- webhook.py: Stripe webhook verification and order fulfilment
"""

__all__: list[str] = []
