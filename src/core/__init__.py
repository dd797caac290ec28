"""
Core business logic package for Event Escapes checkout.

All business logic, data access, and service integrations live here.
Lambda handlers in src/handlers/ are thin wrappers that call into core/;
the storefront/ package is the client side of the checkout flow.
"""

__all__: list[str] = []
