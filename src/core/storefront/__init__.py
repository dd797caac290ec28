"""
Storefront side of the checkout flow.

Cart state, ancillary selection, checkout start and booking status polling,
talking to the checkout functions over HTTP. Nothing here renders UI beyond
plain-text outcome views.
"""

__all__: list[str] = []
