"""
Storefront services: cart, checkout validation, order lifecycle,
sessions, and the geo / notification providers.
"""
