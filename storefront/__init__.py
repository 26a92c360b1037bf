"""
                DnD Catering Storefront

Single-restaurant online ordering service: menu browsing, cart
management, checkout with delivery address checks, and an order
status timeline.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
