"""
Order service.

REST API for users, products and orders with atomic order placement.
"""

__version__ = "1.0.0"
