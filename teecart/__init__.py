"""Booking cart, package eligibility and checkout for the golf tee time storefront."""

__version__ = "0.1.0"
