"""
HTTP entry point for generating repeated bookings.
"""

from .app import create_app

__all__ = ["create_app"]
