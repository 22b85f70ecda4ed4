"""JSON API for folioadmin."""

from .app import create_app

__all__ = ["create_app"]
