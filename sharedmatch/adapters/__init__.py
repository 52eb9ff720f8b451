"""Adapters for integrating SharedMatch with external services."""

from .pubg_api import PubgApiClient

__all__ = ["PubgApiClient"]
