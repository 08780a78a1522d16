"""Adapters package exports."""

from .alchemy_api import AlchemyAPIClient
from .base import NftTransport

__all__ = ["AlchemyAPIClient", "NftTransport"]
