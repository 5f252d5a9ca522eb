"""API modules for the Veil client."""

from .base import BaseAPIClient
from .veil_api import VeilAPI
from .feeds import FeedsAPI

__all__ = ["BaseAPIClient", "VeilAPI", "FeedsAPI"]
