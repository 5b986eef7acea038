"""Clients for the backend API and the AI content providers."""

from .api_client import ApiClient
from .assets import AssetService, SetSymbolStore
from .auth import AuthService, user_id_from_token
from .persistence import PersistenceService

__all__ = [
    "ApiClient",
    "AssetService",
    "AuthService",
    "PersistenceService",
    "SetSymbolStore",
    "user_id_from_token",
]
