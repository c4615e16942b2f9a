"""API Package - HTTP transport and remote catalogs (Modrinth, Hangar)"""

from .client import HttpClient
from .handlers import (
    HangarAPI,
    ModrinthAPI,
    ProviderClient,
    get_provider_client,
)

__all__ = [
    "HttpClient",
    "HangarAPI",
    "ModrinthAPI",
    "ProviderClient",
    "get_provider_client",
]
