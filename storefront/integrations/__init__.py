"""Integrations package - external systems used by the storefront."""

from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.session_store import (
    MemorySessionStore,
    RedisSessionStore,
    SessionStore,
)

__all__ = [
    "StorefrontApiClient",
    "MemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
]
