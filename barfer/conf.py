"""
Barfer configuration.

Usage in settings.py:
    BARFER = {
        "ORDER_STORE_BACKEND": "barfer.adapters.mongo_orders.MongoOrderStore",
        "MONGO_URI": "mongodb://localhost:27017",
        "MONGO_DATABASE": "barfer",
        "ANALYTICS_TIMEOUT_SECONDS": 30,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class BarferSettings:
    """Barfer configuration settings."""

    # Where orders are read from (dotted path to an OrderStore class)
    ORDER_STORE_BACKEND: str = "barfer.adapters.django_orders.DjangoOrderStore"

    # Default deadline for analytics queries (None = no deadline)
    ANALYTICS_TIMEOUT_SECONDS: float | None = None

    # Marker value that hides a client from contact lists
    HIDDEN_MARKER: str = "hidden"

    DEFAULT_PAGE_SIZE: int = 50

    # MongoOrderStore
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DATABASE: str = "barfer"
    MONGO_ORDERS_COLLECTION: str = "orders"


def get_barfer_settings() -> BarferSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "BARFER", {})
    return BarferSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_barfer_settings(), name)


barfer_settings = _LazySettings()
