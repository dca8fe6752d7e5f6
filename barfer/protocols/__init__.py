"""Barfer protocols."""

from barfer.protocols.orders import (
    ANALYTICS_STATUSES,
    OrderRecord,
    OrderStore,
)

__all__ = [
    "ANALYTICS_STATUSES",
    "OrderRecord",
    "OrderStore",
]
