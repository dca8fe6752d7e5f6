"""
Client analytics.

Usage:
    from barfer.analytics import ClientAnalyticsService, ClientQuery

    page = ClientAnalyticsService.get_clients_paginated(
        ClientQuery(category="lost", visibility="visible", page=2, page_size=10)
    )
"""


def __getattr__(name):
    if name in ("ClientAnalyticsService", "ClientQuery"):
        from barfer.analytics import service

        return getattr(service, name)
    if name in ("LINE_ITEMS", "SPEND_TIERS", "BehaviorCategory", "SpendingCategory"):
        from barfer.analytics import classification

        return getattr(classification, name)
    if name == "Deadline":
        from barfer.analytics.deadline import Deadline

        return Deadline
    if name == "estimate_weight_kg":
        from barfer.analytics.weight import estimate_weight_kg

        return estimate_weight_kg
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ClientAnalyticsService",
    "ClientQuery",
    "LINE_ITEMS",
    "SPEND_TIERS",
    "BehaviorCategory",
    "SpendingCategory",
    "Deadline",
    "estimate_weight_kg",
]
