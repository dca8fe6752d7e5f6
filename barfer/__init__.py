"""
Django Barfer - storefront orders and client analytics.

Usage:
    from barfer import ClientAnalyticsService, ContactService

    analytics = ClientAnalyticsService.get_client_categorization()
    stats = ClientAnalyticsService.get_client_categories_stats()
    ContactService.mark_contacted(["ana@example.com"])
"""


def __getattr__(name):
    if name == "ClientAnalyticsService":
        from barfer.analytics.service import ClientAnalyticsService

        return ClientAnalyticsService
    if name == "ContactService":
        from barfer.services.contact import ContactService

        return ContactService
    if name == "BarferError":
        from barfer.exceptions import BarferError

        return BarferError
    if name == "AnalyticsError":
        from barfer.exceptions import AnalyticsError

        return AnalyticsError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["ClientAnalyticsService", "ContactService", "BarferError", "AnalyticsError"]
__version__ = "0.3.0"
