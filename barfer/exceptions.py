"""Barfer exceptions."""


class BaseError(Exception):
    """
    Structured exception carrying a stable code, a human message and data.

    Subclasses declare ``_default_messages`` keyed by code; the message can
    be overridden per instance and any extra keyword arguments end up in
    ``data``.
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class BarferError(BaseError):
    """
    Structured exception for Barfer operations.

    Usage:
        try:
            page = ClientAnalyticsService.get_clients_paginated(query)
        except BarferError as e:
            if e.code == "INVALID_QUERY":
                return bad_request(e.message)
    """

    _default_messages = {
        "INVALID_QUERY": "Invalid analytics query",
        "INVALID_PERMISSION": "Malformed permission string",
        "ANALYTICS_UNAVAILABLE": "Could not load analytics",
        "ANALYTICS_TIMEOUT": "Analytics query timed out",
        "ORDER_STORE_ERROR": "Order store query failed",
        "ORDER_STORE_NOT_CONFIGURED": "Order store backend is not configured",
    }


class AnalyticsError(BarferError):
    """
    Failure of an analytics computation.

    ``retryable`` tells callers whether issuing the same request again may
    succeed (timeouts) or not (store failures surface as generic errors).
    """

    def __init__(self, code: str, message: str | None = None, retryable: bool = False, **data):
        self.retryable = retryable
        super().__init__(code, message, **data)

    def as_dict(self) -> dict:
        d = super().as_dict()
        d["retryable"] = self.retryable
        return d


class OrderStoreError(BarferError):
    """Raised by OrderStore adapters when the underlying store fails."""

    def __init__(self, message: str | None = None, **data):
        super().__init__("ORDER_STORE_ERROR", message, **data)
