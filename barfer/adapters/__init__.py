"""OrderStore adapters and backend resolution."""

from django.utils.module_loading import import_string

from barfer.conf import barfer_settings
from barfer.exceptions import BarferError
from barfer.protocols.orders import OrderStore


def get_order_store() -> OrderStore:
    """Instantiate the configured BARFER["ORDER_STORE_BACKEND"]."""
    backend_path = barfer_settings.ORDER_STORE_BACKEND
    if not backend_path:
        raise BarferError("ORDER_STORE_NOT_CONFIGURED")
    try:
        backend_class = import_string(backend_path)
    except ImportError as exc:
        raise BarferError(
            "ORDER_STORE_NOT_CONFIGURED",
            message=f"Cannot import order store '{backend_path}'",
            backend=backend_path,
        ) from exc
    return backend_class()
