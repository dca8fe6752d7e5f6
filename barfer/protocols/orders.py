"""Order store protocol for the analytics engine."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from barfer.analytics.deadline import Deadline


# Orders considered by client analytics
ANALYTICS_STATUSES = ("pending", "confirmed", "delivered", "cancelled")


@dataclass(frozen=True)
class OrderRecord:
    """Store-neutral view of a single order."""

    order_id: str
    created_at: datetime
    total: float
    status: str
    user_id: str = ""
    email: str = ""
    user: dict = field(default_factory=dict)
    address: dict = field(default_factory=dict)
    items: list = field(default_factory=list)  # empty when loaded without items
    payment_method: str = ""
    order_type: str = "retail"
    same_day_delivery: bool = False
    whatsapp_contacted_at: str | None = None


@runtime_checkable
class OrderStore(Protocol):
    """
    Protocol for reading orders and writing the contact marker.

    Implemented by adapters/django_orders.py and adapters/mongo_orders.py.

    Configuration in settings.py:
        BARFER = {
            "ORDER_STORE_BACKEND": "barfer.adapters.django_orders.DjangoOrderStore",
        }

    Adapters raise OrderStoreError when the underlying store fails.
    """

    def iter_orders(
        self,
        statuses: Iterable[str] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        include_items: bool = True,
        deadline: "Deadline | None" = None,
    ) -> Iterator[OrderRecord]:
        """
        Stream orders oldest first.

        Args:
            statuses: Only orders with these statuses (None = all)
            start: Inclusive lower bound on created_at
            end: Inclusive upper bound on created_at
            include_items: Skip loading line items when False
            deadline: Caller deadline; adapters stop early once it expires

        Returns:
            Iterator of OrderRecord
        """
        ...

    def contact_markers(self, emails: Iterable[str]) -> dict[str, str | None]:
        """
        Return the contact marker of each email's latest order.

        Emails with no orders are absent from the result.
        """
        ...

    def set_contact_marker(
        self,
        emails: Iterable[str],
        value: str | None,
        only_if: str | None = None,
    ) -> int:
        """
        Set (or clear, with None) the marker on every order of these emails.

        Emails match case-insensitively. With ``only_if``, only orders whose
        current marker equals it are touched.

        Returns:
            Number of orders modified
        """
        ...
