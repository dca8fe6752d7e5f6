"""Django ORM OrderStore adapter (default)."""

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime

from django.db import DatabaseError

from barfer.analytics.identity import normalize_email
from barfer.exceptions import OrderStoreError
from barfer.models import Order
from barfer.protocols.orders import OrderRecord

logger = logging.getLogger(__name__)

_FIELDS = (
    "pk",
    "created_at",
    "total",
    "status",
    "user_id",
    "email",
    "user",
    "address",
    "payment_method",
    "order_type",
    "delivery_area",
    "whatsapp_contacted_at",
)


class DjangoOrderStore:
    """
    OrderStore backed by the barfer Order model.

    Configuration in settings.py (default):
        BARFER = {
            "ORDER_STORE_BACKEND": "barfer.adapters.django_orders.DjangoOrderStore",
        }
    """

    chunk_size = 2000

    def iter_orders(
        self,
        statuses: Iterable[str] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        include_items: bool = True,
        deadline=None,
    ) -> Iterator[OrderRecord]:
        qs = Order.objects.order_by("created_at", "pk")
        if statuses is not None:
            qs = qs.filter(status__in=list(statuses))
        if start is not None:
            qs = qs.filter(created_at__gte=start)
        if end is not None:
            qs = qs.filter(created_at__lte=end)

        fields = _FIELDS + ("items",) if include_items else _FIELDS
        rows = qs.values(*fields).iterator(chunk_size=self.chunk_size)

        try:
            for row in rows:
                yield self._to_record(row)
        except DatabaseError as exc:
            logger.exception("Order query failed")
            raise OrderStoreError(str(exc)) from exc

    def contact_markers(self, emails: Iterable[str]) -> dict[str, str | None]:
        emails = sorted({normalize_email(e) for e in emails if normalize_email(e)})
        if not emails:
            return {}

        markers: dict[str, str | None] = {}
        rows = (
            Order.objects.filter(email__in=emails)
            .order_by("email", "-created_at", "-pk")
            .values_list("email", "whatsapp_contacted_at")
        )
        try:
            for email, marker in rows:
                # First row per email is its latest order
                markers.setdefault(email, marker)
        except DatabaseError as exc:
            logger.exception("Contact marker lookup failed")
            raise OrderStoreError(str(exc)) from exc
        return markers

    def set_contact_marker(self, emails: Iterable[str], value: str | None, only_if: str | None = None) -> int:
        emails = sorted({normalize_email(e) for e in emails if normalize_email(e)})
        if not emails:
            return 0
        # Order.save() stores emails lower-cased
        qs = Order.objects.filter(email__in=emails)
        if only_if is not None:
            qs = qs.filter(whatsapp_contacted_at=only_if)
        try:
            return qs.update(whatsapp_contacted_at=value)
        except DatabaseError as exc:
            logger.exception("Contact marker update failed")
            raise OrderStoreError(str(exc)) from exc

    @staticmethod
    def _to_record(row: dict) -> OrderRecord:
        return OrderRecord(
            order_id=str(row["pk"]),
            created_at=row["created_at"],
            total=float(row["total"] or 0),
            status=row["status"],
            user_id=row["user_id"] or "",
            email=row["email"] or "",
            user=row["user"] or {},
            address=row["address"] or {},
            items=row.get("items") or [],
            payment_method=row["payment_method"] or "",
            order_type=row["order_type"] or "retail",
            same_day_delivery=bool((row["delivery_area"] or {}).get("sameDayDelivery")),
            whatsapp_contacted_at=row["whatsapp_contacted_at"],
        )
