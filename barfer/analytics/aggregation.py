"""
Client aggregation: order records -> one rollup per customer.

Records are consumed as a stream, so memory grows with the number of
customers, not with the number of orders.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from barfer.analytics import deadline as deadline_mod
from barfer.analytics.identity import customer_key, normalize_email
from barfer.analytics.weight import order_weight_kg
from barfer.protocols.orders import OrderRecord

logger = logging.getLogger(__name__)

# How many records between deadline checks
_CHECK_EVERY = 500

SECONDS_PER_DAY = 86400


def days_between(earlier: datetime, later: datetime) -> float:
    """Fractional days from ``earlier`` to ``later``."""
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


@dataclass
class CustomerAggregate:
    """Per-customer rollup of order history (never persisted)."""

    key: str
    email: str = ""
    user: dict = field(default_factory=dict)
    address: dict = field(default_factory=dict)
    total_orders: int = 0
    total_spent: float = 0.0
    first_order_at: datetime | None = None
    last_order_at: datetime | None = None
    order_dates: list[datetime] = field(default_factory=list)
    weight_history: list[tuple[datetime, float]] = field(default_factory=list)
    line_items: list[dict] = field(default_factory=list)
    whatsapp_contacted_at: str | None = None

    def add(self, record: OrderRecord, include_items: bool = True) -> None:
        created_at = record.created_at
        self.total_orders += 1
        self.total_spent += record.total
        self.order_dates.append(created_at)

        if self.first_order_at is None or created_at < self.first_order_at:
            self.first_order_at = created_at
        if self.last_order_at is None or created_at >= self.last_order_at:
            # Latest order wins for snapshots
            self.last_order_at = created_at
            self.user = record.user or self.user
            self.address = record.address or self.address
            self.email = normalize_email(record.email or (record.user or {}).get("email")) or self.email
            self.whatsapp_contacted_at = record.whatsapp_contacted_at

        if include_items:
            self.weight_history.append((created_at, order_weight_kg(record.items)))
            self.line_items.extend(i for i in record.items or [] if isinstance(i, dict))

    @property
    def total_weight(self) -> float:
        return sum(kg for _, kg in self.weight_history)

    def weight_since(self, since: datetime) -> float:
        """Kg bought in orders strictly after ``since``."""
        return sum(kg for created_at, kg in self.weight_history if created_at > since)

    @property
    def previous_order_at(self) -> datetime | None:
        """Date of the second most recent order."""
        if len(self.order_dates) < 2:
            return None
        return sorted(self.order_dates)[-2]

    @property
    def average_order_value(self) -> float:
        return self.total_spent / self.total_orders if self.total_orders else 0.0

    def days_since_first_order(self, now: datetime) -> float:
        return days_between(self.first_order_at, now)

    def days_since_last_order(self, now: datetime) -> float:
        return days_between(self.last_order_at, now)


def aggregate_orders(
    records: Iterable[OrderRecord],
    include_items: bool = True,
    deadline: "deadline_mod.Deadline | None" = None,
) -> list[CustomerAggregate]:
    """
    Group order records by customer key.

    Orders without user id and email are skipped (logged), never merged.

    Returns:
        CustomerAggregate list sorted by key
    """
    customers: dict[str, CustomerAggregate] = {}
    skipped = 0

    for record in deadline_mod.watch(records, deadline, every=_CHECK_EVERY):
        key = customer_key(record.user_id, record.email)
        if key is None:
            skipped += 1
            continue

        aggregate = customers.get(key)
        if aggregate is None:
            aggregate = customers[key] = CustomerAggregate(key=key)
        aggregate.add(record, include_items=include_items)

    if skipped:
        logger.info("Skipped %s orders without customer identity", skipped)

    for aggregate in customers.values():
        aggregate.order_dates.sort()

    return [customers[key] for key in sorted(customers)]
