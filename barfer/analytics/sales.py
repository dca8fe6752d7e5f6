"""
Sales reports: category sales, kg by month and delivery type by month.

All kg figures come from weight.estimate_weight_kg(), the same estimator the
client categorization uses.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime

from django.utils import timezone

from barfer.adapters import get_order_store
from barfer.analytics.deadline import Deadline, watch
from barfer.analytics.products import (
    CAT_SUBCATEGORIES,
    DOG_SUBCATEGORIES,
    OTHER_FAMILY,
    product_family,
    product_subcategory,
)
from barfer.analytics.rounding import round_half_up
from barfer.analytics.weight import estimate_weight_kg, option_quantity, order_weight_kg
from barfer.exceptions import AnalyticsError, BarferError, OrderStoreError
from barfer.models import OrderStatus, OrderType
from barfer.protocols.orders import OrderRecord, OrderStore

logger = logging.getLogger(__name__)

RETAIL = "retail"
SAME_DAY = "same_day"
WHOLESALE = "wholesale"


def stream_orders(
    store: OrderStore | None = None,
    deadline: Deadline | None = None,
    **filters,
) -> Iterator[OrderRecord]:
    """
    Stream orders from the configured store under a deadline.

    Raises:
        AnalyticsError: ANALYTICS_UNAVAILABLE if the store fails,
            ANALYTICS_TIMEOUT if the deadline expires
    """
    deadline = deadline if deadline is not None else Deadline.from_settings()
    store = store or get_order_store()
    try:
        yield from watch(store.iter_orders(deadline=deadline, **filters), deadline)
    except OrderStoreError as exc:
        logger.exception("Sales report failed: order store error")
        raise AnalyticsError("ANALYTICS_UNAVAILABLE") from exc


def month_key(moment: datetime) -> str:
    """``YYYY-MM`` of a timestamp, in the current time zone."""
    if timezone.is_aware(moment):
        moment = timezone.localtime(moment)
    return f"{moment.year}-{moment.month:02d}"


def order_channel(record: OrderRecord) -> str:
    """Wholesale first, then same-day delivery, otherwise retail."""
    if record.order_type == OrderType.WHOLESALE:
        return WHOLESALE
    if record.same_day_delivery:
        return SAME_DAY
    return RETAIL


def _options(record: OrderRecord):
    """(product name, option) pairs of an order, skipping malformed entries."""
    for item in record.items or []:
        if not isinstance(item, dict):
            continue
        name = item.get("name") or ""
        for option in item.get("options") or []:
            if isinstance(option, dict):
                yield name, option


def _price(option: dict) -> float:
    try:
        return float(option.get("price") or 0)
    except (TypeError, ValueError):
        return 0.0


# ======================================================================
# Category sales
# ======================================================================


@dataclass
class CategorySales:
    category_name: str
    quantity: float = 0
    revenue: float = 0.0
    lines: int = 0
    unique_products: int = 0
    avg_price: int = 0
    status_filter: str = "all"
    total_weight: float | None = None


@dataclass
class _FamilyTotals:
    quantity: float = 0
    revenue: float = 0.0
    lines: int = 0
    products: set = field(default_factory=set)
    price_sum: float = 0.0
    weight: float = 0.0
    order_totals: float = 0.0


def category_sales(
    status: str = "all",
    limit: int = 10,
    start: datetime | None = None,
    end: datetime | None = None,
    deadline: Deadline | None = None,
    store: OrderStore | None = None,
) -> list[CategorySales]:
    """
    Units, revenue and kg per product family, best sellers first.

    Args:
        status: An order status, or "all"
        limit: Maximum number of families returned

    Families whose option prices are all zero report the summed totals of
    the orders that contain them as revenue.
    """
    if status != "all" and status not in OrderStatus.values:
        raise BarferError("INVALID_QUERY", message=f"Unknown order status '{status}'")
    if limit < 1:
        raise BarferError("INVALID_QUERY", message="limit must be >= 1", limit=limit)

    statuses = None if status == "all" else [status]
    families: dict[str, _FamilyTotals] = {}

    for record in stream_orders(store, deadline, statuses=statuses, start=start, end=end):
        seen = set()
        for name, option in _options(record):
            family = product_family(name)
            if family == OTHER_FAMILY:
                continue

            totals = families.setdefault(family, _FamilyTotals())
            quantity = option_quantity(option)
            price = _price(option)
            totals.quantity += quantity
            totals.revenue += quantity * price
            totals.lines += 1
            totals.products.add(name)
            totals.price_sum += price
            weight = estimate_weight_kg(name, option.get("name") or "")
            if weight is not None:
                totals.weight += weight * quantity

            if family not in seen:
                seen.add(family)
                totals.order_totals += record.total

    results = [
        CategorySales(
            category_name=family,
            quantity=totals.quantity,
            revenue=totals.revenue if totals.revenue else totals.order_totals,
            lines=totals.lines,
            unique_products=len(totals.products),
            avg_price=round_half_up(totals.price_sum / totals.lines),
            status_filter=status,
            total_weight=totals.weight if totals.weight > 0 else None,
        )
        for family, totals in families.items()
    ]
    results.sort(key=lambda r: r.category_name)
    results.sort(key=lambda r: r.quantity, reverse=True)
    return results[:limit]


# ======================================================================
# Kg by month
# ======================================================================


@dataclass
class MonthQuantities:
    """Kg sold in one month and channel, per subcategory."""

    month: str
    pollo: float = 0.0
    vaca: float = 0.0
    cerdo: float = 0.0
    cordero: float = 0.0
    big_dog_pollo: float = 0.0
    big_dog_vaca: float = 0.0
    total_dog: float = 0.0
    gato_pollo: float = 0.0
    gato_vaca: float = 0.0
    gato_cordero: float = 0.0
    total_cat: float = 0.0
    huesos_carnosos: float = 0.0
    total: float = 0.0

    def add(self, subcategory: str, kg: float) -> None:
        if subcategory in self.__dataclass_fields__ and subcategory not in ("month", "total"):
            setattr(self, subcategory, getattr(self, subcategory) + kg)
        self.total += kg

    def finish(self) -> "MonthQuantities":
        self.total_dog = sum(getattr(self, s) for s in DOG_SUBCATEGORIES)
        self.total_cat = sum(getattr(self, s) for s in CAT_SUBCATEGORIES)
        for name in self.__dataclass_fields__:
            if name != "month":
                setattr(self, name, round_half_up(getattr(self, name), 2))
        return self


@dataclass
class QuantityStats:
    retail: list[MonthQuantities] = field(default_factory=list)
    same_day: list[MonthQuantities] = field(default_factory=list)
    wholesale: list[MonthQuantities] = field(default_factory=list)


def quantity_stats_by_month(
    start: datetime | None = None,
    end: datetime | None = None,
    deadline: Deadline | None = None,
    store: OrderStore | None = None,
) -> QuantityStats:
    """
    Kg per subcategory, month and channel.

    Every month with sales appears in the three channel lists, oldest first.
    """
    months: dict[str, dict[str, MonthQuantities]] = {}

    for record in stream_orders(store, deadline, start=start, end=end):
        month = month_key(record.created_at)
        if month not in months:
            months[month] = {c: MonthQuantities(month=month) for c in (RETAIL, SAME_DAY, WHOLESALE)}
        bucket = months[month][order_channel(record)]

        for name, option in _options(record):
            option_name = option.get("name") or ""
            weight = estimate_weight_kg(name, option_name)
            if weight is None:
                continue
            bucket.add(product_subcategory(name, option_name), weight * option_quantity(option))

    stats = QuantityStats()
    for month in sorted(months):
        stats.retail.append(months[month][RETAIL].finish())
        stats.same_day.append(months[month][SAME_DAY].finish())
        stats.wholesale.append(months[month][WHOLESALE].finish())
    return stats


# ======================================================================
# Delivery type by month
# ======================================================================


@dataclass
class DeliveryTypeStats:
    month: str
    same_day_orders: int = 0
    normal_orders: int = 0
    wholesale_orders: int = 0
    same_day_revenue: float = 0.0
    normal_revenue: float = 0.0
    wholesale_revenue: float = 0.0
    same_day_weight: float = 0.0
    normal_weight: float = 0.0
    wholesale_weight: float = 0.0


_CHANNEL_PREFIX = {SAME_DAY: "same_day", RETAIL: "normal", WHOLESALE: "wholesale"}


def delivery_type_stats_by_month(
    start: datetime | None = None,
    end: datetime | None = None,
    deadline: Deadline | None = None,
    store: OrderStore | None = None,
) -> list[DeliveryTypeStats]:
    """Orders, revenue and kg per month for same-day, normal and wholesale orders."""
    months: dict[str, DeliveryTypeStats] = {}

    for record in stream_orders(store, deadline, start=start, end=end):
        month = month_key(record.created_at)
        stats = months.setdefault(month, DeliveryTypeStats(month=month))
        prefix = _CHANNEL_PREFIX[order_channel(record)]

        setattr(stats, f"{prefix}_orders", getattr(stats, f"{prefix}_orders") + 1)
        setattr(stats, f"{prefix}_revenue", getattr(stats, f"{prefix}_revenue") + record.total)
        setattr(stats, f"{prefix}_weight", getattr(stats, f"{prefix}_weight") + order_weight_kg(record.items))

    for stats in months.values():
        for prefix in _CHANNEL_PREFIX.values():
            name = f"{prefix}_weight"
            setattr(stats, name, round_half_up(getattr(stats, name), 2))

    return [months[m] for m in sorted(months)]
