"""
Monthly balance: order revenue by channel against expenses.

Channels (first match wins):
    express     payment_method == "bank-transfer"
    wholesale   order_type == "wholesale"
    retail      everything else

Expenses are split by kind (ordinary/extraordinary) and by brand
(barfer/slr); any other brand is booked as barfer.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from django.db import DatabaseError
from django.utils import timezone

from barfer.analytics.deadline import Deadline
from barfer.analytics.sales import month_key, stream_orders
from barfer.analytics.weight import order_weight_kg
from barfer.exceptions import AnalyticsError
from barfer.models import Expense, ExpenseBrand, ExpenseKind, OrderType
from barfer.protocols.orders import OrderRecord, OrderStore

logger = logging.getLogger(__name__)

EXPRESS_PAYMENT_METHOD = "bank-transfer"

# Default window: Jan 1 two years back through Dec 31 of the current year
DEFAULT_YEARS_BACK = 2


@dataclass
class _MonthTotals:
    revenue: dict = field(default_factory=lambda: {"express": 0.0, "wholesale": 0.0, "retail": 0.0})
    orders: dict = field(default_factory=lambda: {"express": 0, "wholesale": 0, "retail": 0})
    weight: float = 0.0


@dataclass
class _ExpenseTotals:
    ordinary_barfer: float = 0.0
    ordinary_slr: float = 0.0
    extraordinary_barfer: float = 0.0
    extraordinary_slr: float = 0.0

    @property
    def ordinary(self) -> float:
        return self.ordinary_barfer + self.ordinary_slr

    @property
    def extraordinary(self) -> float:
        return self.extraordinary_barfer + self.extraordinary_slr

    @property
    def total(self) -> float:
        return self.ordinary + self.extraordinary


@dataclass
class BalanceMonth:
    """One month of the balance sheet. Percentages are 0-100 of revenue or order count."""

    month: str

    retail_revenue: float
    retail_revenue_pct: float
    retail_orders: int
    retail_orders_pct: float

    wholesale_revenue: float
    wholesale_revenue_pct: float
    wholesale_orders: int
    wholesale_orders_pct: float

    express_revenue: float
    express_revenue_pct: float
    express_orders: int
    express_orders_pct: float

    total_revenue: float

    expenses: float
    expenses_pct: float
    ordinary_barfer: float
    ordinary_slr: float
    ordinary_total: float
    extraordinary_barfer: float
    extraordinary_slr: float
    extraordinary_total: float

    result_without_extraordinary: float
    result_with_extraordinary: float
    result_without_extraordinary_pct: float
    result_with_extraordinary_pct: float

    price_per_kg: float


def default_window(now: datetime | None = None) -> tuple[datetime, datetime]:
    now = now or timezone.now()
    if timezone.is_aware(now):
        now = timezone.localtime(now)
    start = now.replace(
        year=now.year - DEFAULT_YEARS_BACK, month=1, day=1, hour=0, minute=0, second=0, microsecond=0
    )
    end = now.replace(month=12, day=31, hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def order_channel(record: OrderRecord) -> str:
    if record.payment_method == EXPRESS_PAYMENT_METHOD:
        return "express"
    if record.order_type == OrderType.WHOLESALE:
        return "wholesale"
    return "retail"


def _pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def _expenses_by_month(start: datetime, end: datetime) -> dict[str, _ExpenseTotals]:
    months: dict[str, _ExpenseTotals] = {}
    rows = Expense.objects.filter(date__gte=start, date__lte=end).values_list("date", "amount", "kind", "brand")
    try:
        for date, amount, kind, brand in rows:
            if kind not in ExpenseKind.values:
                logger.debug("Skipping expense of unknown kind %r", kind)
                continue
            totals = months.setdefault(month_key(date), _ExpenseTotals())
            is_slr = (brand or "").lower() == ExpenseBrand.SLR.value
            attr = f"{kind}_{ExpenseBrand.SLR.value if is_slr else ExpenseBrand.BARFER.value}"
            setattr(totals, attr, getattr(totals, attr) + float(amount or 0))
    except DatabaseError as exc:
        logger.exception("Balance failed: expense query error")
        raise AnalyticsError("ANALYTICS_UNAVAILABLE") from exc
    return months


def balance_monthly(
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
    deadline: Deadline | None = None,
    store: OrderStore | None = None,
) -> list[BalanceMonth]:
    """
    Revenue vs. expenses for every month with orders, oldest first.

    Without ``start``/``end`` the window runs from Jan 1 two years back to
    Dec 31 of the current year, for both orders and expenses.
    """
    default_start, default_end = default_window(now)
    start = start or default_start
    end = end or default_end

    months: dict[str, _MonthTotals] = {}
    for record in stream_orders(store, deadline, start=start, end=end):
        totals = months.setdefault(month_key(record.created_at), _MonthTotals())
        channel = order_channel(record)
        totals.revenue[channel] += record.total
        totals.orders[channel] += 1
        totals.weight += order_weight_kg(record.items)

    expenses = _expenses_by_month(start, end)

    balance = []
    for month in sorted(months):
        totals = months[month]
        spent = expenses.get(month, _ExpenseTotals())
        revenue = sum(totals.revenue.values())
        orders = sum(totals.orders.values())
        without_extra = revenue - spent.ordinary
        with_extra = revenue - spent.total

        balance.append(
            BalanceMonth(
                month=month,
                retail_revenue=totals.revenue["retail"],
                retail_revenue_pct=_pct(totals.revenue["retail"], revenue),
                retail_orders=totals.orders["retail"],
                retail_orders_pct=_pct(totals.orders["retail"], orders),
                wholesale_revenue=totals.revenue["wholesale"],
                wholesale_revenue_pct=_pct(totals.revenue["wholesale"], revenue),
                wholesale_orders=totals.orders["wholesale"],
                wholesale_orders_pct=_pct(totals.orders["wholesale"], orders),
                express_revenue=totals.revenue["express"],
                express_revenue_pct=_pct(totals.revenue["express"], revenue),
                express_orders=totals.orders["express"],
                express_orders_pct=_pct(totals.orders["express"], orders),
                total_revenue=revenue,
                expenses=spent.total,
                expenses_pct=_pct(spent.total, revenue),
                ordinary_barfer=spent.ordinary_barfer,
                ordinary_slr=spent.ordinary_slr,
                ordinary_total=spent.ordinary,
                extraordinary_barfer=spent.extraordinary_barfer,
                extraordinary_slr=spent.extraordinary_slr,
                extraordinary_total=spent.extraordinary,
                result_without_extraordinary=without_extra,
                result_with_extraordinary=with_extra,
                result_without_extraordinary_pct=_pct(without_extra, revenue),
                result_with_extraordinary_pct=_pct(with_extra, revenue),
                price_per_kg=revenue / totals.weight if totals.weight > 0 else 0.0,
            )
        )
    return balance
