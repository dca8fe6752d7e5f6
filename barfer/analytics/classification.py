"""
Behavior and spending classification of customer aggregates.

Behavior (first match wins, order matters):
    recovered          >1 order, >120 days between the two latest, last <= 90 days ago
    new                single order, <= 7 days ago
    tracking           single order, 8-30 days ago
    lost               last order > 120 days ago
    possible-inactive  last order 91-120 days ago
    active             everything else

Spending (monthly kg):
    premium   > 15
    standard  > 5
    basic     otherwise
"""

import calendar
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from django.db import models
from django.utils.translation import gettext_lazy as _

from barfer.analytics.aggregation import CustomerAggregate
from barfer.analytics.rounding import round_half_up


class BehaviorCategory(models.TextChoices):
    NEW = "new", _("Nuevo")
    TRACKING = "tracking", _("En seguimiento")
    ACTIVE = "active", _("Activo")
    POSSIBLE_INACTIVE = "possible-inactive", _("Posible inactivo")
    LOST = "lost", _("Perdido")
    RECOVERED = "recovered", _("Recuperado")


class SpendingCategory(models.TextChoices):
    PREMIUM = "premium", _("Premium (A)")
    STANDARD = "standard", _("Standard (B)")
    BASIC = "basic", _("Basic (C)")


# Behavior thresholds (days)
NEW_MAX_DAYS = 7
TRACKING_MAX_DAYS = 30
ACTIVE_MAX_DAYS = 90
INACTIVE_MAX_DAYS = 120
RECOVERY_GAP_DAYS = 120

# Spending thresholds (kg per month)
PREMIUM_MIN_KG = 15
STANDARD_MIN_KG = 5

DAYS_PER_MONTH = 30


def classify_behavior(
    total_orders: int,
    days_since_first_order: float,
    days_since_last_order: float,
    last_order_at: datetime | None = None,
    previous_order_at: datetime | None = None,
) -> BehaviorCategory:
    """Assign exactly one behavior category."""
    if total_orders > 1 and last_order_at and previous_order_at:
        gap_days = (last_order_at - previous_order_at).days
        if gap_days > RECOVERY_GAP_DAYS and days_since_last_order <= ACTIVE_MAX_DAYS:
            return BehaviorCategory.RECOVERED

    if total_orders == 1:
        if days_since_first_order <= NEW_MAX_DAYS:
            return BehaviorCategory.NEW
        if days_since_first_order <= TRACKING_MAX_DAYS:
            return BehaviorCategory.TRACKING
        # Older single orders fall through to the inactivity rules

    if days_since_last_order > INACTIVE_MAX_DAYS:
        return BehaviorCategory.LOST
    if days_since_last_order > ACTIVE_MAX_DAYS:
        return BehaviorCategory.POSSIBLE_INACTIVE

    return BehaviorCategory.ACTIVE


def classify_spending(monthly_weight: float) -> SpendingCategory:
    """Assign exactly one spending tier from monthly kg."""
    if monthly_weight > PREMIUM_MIN_KG:
        return SpendingCategory.PREMIUM
    if monthly_weight > STANDARD_MIN_KG:
        return SpendingCategory.STANDARD
    return SpendingCategory.BASIC


def months_since(days: float) -> float:
    """Months elapsed, floored at 1 so young customers are not inflated."""
    return max(days / DAYS_PER_MONTH, 1)


def one_month_before(moment: datetime) -> datetime:
    """Same day and time one calendar month earlier (day clamped to month end)."""
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


# ======================================================================
# Monthly weight strategies
# ======================================================================


class WeightEstimationStrategy(Protocol):
    """How a customer's monthly kg is estimated."""

    name: str
    needs_line_items: bool

    def monthly_weight(self, aggregate: CustomerAggregate, now: datetime) -> float: ...


class LineItemWeightStrategy:
    """
    Precise: kg actually bought in the trailing month.

    Customers who bought nothing last month get their lifetime monthly
    average instead, otherwise steady buyers who skipped a month would all
    drop to basic.
    """

    name = "line_items"
    needs_line_items = True

    def monthly_weight(self, aggregate: CustomerAggregate, now: datetime) -> float:
        weight = aggregate.weight_since(one_month_before(now))
        if weight > 0:
            return weight
        return aggregate.total_weight / months_since(aggregate.days_since_first_order(now))


# Per-order kg assumed from lifetime spend (min total spent, kg per order)
SPEND_KG_TIERS = (
    (30000, 20),
    (15000, 12),
    (5000, 8),
)
DEFAULT_KG_PER_ORDER = 5


class SpendTierWeightStrategy:
    """Fast: kg per order guessed from total spend; no line items needed."""

    name = "spend_tiers"
    needs_line_items = False

    def __init__(self, tiers=SPEND_KG_TIERS, default_kg=DEFAULT_KG_PER_ORDER):
        self.tiers = tiers
        self.default_kg = default_kg

    def kg_per_order(self, total_spent: float) -> float:
        for min_spent, kg in self.tiers:
            if total_spent >= min_spent:
                return kg
        return self.default_kg

    def monthly_weight(self, aggregate: CustomerAggregate, now: datetime) -> float:
        total = aggregate.total_orders * self.kg_per_order(aggregate.total_spent)
        return total / months_since(aggregate.days_since_first_order(now))


LINE_ITEMS = LineItemWeightStrategy()
SPEND_TIERS = SpendTierWeightStrategy()

STRATEGIES = {
    LINE_ITEMS.name: LINE_ITEMS,
    SPEND_TIERS.name: SPEND_TIERS,
}


def get_strategy(strategy: "str | WeightEstimationStrategy") -> WeightEstimationStrategy:
    if isinstance(strategy, str):
        try:
            return STRATEGIES[strategy]
        except KeyError:
            from barfer.exceptions import BarferError

            raise BarferError(
                "INVALID_QUERY", message=f"Unknown weight strategy '{strategy}'"
            ) from None
    return strategy


# ======================================================================
# Classified customer
# ======================================================================


@dataclass
class ClassifiedCustomer:
    """Customer aggregate with its behavior and spending categories."""

    aggregate: CustomerAggregate
    behavior_category: BehaviorCategory
    spending_category: SpendingCategory
    monthly_weight: float
    monthly_spending: int
    days_since_first_order: int
    days_since_last_order: int

    @property
    def key(self) -> str:
        return self.aggregate.key

    @property
    def email(self) -> str:
        return self.aggregate.email

    @property
    def user(self) -> dict:
        return self.aggregate.user

    @property
    def last_address(self) -> dict:
        return self.aggregate.address

    @property
    def total_orders(self) -> int:
        return self.aggregate.total_orders

    @property
    def total_spent(self) -> float:
        return self.aggregate.total_spent

    @property
    def total_weight(self) -> float:
        return self.aggregate.total_weight

    @property
    def first_order_at(self) -> datetime:
        return self.aggregate.first_order_at

    @property
    def last_order_at(self) -> datetime:
        return self.aggregate.last_order_at

    @property
    def average_order_value(self) -> int:
        return round_half_up(self.aggregate.average_order_value)

    @property
    def whatsapp_contacted_at(self) -> str | None:
        return self.aggregate.whatsapp_contacted_at

    def is_hidden(self, hidden_marker: str) -> bool:
        return self.aggregate.whatsapp_contacted_at == hidden_marker

    def category(self, category_type: str) -> str:
        if category_type == "behavior":
            return self.behavior_category
        return self.spending_category


def classify(
    aggregate: CustomerAggregate,
    now: datetime,
    strategy: WeightEstimationStrategy = LINE_ITEMS,
) -> ClassifiedCustomer:
    """Run both classifiers over one aggregate."""
    days_first = aggregate.days_since_first_order(now)
    days_last = aggregate.days_since_last_order(now)

    behavior = classify_behavior(
        aggregate.total_orders,
        days_first,
        days_last,
        last_order_at=aggregate.last_order_at,
        previous_order_at=aggregate.previous_order_at,
    )
    monthly_weight = strategy.monthly_weight(aggregate, now)

    return ClassifiedCustomer(
        aggregate=aggregate,
        behavior_category=behavior,
        spending_category=classify_spending(monthly_weight),
        monthly_weight=monthly_weight,
        monthly_spending=round_half_up(aggregate.total_spent / months_since(days_first)),
        days_since_first_order=round_half_up(days_first),
        days_since_last_order=round_half_up(days_last),
    )
