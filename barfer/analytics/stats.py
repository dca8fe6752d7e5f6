"""Category statistics over classified customers."""

from collections.abc import Sequence
from dataclasses import dataclass

from barfer.analytics.classification import (
    BehaviorCategory,
    ClassifiedCustomer,
    SpendingCategory,
)
from barfer.analytics.rounding import round_half_up


@dataclass(frozen=True)
class CategoryStat:
    category: str
    count: int
    total_spent: float
    average_spending: int
    percentage: int

    def as_dict(self) -> dict:
        return {
            "category": self.category,
            "count": self.count,
            "total_spent": self.total_spent,
            "average_spending": self.average_spending,
            "percentage": self.percentage,
        }


def _reduce(customers: Sequence[ClassifiedCustomer], category_type: str, categories) -> list[CategoryStat]:
    population = len(customers)
    counts: dict[str, int] = {}
    totals: dict[str, float] = {}
    for customer in customers:
        category = customer.category(category_type)
        counts[category] = counts.get(category, 0) + 1
        totals[category] = totals.get(category, 0.0) + customer.total_spent

    return [
        CategoryStat(
            category=category.value,
            count=counts[category],
            total_spent=totals[category],
            average_spending=round_half_up(totals[category] / counts[category]),
            percentage=round_half_up(counts[category] / population * 100),
        )
        for category in categories
        if counts.get(category)
    ]


def reduce_category_stats(
    customers: Sequence[ClassifiedCustomer],
) -> tuple[list[CategoryStat], list[CategoryStat]]:
    """
    Count, sum and share of each category.

    Returns:
        (behavior_stats, spending_stats), each in canonical category order and
        only with categories that have members. Both empty for no customers.
    """
    if not customers:
        return [], []
    return (
        _reduce(customers, "behavior", BehaviorCategory),
        _reduce(customers, "spending", SpendingCategory),
    )
