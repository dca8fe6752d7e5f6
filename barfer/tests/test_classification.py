"""Tests for behavior and spending classification."""

from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from barfer.analytics.aggregation import CustomerAggregate
from barfer.analytics.classification import (
    LINE_ITEMS,
    SPEND_TIERS,
    BehaviorCategory,
    SpendingCategory,
    classify,
    classify_behavior,
    classify_spending,
    get_strategy,
    one_month_before,
)
from barfer.exceptions import BarferError
from barfer.protocols.orders import OrderRecord

NOW = datetime(2025, 6, 15, 15, 0, tzinfo=dt_timezone.utc)


def aggregate(*orders, key="ana@example.com"):
    """Aggregate from (days_ago, total, kg) tuples."""
    agg = CustomerAggregate(key=key)
    for n, (days_ago, total, kg) in enumerate(orders):
        items = [{"name": "Pollo", "options": [{"name": f"{kg}KG", "quantity": 1}]}] if kg else []
        agg.add(
            OrderRecord(
                order_id=str(n),
                created_at=NOW - timedelta(days=days_ago),
                total=float(total),
                status="confirmed",
                email=key,
                items=items,
            )
        )
    agg.order_dates.sort()
    return agg


# ═══════════════════════════════════════════════════════════════════
# Behavior
# ═══════════════════════════════════════════════════════════════════


class TestBehavior:
    """Tests for the behavior rule chain."""

    def test_single_order_3_days_is_new(self):
        assert classify(aggregate((3, 1000, 5)), NOW).behavior_category == BehaviorCategory.NEW

    def test_single_order_20_days_is_tracking(self):
        assert classify(aggregate((20, 1000, 5)), NOW).behavior_category == BehaviorCategory.TRACKING

    def test_single_order_95_days_is_possible_inactive(self):
        result = classify(aggregate((95, 1000, 5)), NOW)
        assert result.behavior_category == BehaviorCategory.POSSIBLE_INACTIVE

    def test_single_order_130_days_is_lost(self):
        assert classify(aggregate((130, 1000, 5)), NOW).behavior_category == BehaviorCategory.LOST

    def test_single_order_45_days_is_active(self):
        """Single orders past tracking but within 90 days fall to active."""
        assert classify(aggregate((45, 1000, 5)), NOW).behavior_category == BehaviorCategory.ACTIVE

    def test_recovered(self):
        """Orders at -200 and -50: gap 150 > 120 and last order 50 <= 90."""
        result = classify(aggregate((200, 1000, 5), (50, 1000, 5)), NOW)
        assert result.behavior_category == BehaviorCategory.RECOVERED

    def test_recovered_uses_two_latest_orders(self):
        """An old gap does not count once a recent order closes it."""
        result = classify(aggregate((400, 1000, 5), (200, 1000, 5), (60, 1000, 5), (10, 1000, 5)), NOW)
        assert result.behavior_category == BehaviorCategory.ACTIVE

    def test_big_gap_but_last_order_old_is_not_recovered(self):
        """The recovered guard keeps it out of lost/possible-inactive territory."""
        result = classify(aggregate((300, 1000, 5), (100, 1000, 5)), NOW)
        assert result.behavior_category == BehaviorCategory.POSSIBLE_INACTIVE

        result = classify(aggregate((400, 1000, 5), (150, 1000, 5)), NOW)
        assert result.behavior_category == BehaviorCategory.LOST

    def test_repeat_customer_recent_is_active(self):
        """Repeat customers never land in new or tracking."""
        result = classify(aggregate((5, 1000, 5), (2, 1000, 5)), NOW)
        assert result.behavior_category == BehaviorCategory.ACTIVE

    @pytest.mark.parametrize(
        "days,expected",
        [
            (7, BehaviorCategory.NEW),
            (7.01, BehaviorCategory.TRACKING),
            (30, BehaviorCategory.TRACKING),
            (90, BehaviorCategory.ACTIVE),
            (90.5, BehaviorCategory.POSSIBLE_INACTIVE),
            (120, BehaviorCategory.POSSIBLE_INACTIVE),
            (120.5, BehaviorCategory.LOST),
        ],
    )
    def test_thresholds(self, days, expected):
        assert classify_behavior(1, days, days) == expected

    def test_recovered_gap_counts_whole_days(self):
        last = NOW - timedelta(days=10)
        previous = last - timedelta(days=120, hours=23)
        assert classify_behavior(2, 131, 10, last, previous) == BehaviorCategory.ACTIVE

        previous = last - timedelta(days=121)
        assert classify_behavior(2, 131, 10, last, previous) == BehaviorCategory.RECOVERED

    def test_totality(self):
        """Every combination lands in exactly one category."""
        values = set(BehaviorCategory.values)
        for orders in (1, 2, 5):
            for days_last in range(0, 400, 7):
                for gap in (0, 100, 150):
                    last = NOW - timedelta(days=days_last)
                    previous = last - timedelta(days=gap) if orders > 1 else None
                    days_first = days_last + gap
                    result = classify_behavior(orders, days_first, days_last, last, previous)
                    assert result in values


# ═══════════════════════════════════════════════════════════════════
# Spending
# ═══════════════════════════════════════════════════════════════════


class TestSpending:
    """Tests for spending tiers and weight strategies."""

    @pytest.mark.parametrize(
        "kg,expected",
        [
            (15.1, SpendingCategory.PREMIUM),
            (15, SpendingCategory.STANDARD),
            (5.1, SpendingCategory.STANDARD),
            (5, SpendingCategory.BASIC),
            (0, SpendingCategory.BASIC),
        ],
    )
    def test_tiers(self, kg, expected):
        assert classify_spending(kg) == expected

    def test_last_month_weight(self):
        """20 kg bought last month is premium."""
        result = classify(aggregate((200, 5000, 5), (10, 5000, 20)), NOW, LINE_ITEMS)
        assert result.monthly_weight == 20
        assert result.spending_category == SpendingCategory.PREMIUM

    def test_lifetime_fallback_when_nothing_last_month(self):
        """Steady buyer who skipped last month keeps the lifetime average."""
        # 120 kg over 180 days = 6 months -> 20 kg/month
        orders = [(d, 5000, 20) for d in (180, 150, 120, 90, 60, 40)]
        result = classify(aggregate(*orders), NOW, LINE_ITEMS)
        assert result.monthly_weight == pytest.approx(20)
        assert result.spending_category == SpendingCategory.PREMIUM

    def test_lifetime_fallback_floors_at_one_month(self):
        """A customer younger than a month is not inflated."""
        result = classify(aggregate((35, 1000, 10)), NOW, LINE_ITEMS)
        assert result.monthly_weight == pytest.approx(10 / (35 / 30))

        result = classify(aggregate((3, 1000, 10)), NOW, LINE_ITEMS)
        assert result.monthly_weight == 10

    def test_spend_tiers(self):
        """30000+ spent -> 20 kg per order."""
        agg = aggregate((60, 15000, 0), (30, 15000, 0))
        result = classify(agg, NOW, SPEND_TIERS)
        # 2 orders * 20 kg / (60 / 30) months
        assert result.monthly_weight == pytest.approx(20)
        assert result.spending_category == SpendingCategory.PREMIUM

    @pytest.mark.parametrize(
        "spent,kg",
        [(30000, 20), (29999, 12), (15000, 12), (5000, 8), (4999, 5), (0, 5)],
    )
    def test_spend_tier_table(self, spent, kg):
        assert SPEND_TIERS.kg_per_order(spent) == kg

    def test_strategies_can_disagree(self):
        """Big spender buying supplements: precise says basic, fast says premium."""
        agg = aggregate((10, 40000, 0))
        assert classify(agg, NOW, LINE_ITEMS).spending_category == SpendingCategory.BASIC
        assert classify(agg, NOW, SPEND_TIERS).spending_category == SpendingCategory.PREMIUM

    def test_strategy_by_name(self):
        assert get_strategy("line_items") is LINE_ITEMS
        assert get_strategy("spend_tiers") is SPEND_TIERS
        assert get_strategy(SPEND_TIERS) is SPEND_TIERS

    def test_unknown_strategy(self):
        with pytest.raises(BarferError) as exc:
            get_strategy("guess")
        assert exc.value.code == "INVALID_QUERY"


class TestDerivedFields:
    """Tests for rounded derived values."""

    def test_rounding(self):
        result = classify(aggregate((60.5, 1000, 5), (10, 2001, 5)), NOW)
        assert result.days_since_first_order == 61
        assert result.days_since_last_order == 10
        assert result.average_order_value == 1501
        # 3001 / (60.5 / 30)
        assert result.monthly_spending == 1488

    def test_one_month_before_clamps_day(self):
        moment = datetime(2025, 3, 31, 10, 0, tzinfo=dt_timezone.utc)
        assert one_month_before(moment) == datetime(2025, 2, 28, 10, 0, tzinfo=dt_timezone.utc)

    def test_one_month_before_january(self):
        moment = datetime(2025, 1, 15, tzinfo=dt_timezone.utc)
        assert one_month_before(moment) == datetime(2024, 12, 15, tzinfo=dt_timezone.utc)
