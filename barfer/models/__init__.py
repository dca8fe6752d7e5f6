"""Barfer models.

- Order: storefront orders (JSON snapshots + denormalized identity columns)
- Expense: outflows read by the monthly balance
"""

from barfer.models.order import Order, OrderStatus, OrderType
from barfer.models.expense import Expense, ExpenseBrand, ExpenseKind

__all__ = [
    # Orders
    "Order",
    "OrderStatus",
    "OrderType",
    # Outflows
    "Expense",
    "ExpenseBrand",
    "ExpenseKind",
]
