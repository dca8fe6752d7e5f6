"""Client analytics service.

Every call recomputes from the current order history; nothing is cached,
so two calls moments apart may disagree while orders keep arriving.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from barfer.adapters import get_order_store
from barfer.analytics.aggregation import aggregate_orders
from barfer.analytics.classification import (
    LINE_ITEMS,
    SPEND_TIERS,
    BehaviorCategory,
    ClassifiedCustomer,
    SpendingCategory,
    classify,
    get_strategy,
    months_since,
)
from barfer.analytics.deadline import Deadline
from barfer.analytics.rounding import round_half_up
from barfer.analytics.stats import CategoryStat, reduce_category_stats
from barfer.conf import barfer_settings
from barfer.exceptions import AnalyticsError, BarferError, OrderStoreError
from barfer.protocols.orders import ANALYTICS_STATUSES, OrderStore

logger = logging.getLogger(__name__)


class CategoryType(models.TextChoices):
    BEHAVIOR = "behavior", _("Comportamiento")
    SPENDING = "spending", _("Gasto")


class Visibility(models.TextChoices):
    ALL = "all", _("Todos")
    VISIBLE = "visible", _("Visibles")
    HIDDEN = "hidden", _("Ocultos")


class SortField(models.TextChoices):
    TOTAL_SPENT = "total_spent", _("Total gastado")
    TOTAL_ORDERS = "total_orders", _("Cantidad de órdenes")
    LAST_ORDER = "last_order", _("Última orden")


class SortOrder(models.TextChoices):
    ASC = "asc", _("Ascendente")
    DESC = "desc", _("Descendente")


def _local_date(moment: datetime) -> date:
    return timezone.localdate(moment) if timezone.is_aware(moment) else moment.date()


_SORT_KEYS = {
    SortField.TOTAL_SPENT: lambda c: c.total_spent,
    SortField.TOTAL_ORDERS: lambda c: c.total_orders,
    SortField.LAST_ORDER: lambda c: c.last_order_at,
}


@dataclass
class ClientQuery:
    """Filter, sort and page window for the client table."""

    category: str | None = None
    type: str | None = None
    visibility: str = Visibility.ALL
    page: int = 1
    page_size: int | None = None
    sort_by: str = SortField.TOTAL_SPENT
    sort_order: str = SortOrder.DESC
    include_contact_status: bool = False


@dataclass
class ClientRow:
    """
    One row of the client table.

    ``phone`` comes from the latest order's address and is ``""`` when that
    address has none; display layers render their own placeholder
    (e.g. "No disponible").
    """

    key: str
    name: str
    email: str
    phone: str
    last_order: date
    total_spent: int
    total_orders: int
    behavior_category: str
    spending_category: str
    whatsapp_contacted_at: str | None = None
    is_hidden: bool = False

    @classmethod
    def from_classified(cls, customer: ClassifiedCustomer) -> "ClientRow":
        user = customer.user or {}
        name = " ".join(p for p in (user.get("name"), user.get("lastName")) if p)
        return cls(
            key=customer.key,
            name=name,
            email=customer.email,
            phone=(customer.last_address or {}).get("phone") or "",
            last_order=_local_date(customer.last_order_at),
            total_spent=round_half_up(customer.total_spent),
            total_orders=customer.total_orders,
            behavior_category=str(customer.behavior_category),
            spending_category=str(customer.spending_category),
        )


@dataclass
class PaginatedClients:
    clients: list[ClientRow]
    total_count: int
    total_pages: int
    has_more: bool


@dataclass
class ClientSummary:
    average_order_value: int = 0
    repeat_customer_rate: float = 0.0
    average_orders_per_customer: float = 0.0
    average_monthly_spending: int = 0


@dataclass
class ClientAnalytics:
    """Full-population categorization for the dashboard."""

    total_clients: int
    behavior_categories: list[CategoryStat]
    spending_categories: list[CategoryStat]
    clients: list[ClassifiedCustomer]
    summary: ClientSummary = field(default_factory=ClientSummary)


@dataclass
class ClientCategoriesStats:
    behavior_categories: list[CategoryStat]
    spending_categories: list[CategoryStat]


@dataclass
class ClientGeneralStats:
    total_clients: int = 0
    average_order_value: int = 0
    repeat_customer_rate: float = 0.0
    average_orders_per_customer: float = 0.0
    average_monthly_spending: int = 0


class ClientAnalyticsService:
    """
    Client categorization and listing.

    Every method accepts:
        now: reference time (default: timezone.now())
        deadline: Deadline; default from BARFER["ANALYTICS_TIMEOUT_SECONDS"]
        store: OrderStore; default from BARFER["ORDER_STORE_BACKEND"]

    Methods that classify spending also take ``strategy`` (LINE_ITEMS or
    SPEND_TIERS, or their names "line_items" / "spend_tiers").

    Raises:
        AnalyticsError: ANALYTICS_UNAVAILABLE when the store fails,
            ANALYTICS_TIMEOUT (retryable) when the deadline expires
        BarferError: INVALID_QUERY for bad arguments
    """

    @classmethod
    def get_client_categorization(
        cls,
        now: datetime | None = None,
        strategy=LINE_ITEMS,
        deadline: Deadline | None = None,
        store: OrderStore | None = None,
    ) -> ClientAnalytics:
        """Classify every client and summarize the population."""
        customers = cls._classified(now, strategy, deadline, store)
        behavior_stats, spending_stats = reduce_category_stats(customers)
        return ClientAnalytics(
            total_clients=len(customers),
            behavior_categories=behavior_stats,
            spending_categories=spending_stats,
            clients=customers,
            summary=cls._summary(customers),
        )

    @classmethod
    def get_client_categories_stats(
        cls,
        now: datetime | None = None,
        strategy=SPEND_TIERS,
        deadline: Deadline | None = None,
        store: OrderStore | None = None,
    ) -> ClientCategoriesStats:
        """Category counts only (no per-client output)."""
        customers = cls._classified(now, strategy, deadline, store)
        behavior_stats, spending_stats = reduce_category_stats(customers)
        return ClientCategoriesStats(
            behavior_categories=behavior_stats,
            spending_categories=spending_stats,
        )

    @classmethod
    def get_clients_by_category(
        cls,
        category: str | None = None,
        category_type: str | None = None,
        now: datetime | None = None,
        strategy=LINE_ITEMS,
        deadline: Deadline | None = None,
        store: OrderStore | None = None,
    ) -> list[ClientRow]:
        """
        Unpaginated client table, highest spend first.

        With no category every client is returned.
        """
        category, category_type = cls._resolve_category(category, category_type)
        customers = cls._classified(now, strategy, deadline, store)
        if category:
            customers = [c for c in customers if c.category(category_type) == category]
        cls._sort(customers, SortField.TOTAL_SPENT, SortOrder.DESC)
        return [ClientRow.from_classified(c) for c in customers]

    @classmethod
    def get_clients_paginated(
        cls,
        query: ClientQuery | None = None,
        now: datetime | None = None,
        strategy=SPEND_TIERS,
        deadline: Deadline | None = None,
        store: OrderStore | None = None,
    ) -> PaginatedClients:
        """
        Filtered, sorted page of the client table.

        Category and visibility filters apply before counting, so
        ``total_count`` and ``total_pages`` describe the filtered set.
        """
        query = query or ClientQuery()
        page_size = query.page_size if query.page_size is not None else barfer_settings.DEFAULT_PAGE_SIZE
        cls._validate(query, page_size)
        category, category_type = cls._resolve_category(query.category, query.type)

        store = store or get_order_store()
        customers = cls._classified(now, strategy, deadline, store)

        if category:
            customers = [c for c in customers if c.category(category_type) == category]
        if query.visibility != Visibility.ALL:
            want_hidden = query.visibility == Visibility.HIDDEN
            hidden_marker = barfer_settings.HIDDEN_MARKER
            customers = [c for c in customers if c.is_hidden(hidden_marker) == want_hidden]

        total_count = len(customers)
        total_pages = math.ceil(total_count / page_size)

        cls._sort(customers, query.sort_by, query.sort_order)
        offset = (query.page - 1) * page_size
        rows = [ClientRow.from_classified(c) for c in customers[offset : offset + page_size]]

        if query.include_contact_status and rows:
            cls._overlay_contact_status(rows, store)

        return PaginatedClients(
            clients=rows,
            total_count=total_count,
            total_pages=total_pages,
            has_more=query.page < total_pages,
        )

    @classmethod
    def get_client_general_stats(
        cls,
        now: datetime | None = None,
        deadline: Deadline | None = None,
        store: OrderStore | None = None,
    ) -> ClientGeneralStats:
        """Population averages; no classification and no line items."""
        now = now or timezone.now()
        aggregates = cls._aggregates(deadline, store, include_items=False)
        if not aggregates:
            return ClientGeneralStats()

        clients = len(aggregates)
        orders = sum(a.total_orders for a in aggregates)
        spent = sum(a.total_spent for a in aggregates)
        repeat = sum(1 for a in aggregates if a.total_orders > 1)
        monthly = sum(a.total_spent / months_since(a.days_since_first_order(now)) for a in aggregates)

        return ClientGeneralStats(
            total_clients=clients,
            average_order_value=round_half_up(spent / orders),
            repeat_customer_rate=round_half_up(repeat / clients * 100, 2),
            average_orders_per_customer=round_half_up(orders / clients, 1),
            average_monthly_spending=round_half_up(monthly / clients),
        )

    # ======================================================================
    # Internal
    # ======================================================================

    @classmethod
    def _aggregates(cls, deadline, store, include_items: bool):
        deadline = deadline if deadline is not None else Deadline.from_settings()
        store = store or get_order_store()
        try:
            records = store.iter_orders(
                statuses=ANALYTICS_STATUSES,
                include_items=include_items,
                deadline=deadline,
            )
            return aggregate_orders(records, include_items=include_items, deadline=deadline)
        except OrderStoreError as exc:
            logger.exception("Client analytics failed: order store error")
            raise AnalyticsError("ANALYTICS_UNAVAILABLE") from exc

    @classmethod
    def _classified(cls, now, strategy, deadline, store) -> list[ClassifiedCustomer]:
        now = now or timezone.now()
        strategy = get_strategy(strategy)
        aggregates = cls._aggregates(deadline, store, include_items=strategy.needs_line_items)
        customers = [classify(a, now, strategy) for a in aggregates]
        logger.debug("Classified %s clients with %s", len(customers), strategy.name)
        return customers

    @classmethod
    def _summary(cls, customers: list[ClassifiedCustomer]) -> ClientSummary:
        if not customers:
            return ClientSummary()
        n = len(customers)
        return ClientSummary(
            average_order_value=round_half_up(sum(c.average_order_value for c in customers) / n),
            repeat_customer_rate=sum(1 for c in customers if c.total_orders > 1) / n * 100,
            average_orders_per_customer=sum(c.total_orders for c in customers) / n,
            average_monthly_spending=round_half_up(sum(c.monthly_spending for c in customers) / n),
        )

    @classmethod
    def _sort(cls, customers: list[ClassifiedCustomer], sort_by: str, sort_order: str) -> None:
        # Two stable passes: ties keep ascending key order in both directions
        customers.sort(key=lambda c: c.key)
        customers.sort(key=_SORT_KEYS[sort_by], reverse=sort_order == SortOrder.DESC)

    @classmethod
    def _overlay_contact_status(cls, rows: list[ClientRow], store: OrderStore) -> None:
        from barfer.services.contact import ContactService

        statuses = ContactService.contact_status([r.email for r in rows if r.email], store=store)
        for row in rows:
            status = statuses.get(row.email)
            row.whatsapp_contacted_at = status.contacted_at if status else None
            row.is_hidden = status.is_hidden if status else False

    @classmethod
    def _resolve_category(cls, category: str | None, category_type: str | None):
        """Validate a category filter, inferring its type when omitted."""
        if category_type is not None and category_type not in CategoryType.values:
            raise BarferError("INVALID_QUERY", message=f"Unknown category type '{category_type}'")
        if not category:
            return None, category_type

        if category_type is None:
            if category in BehaviorCategory.values:
                category_type = CategoryType.BEHAVIOR
            elif category in SpendingCategory.values:
                category_type = CategoryType.SPENDING

        choices = BehaviorCategory if category_type == CategoryType.BEHAVIOR else SpendingCategory
        if category_type is None or category not in choices.values:
            raise BarferError(
                "INVALID_QUERY",
                message=f"Unknown {category_type or 'client'} category '{category}'",
            )
        return category, category_type

    @classmethod
    def _validate(cls, query: ClientQuery, page_size: int) -> None:
        if not isinstance(query.page, int) or query.page < 1:
            raise BarferError("INVALID_QUERY", message="page must be >= 1", page=query.page)
        if not isinstance(page_size, int) or page_size < 1:
            raise BarferError("INVALID_QUERY", message="page_size must be >= 1", page_size=page_size)
        if query.sort_by not in SortField.values:
            raise BarferError("INVALID_QUERY", message=f"Unknown sort field '{query.sort_by}'")
        if query.sort_order not in SortOrder.values:
            raise BarferError("INVALID_QUERY", message=f"Unknown sort order '{query.sort_order}'")
        if query.visibility not in Visibility.values:
            raise BarferError("INVALID_QUERY", message=f"Unknown visibility '{query.visibility}'")
