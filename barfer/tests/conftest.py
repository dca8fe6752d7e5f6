"""Pytest fixtures for Barfer tests."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from itertools import count

import pytest

from barfer.exceptions import OrderStoreError
from barfer.models import Order
from barfer.protocols.orders import OrderRecord

NOW = datetime(2025, 6, 15, 15, 0, tzinfo=dt_timezone.utc)


def _item(name, option="", quantity=1, price=0):
    return {"name": name, "options": [{"name": option, "quantity": quantity, "price": price}]}


class MemoryOrderStore:
    """OrderStore over a list of OrderRecords."""

    def __init__(self, now=NOW):
        self.now = now
        self.records: list[OrderRecord] = []
        self.fail = False
        self._ids = count(1)

    def add(
        self,
        email="",
        days_ago=0.0,
        total=1000,
        items=None,
        user_id="",
        status="confirmed",
        **fields,
    ) -> OrderRecord:
        user = fields.pop("user", {"email": email, "name": email.split("@")[0].title()})
        record = OrderRecord(
            order_id=str(next(self._ids)),
            created_at=self.now - timedelta(days=days_ago),
            total=float(total),
            status=status,
            user_id=user_id,
            email=email,
            user=user,
            items=items or [],
            **fields,
        )
        self.records.append(record)
        return record

    def iter_orders(self, statuses=None, start=None, end=None, include_items=True, deadline=None):
        if self.fail:
            raise OrderStoreError("connection refused")
        for record in sorted(self.records, key=lambda r: r.created_at):
            if statuses is not None and record.status not in statuses:
                continue
            if start is not None and record.created_at < start:
                continue
            if end is not None and record.created_at > end:
                continue
            yield record if include_items else replace(record, items=[])

    def contact_markers(self, emails):
        if self.fail:
            raise OrderStoreError("connection refused")
        emails = set(emails)
        markers = {}
        for record in sorted(self.records, key=lambda r: r.created_at):
            if record.email in emails:
                markers[record.email] = record.whatsapp_contacted_at
        return markers

    def set_contact_marker(self, emails, value, only_if=None):
        emails = set(emails)
        updated = 0
        for i, record in enumerate(self.records):
            if only_if is not None and record.whatsapp_contacted_at != only_if:
                continue
            if record.email in emails:
                self.records[i] = replace(record, whatsapp_contacted_at=value)
                updated += 1
        return updated


@pytest.fixture
def item():
    """Build a storefront line item with a single option."""
    return _item


@pytest.fixture
def now():
    """Fixed reference time for classification."""
    return NOW


@pytest.fixture
def store():
    """Empty in-memory order store."""
    return MemoryOrderStore()


@pytest.fixture
def make_order(db):
    """Factory for persisted Order rows, dated relative to NOW."""

    def _make(email="ana@example.com", days_ago=0, total="1000.00", items=None, **fields):
        fields.setdefault("user", {"_id": "", "email": email, "name": "Ana", "lastName": "Paz"})
        return Order.objects.create(
            email=email,
            total=Decimal(str(total)),
            items=items or [],
            created_at=NOW - timedelta(days=days_ago),
            status=fields.pop("status", "confirmed"),
            **fields,
        )

    return _make
