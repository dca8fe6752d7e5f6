"""Tests for the Order admin contact actions."""

import pytest
from django.contrib import admin
from django.test import RequestFactory

from barfer.admin import OrderAdmin
from barfer.models import Order


pytestmark = pytest.mark.django_db


@pytest.fixture
def model_admin(monkeypatch):
    model_admin = OrderAdmin(Order, admin.site)
    model_admin.sent = []
    monkeypatch.setattr(model_admin, "message_user", lambda request, message, level: model_admin.sent.append(message))
    return model_admin


@pytest.fixture
def request_():
    return RequestFactory().post("/admin/barfer/order/")


class TestContactActions:
    """Tests for the contact admin actions."""

    def test_hide_marks_every_order_of_the_client(self, model_admin, request_, make_order):
        selected = make_order(email="ana@example.com", days_ago=1)
        make_order(email="ana@example.com", days_ago=20)
        make_order(email="bob@example.com", days_ago=3)

        model_admin.hide_clients(request_, Order.objects.filter(pk=selected.pk))

        assert list(Order.objects.filter(email="ana@example.com").values_list("whatsapp_contacted_at", flat=True)) == [
            "hidden",
            "hidden",
        ]
        assert Order.objects.get(email="bob@example.com").whatsapp_contacted_at is None
        assert model_admin.sent == ["Hidden: 2 orders of 1 clients"]

    def test_mark_and_unmark(self, model_admin, request_, make_order):
        order = make_order()
        queryset = Order.objects.filter(pk=order.pk)

        model_admin.mark_contacted(request_, queryset)
        order.refresh_from_db()
        assert order.whatsapp_contacted_at is not None
        assert order.whatsapp_contacted_at != "hidden"

        model_admin.unmark_contacted(request_, queryset)
        order.refresh_from_db()
        assert order.whatsapp_contacted_at is None

    def test_show(self, model_admin, request_, make_order):
        order = make_order(whatsapp_contacted_at="hidden")

        model_admin.show_clients(request_, Order.objects.filter(pk=order.pk))

        order.refresh_from_db()
        assert order.whatsapp_contacted_at is None

    def test_uses_configured_store(self, model_admin, request_, make_order, store, monkeypatch):
        monkeypatch.setattr("barfer.services.contact.get_order_store", lambda: store)
        store.add(email="ana@example.com", days_ago=1)
        store.add(email="ana@example.com", days_ago=9)
        order = make_order(email="ana@example.com")

        model_admin.hide_clients(request_, Order.objects.filter(pk=order.pk))

        assert [r.whatsapp_contacted_at for r in store.records] == ["hidden", "hidden"]
        order.refresh_from_db()
        assert order.whatsapp_contacted_at is None
        assert model_admin.sent == ["Hidden: 2 orders of 1 clients"]


class TestContactBadge:
    """Tests for the contact badge column."""

    def test_badges(self, model_admin, make_order):
        assert "-" in model_admin.contact_badge(make_order())
        assert "hidden" in model_admin.contact_badge(make_order(whatsapp_contacted_at="hidden"))
        assert "2025-06-14" in model_admin.contact_badge(
            make_order(whatsapp_contacted_at="2025-06-14T10:00:00.000Z")
        )
