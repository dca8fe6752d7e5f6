"""Tests for ContactService."""

import pytest

from barfer.exceptions import AnalyticsError
from barfer.services import ContactService, ContactStatus
from barfer.signals import contact_status_changed


@pytest.fixture
def received():
    """Collect contact_status_changed payloads."""
    events = []

    def handler(sender, **kwargs):
        events.append((sender, kwargs))

    contact_status_changed.connect(handler)
    yield events
    contact_status_changed.disconnect(handler)


@pytest.fixture
def clients(store):
    store.add(email="ana@example.com", days_ago=20)
    store.add(email="ana@example.com", days_ago=2)
    store.add(email="bob@example.com", days_ago=5)
    return store


class TestMarkers:
    """Tests for writing contact markers."""

    def test_mark_contacted(self, clients, now):
        updated = ContactService.mark_contacted(["ana@example.com"], now=now, store=clients)

        assert updated == 2
        assert ContactService.contact_status(["ana@example.com"], store=clients) == {
            "ana@example.com": ContactStatus(contacted_at="2025-06-15T15:00:00.000+00:00", is_hidden=False)
        }

    def test_emails_normalized(self, clients, now):
        assert ContactService.mark_contacted([" ANA@Example.com", "ana@example.com"], now=now, store=clients) == 2

    def test_unmark(self, clients, now):
        ContactService.mark_contacted(["ana@example.com"], now=now, store=clients)
        ContactService.unmark_contacted(["ana@example.com"], store=clients)

        status = ContactService.contact_status(["ana@example.com"], store=clients)
        assert status["ana@example.com"] == ContactStatus()

    def test_hide_and_show(self, clients):
        ContactService.hide(["bob@example.com"], store=clients)

        status = ContactService.contact_status(["bob@example.com"], store=clients)["bob@example.com"]
        assert status.is_hidden is True
        assert status.contacted_at is None
        assert all(r.whatsapp_contacted_at == "hidden" for r in clients.records if r.email == "bob@example.com")

        ContactService.show(["bob@example.com"], store=clients)

        assert ContactService.contact_status(["bob@example.com"], store=clients)["bob@example.com"].is_hidden is False

    def test_show_keeps_contact_time(self, clients, now):
        ContactService.mark_contacted(["bob@example.com"], now=now, store=clients)

        assert ContactService.show(["bob@example.com"], store=clients) == 0

        assert ContactService.contact_status(["bob@example.com"], store=clients) == {
            "bob@example.com": ContactStatus(contacted_at="2025-06-15T15:00:00.000+00:00", is_hidden=False)
        }

    def test_custom_hidden_marker(self, clients, settings):
        settings.BARFER = {"HIDDEN_MARKER": "oculto"}

        ContactService.hide(["bob@example.com"], store=clients)

        status = ContactService.contact_status(["bob@example.com"], store=clients)
        assert status["bob@example.com"].is_hidden is True

    def test_no_emails(self, clients, received):
        assert ContactService.hide(["", "  "], store=clients) == 0
        assert received == []

    def test_signal(self, clients, now, received):
        ContactService.mark_contacted(["ana@example.com"], now=now, store=clients)

        ((sender, payload),) = received
        assert sender is ContactService
        assert payload["emails"] == ["ana@example.com"]
        assert payload["action"] == "contacted"
        assert payload["value"] == "2025-06-15T15:00:00.000+00:00"
        assert payload["updated"] == 2


class TestContactStatus:
    """Tests for reading contact status."""

    def test_unknown_emails_absent(self, clients):
        assert ContactService.contact_status(["nobody@example.com"], store=clients) == {}

    def test_latest_order_wins(self, clients):
        clients.add(email="bob@example.com", days_ago=30, whatsapp_contacted_at="hidden")

        status = ContactService.contact_status(["bob@example.com"], store=clients)

        assert status["bob@example.com"].is_hidden is False

    def test_empty_input(self, store):
        store.fail = True
        assert ContactService.contact_status([], store=store) == {}

    def test_store_failure(self, clients):
        clients.fail = True

        with pytest.raises(AnalyticsError) as exc:
            ContactService.contact_status(["ana@example.com"], store=clients)

        assert exc.value.code == "ANALYTICS_UNAVAILABLE"
