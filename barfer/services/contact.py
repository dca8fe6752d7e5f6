"""WhatsApp contact marking and client visibility.

The marker lives on every order of a client (``whatsapp_contacted_at``):
    ISO timestamp   -> contacted at that time
    HIDDEN_MARKER   -> hidden from contact lists
    null            -> neither
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from django.utils import timezone

from barfer.adapters import get_order_store
from barfer.analytics.identity import normalize_email
from barfer.conf import barfer_settings
from barfer.exceptions import AnalyticsError, OrderStoreError
from barfer.protocols.orders import OrderStore
from barfer.signals import contact_status_changed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactStatus:
    contacted_at: str | None = None
    is_hidden: bool = False


def _emails(emails: Iterable[str]) -> list[str]:
    return sorted({normalize_email(e) for e in emails if normalize_email(e)})


class ContactService:
    """
    Contact marker operations.

    Usage:
        ContactService.mark_contacted(["ana@example.com"])
        ContactService.hide(["spam@example.com"])
        ContactService.contact_status(["ana@example.com"])
        # {"ana@example.com": ContactStatus(contacted_at="2025-...", is_hidden=False)}
    """

    @classmethod
    def mark_contacted(cls, emails: Iterable[str], now=None, store: OrderStore | None = None) -> int:
        """Stamp every order of these clients with the contact time."""
        now = now or timezone.now()
        return cls._write(emails, now.isoformat(timespec="milliseconds"), "contacted", store)

    @classmethod
    def unmark_contacted(cls, emails: Iterable[str], store: OrderStore | None = None) -> int:
        return cls._write(emails, None, "uncontacted", store)

    @classmethod
    def hide(cls, emails: Iterable[str], store: OrderStore | None = None) -> int:
        return cls._write(emails, barfer_settings.HIDDEN_MARKER, "hidden", store)

    @classmethod
    def show(cls, emails: Iterable[str], store: OrderStore | None = None) -> int:
        """Clear the hidden marker; contact timestamps are left alone."""
        return cls._write(emails, None, "shown", store, only_if=barfer_settings.HIDDEN_MARKER)

    @classmethod
    def contact_status(
        cls,
        emails: Iterable[str],
        store: OrderStore | None = None,
    ) -> dict[str, ContactStatus]:
        """
        Contact status per email, read from each client's latest order.

        Emails without orders are absent from the result.

        Raises:
            AnalyticsError: ANALYTICS_UNAVAILABLE if the store fails
        """
        emails = _emails(emails)
        if not emails:
            return {}

        store = store or get_order_store()
        try:
            markers = store.contact_markers(emails)
        except OrderStoreError as exc:
            logger.exception("Could not read contact status for %s clients", len(emails))
            raise AnalyticsError("ANALYTICS_UNAVAILABLE") from exc

        hidden_marker = barfer_settings.HIDDEN_MARKER
        return {
            email: ContactStatus(
                contacted_at=None if marker == hidden_marker else marker,
                is_hidden=marker == hidden_marker,
            )
            for email, marker in markers.items()
        }

    # ======================================================================
    # Internal
    # ======================================================================

    @classmethod
    def _write(
        cls,
        emails: Iterable[str],
        value: str | None,
        action: str,
        store: OrderStore | None,
        only_if: str | None = None,
    ) -> int:
        emails = _emails(emails)
        if not emails:
            return 0

        store = store or get_order_store()
        updated = store.set_contact_marker(emails, value, only_if=only_if)
        logger.info("Contact marker %s: %s orders of %s clients", action, updated, len(emails))

        contact_status_changed.send(
            sender=cls,
            emails=emails,
            action=action,
            value=value,
            updated=updated,
        )
        return updated
