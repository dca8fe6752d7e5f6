"""Barfer services.

- contact: WhatsApp contact marking and client visibility (ContactService)
"""

from barfer.services.contact import ContactService, ContactStatus

__all__ = ["ContactService", "ContactStatus"]
