"""
Barfer signals: public event API.

Emitted signals:
- contact_status_changed: Emitted by ContactService after every marker write
"""

from django.dispatch import Signal

# sender=ContactService, emails=list[str], action=str, value=str|None, updated=int
contact_status_changed = Signal()
