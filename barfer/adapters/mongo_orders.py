"""MongoDB OrderStore adapter (storefront ``orders`` collection)."""

import logging
import re
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone as dt_timezone

from django.utils import timezone
from django.utils.dateparse import parse_datetime
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import ExecutionTimeout, PyMongoError

from barfer.analytics.identity import normalize_email
from barfer.conf import barfer_settings
from barfer.exceptions import AnalyticsError, OrderStoreError
from barfer.protocols.orders import OrderRecord

logger = logging.getLogger(__name__)

# Storefront writes Spanish order types
ORDER_TYPES = {
    "minorista": "retail",
    "mayorista": "wholesale",
    "retail": "retail",
    "wholesale": "wholesale",
}

_PROJECTION = {
    "_id": 1,
    "createdAt": 1,
    "total": 1,
    "status": 1,
    "user": 1,
    "address": 1,
    "paymentMethod": 1,
    "orderType": 1,
    "deliveryArea.sameDayDelivery": 1,
    "whatsappContactedAt": 1,
}


def _as_datetime(value) -> datetime | None:
    if isinstance(value, str):
        value = parse_datetime(value)
    if not isinstance(value, datetime):
        return None
    if timezone.is_naive(value):
        # BSON dates are UTC
        value = timezone.make_aware(value, dt_timezone.utc)
    return value


def _email_filter(emails: list[str]) -> dict:
    """Match ``user.email`` ignoring case and surrounding blanks (stored as typed)."""
    patterns = [re.compile(rf"^\s*{re.escape(email)}\s*$", re.IGNORECASE) for email in emails]
    return {"user.email": {"$in": patterns}}


def _as_float(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class MongoOrderStore:
    """
    OrderStore reading the storefront's MongoDB ``orders`` collection.

    Configuration in settings.py:
        BARFER = {
            "ORDER_STORE_BACKEND": "barfer.adapters.mongo_orders.MongoOrderStore",
            "MONGO_URI": "mongodb://localhost:27017",
            "MONGO_DATABASE": "barfer",
        }

    The deadline's remaining time is sent as ``maxTimeMS`` so the server
    aborts slow scans instead of the app waiting on them.
    """

    def __init__(self, collection=None):
        self._collection = collection
        self._client = None

    @property
    def collection(self):
        if self._collection is None:
            self._client = MongoClient(barfer_settings.MONGO_URI, tz_aware=True)
            db = self._client[barfer_settings.MONGO_DATABASE]
            self._collection = db[barfer_settings.MONGO_ORDERS_COLLECTION]
        return self._collection

    def iter_orders(
        self,
        statuses: Iterable[str] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        include_items: bool = True,
        deadline=None,
    ) -> Iterator[OrderRecord]:
        query: dict = {}
        if statuses is not None:
            query["status"] = {"$in": list(statuses)}
        if start is not None or end is not None:
            query["createdAt"] = {}
            if start is not None:
                query["createdAt"]["$gte"] = start
            if end is not None:
                query["createdAt"]["$lte"] = end

        projection = dict(_PROJECTION)
        if include_items:
            projection["items"] = 1

        try:
            cursor = self.collection.find(query, projection).sort("createdAt", ASCENDING)
            remaining = deadline.remaining() if deadline is not None else None
            if remaining is not None:
                cursor = cursor.max_time_ms(max(int(remaining * 1000), 1))
            for doc in cursor:
                record = self._to_record(doc)
                if record is not None:
                    yield record
        except ExecutionTimeout as exc:
            raise AnalyticsError("ANALYTICS_TIMEOUT", retryable=True) from exc
        except PyMongoError as exc:
            logger.exception("Mongo order query failed")
            raise OrderStoreError(str(exc)) from exc

    def contact_markers(self, emails: Iterable[str]) -> dict[str, str | None]:
        emails = sorted({normalize_email(e) for e in emails if normalize_email(e)})
        if not emails:
            return {}

        markers: dict[str, str | None] = {}
        projection = {"_id": 0, "user.email": 1, "createdAt": 1, "whatsappContactedAt": 1}
        try:
            cursor = self.collection.find(_email_filter(emails), projection).sort("createdAt", DESCENDING)
            for doc in cursor:
                # First document per email is its latest order
                email = normalize_email((doc.get("user") or {}).get("email"))
                markers.setdefault(email, doc.get("whatsappContactedAt"))
        except PyMongoError as exc:
            logger.exception("Mongo contact marker lookup failed")
            raise OrderStoreError(str(exc)) from exc
        return markers

    def set_contact_marker(self, emails: Iterable[str], value: str | None, only_if: str | None = None) -> int:
        emails = sorted({normalize_email(e) for e in emails if normalize_email(e)})
        if not emails:
            return 0

        query = _email_filter(emails)
        if only_if is not None:
            query["whatsappContactedAt"] = only_if
        if value is None:
            update = {"$unset": {"whatsappContactedAt": ""}}
        else:
            update = {"$set": {"whatsappContactedAt": value}}
        try:
            result = self.collection.update_many(query, update)
        except PyMongoError as exc:
            logger.exception("Mongo contact marker update failed")
            raise OrderStoreError(str(exc)) from exc
        return result.modified_count

    @staticmethod
    def _to_record(doc: dict) -> OrderRecord | None:
        created_at = _as_datetime(doc.get("createdAt"))
        if created_at is None:
            logger.debug("Skipping order %s without a valid createdAt", doc.get("_id"))
            return None

        user = doc.get("user") if isinstance(doc.get("user"), dict) else {}
        address = doc.get("address") if isinstance(doc.get("address"), dict) else {}
        delivery_area = doc.get("deliveryArea") if isinstance(doc.get("deliveryArea"), dict) else {}
        user_id = user.get("id") or user.get("_id") or ""

        return OrderRecord(
            order_id=str(doc.get("_id", "")),
            created_at=created_at,
            total=_as_float(doc.get("total")),
            status=doc.get("status") or "",
            user_id=str(user_id),
            email=normalize_email(user.get("email")),
            user=user,
            address=address,
            items=doc.get("items") or [],
            payment_method=doc.get("paymentMethod") or "",
            order_type=ORDER_TYPES.get(doc.get("orderType") or "", "retail"),
            same_day_delivery=bool(delivery_area.get("sameDayDelivery")),
            whatsapp_contacted_at=doc.get("whatsappContactedAt"),
        )
