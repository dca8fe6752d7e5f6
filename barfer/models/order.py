"""Order model (storefront orders, as snapshotted at checkout).

Data architecture:
    Order.user / Order.address / Order.items / Order.delivery_area
        JSON snapshots taken when the order was placed. Never updated when the
        user edits their profile later.

    Order.user_id / Order.email
        Denormalized from the user snapshot on save() so orders can be
        filtered and grouped per customer without parsing JSON.

    Order.whatsapp_contacted_at
        Operator marker: ISO timestamp of the last WhatsApp contact, the
        hidden marker (see BARFER["HIDDEN_MARKER"]), or null.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class OrderStatus(models.TextChoices):
    PENDING = "pending", _("Pendiente")
    CONFIRMED = "confirmed", _("Confirmado")
    DELIVERED = "delivered", _("Entregado")
    CANCELLED = "cancelled", _("Cancelado")


class OrderType(models.TextChoices):
    RETAIL = "retail", _("Minorista")
    WHOLESALE = "wholesale", _("Mayorista")


class Order(models.Model):
    """
    Storefront order.

    Items are stored as the storefront sends them:
        [{"name": "BIG DOG (15kg)", "options": [{"name": "POLLO", "quantity": 1, "price": 32000}]}]
    """

    status = models.CharField(
        _("estado"),
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
    )
    order_type = models.CharField(
        _("tipo de orden"),
        max_length=20,
        choices=OrderType.choices,
        default=OrderType.RETAIL,
    )
    payment_method = models.CharField(_("medio de pago"), max_length=50, blank=True)

    # Customer identity (denormalized from user snapshot)
    user_id = models.CharField(_("id de usuario"), max_length=64, blank=True, db_index=True)
    email = models.CharField(_("email"), max_length=254, blank=True, db_index=True)

    # Snapshots
    user = models.JSONField(_("usuario"), default=dict, blank=True)
    address = models.JSONField(_("dirección"), default=dict, blank=True)
    items = models.JSONField(_("items"), default=list, blank=True)
    delivery_area = models.JSONField(_("zona de entrega"), default=dict, blank=True)

    # Amounts
    sub_total = models.DecimalField(_("subtotal"), max_digits=14, decimal_places=2, default=0)
    shipping_price = models.DecimalField(_("envío"), max_digits=14, decimal_places=2, default=0)
    total = models.DecimalField(_("total"), max_digits=14, decimal_places=2, default=0)

    delivery_day = models.DateField(_("día de entrega"), null=True, blank=True)
    notes = models.TextField(_("notas"), blank=True)

    whatsapp_contacted_at = models.CharField(
        _("contactado por WhatsApp"),
        max_length=40,
        null=True,
        blank=True,
        help_text=_("Fecha ISO del último contacto o marcador de cliente oculto"),
    )

    created_at = models.DateTimeField(_("creado en"), db_index=True)
    updated_at = models.DateTimeField(_("actualizado en"), auto_now=True)

    class Meta:
        verbose_name = _("orden")
        verbose_name_plural = _("órdenes")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="barfer_order_status_idx"),
            models.Index(fields=["email", "created_at"], name="barfer_order_email_idx"),
        ]

    def __str__(self):
        return f"Order #{self.pk} ({self.email or self.user_id or '?'})"

    @property
    def same_day_delivery(self) -> bool:
        return bool((self.delivery_area or {}).get("sameDayDelivery"))

    def save(self, *args, **kwargs):
        user = self.user or {}
        if not self.user_id:
            self.user_id = str(user.get("id") or user.get("_id") or "").strip()
        if not self.email:
            self.email = user.get("email") or ""
        # Normalize email (lowercase)
        if self.email:
            self.email = self.email.lower().strip()

        if self.created_at is None:
            from django.utils import timezone

            self.created_at = timezone.now()

        super().save(*args, **kwargs)
