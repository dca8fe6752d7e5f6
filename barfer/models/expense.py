"""Expense model (outflows used by the monthly balance)."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ExpenseKind(models.TextChoices):
    ORDINARY = "ordinary", _("Ordinario")
    EXTRAORDINARY = "extraordinary", _("Extraordinario")


class ExpenseBrand(models.TextChoices):
    BARFER = "barfer", _("Barfer")
    SLR = "slr", _("SLR")


class Expense(models.Model):
    """Single outflow, split by kind and by the company that paid it."""

    date = models.DateTimeField(_("fecha"), db_index=True)
    amount = models.DecimalField(_("monto"), max_digits=14, decimal_places=2)
    kind = models.CharField(
        _("tipo"),
        max_length=20,
        choices=ExpenseKind.choices,
        default=ExpenseKind.ORDINARY,
    )
    brand = models.CharField(
        _("marca"),
        max_length=20,
        blank=True,
        default=ExpenseBrand.BARFER,
        help_text=_("Empresa que realiza el gasto; vacío se considera Barfer"),
    )
    category = models.CharField(
        _("categoría"),
        max_length=100,
        blank=True,
        db_index=True,
        help_text=_("Nombre en mayúsculas (ej: SUELDOS, ALIMENTOS)"),
    )
    description = models.CharField(_("descripción"), max_length=255, blank=True)

    created_at = models.DateTimeField(_("creado en"), auto_now_add=True)

    class Meta:
        verbose_name = _("salida")
        verbose_name_plural = _("salidas")
        ordering = ["-date"]

    def __str__(self):
        return f"{self.category or self.kind} {self.amount} ({self.date:%Y-%m-%d})"

    def save(self, *args, **kwargs):
        if self.category:
            self.category = self.category.strip().upper()
        if self.brand:
            self.brand = self.brand.strip().lower()
        super().save(*args, **kwargs)
