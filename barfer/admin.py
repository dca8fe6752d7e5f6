"""Barfer admin: orders (with contact actions) and expenses."""

from django.contrib import admin, messages
from django.utils.html import format_html

from barfer.conf import barfer_settings
from barfer.models import Expense, Order
from barfer.services.contact import ContactService


# ===========================================
# Order Admin
# ===========================================


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "email",
        "status",
        "order_type",
        "payment_method",
        "total",
        "created_at",
        "contact_badge",
    ]
    list_filter = ["status", "order_type", "payment_method"]
    search_fields = ["email", "user_id", "notes"]
    date_hierarchy = "created_at"
    readonly_fields = ["user_id", "email", "updated_at"]
    actions = ["mark_contacted", "unmark_contacted", "hide_clients", "show_clients"]

    fieldsets = [
        (None, {"fields": ["status", "order_type", "payment_method", "created_at", "delivery_day"]}),
        ("Customer", {"fields": ["user_id", "email", "user", "address", "delivery_area"]}),
        ("Items", {"fields": ["items", "sub_total", "shipping_price", "total"]}),
        ("Contact", {"fields": ["whatsapp_contacted_at", "notes"]}),
        ("System", {"fields": ["updated_at"], "classes": ["collapse"]}),
    ]

    def contact_badge(self, obj):
        marker = obj.whatsapp_contacted_at
        if not marker:
            return format_html('<span style="color: gray;">-</span>')
        if marker == barfer_settings.HIDDEN_MARKER:
            return format_html('<span style="color: gray;">hidden</span>')
        return format_html('<span style="color: green;">{}</span>', marker[:10])

    contact_badge.short_description = "WhatsApp"

    def _contact_action(self, request, queryset, method, label):
        emails = {e for e in queryset.values_list("email", flat=True) if e}
        updated = method(emails)
        self.message_user(
            request,
            f"{label}: {updated} orders of {len(emails)} clients",
            messages.SUCCESS,
        )

    @admin.action(description="Mark clients as contacted")
    def mark_contacted(self, request, queryset):
        self._contact_action(request, queryset, ContactService.mark_contacted, "Contacted")

    @admin.action(description="Unmark contacted clients")
    def unmark_contacted(self, request, queryset):
        self._contact_action(request, queryset, ContactService.unmark_contacted, "Uncontacted")

    @admin.action(description="Hide clients")
    def hide_clients(self, request, queryset):
        self._contact_action(request, queryset, ContactService.hide, "Hidden")

    @admin.action(description="Show clients")
    def show_clients(self, request, queryset):
        self._contact_action(request, queryset, ContactService.show, "Shown")


# ===========================================
# Expense Admin
# ===========================================


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ["date", "category", "kind", "brand", "amount", "description"]
    list_filter = ["kind", "brand", "category"]
    search_fields = ["category", "description"]
    date_hierarchy = "date"
    readonly_fields = ["created_at"]
