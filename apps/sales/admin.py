"""
Django admin configuration for sales models.
"""

from django.contrib import admin

from .models import BillingItem, Transaction, TransactionItem


class TransactionItemInline(admin.TabularInline):
    """Inline admin for TransactionItem model."""

    model = TransactionItem
    extra = 0
    readonly_fields = ["created_at"]
    fields = ["product", "quantity", "unit_price", "item_type", "created_at"]


class BillingItemInline(admin.TabularInline):
    """Inline admin for BillingItem model."""

    model = BillingItem
    extra = 0
    fields = ["menu_item", "quantity", "price"]


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Admin interface for Transaction model."""

    list_display = [
        "id",
        "daily_bill_no",
        "user_id",
        "total_amount",
        "discount",
        "cash_paid",
        "upi_paid",
        "created_at",
    ]
    list_filter = ["transaction_type", "created_at"]
    search_fields = ["id", "daily_bill_no"]
    readonly_fields = ["created_at"]
    inlines = [TransactionItemInline, BillingItemInline]
    fieldsets = [
        (
            "Bill",
            {
                "fields": ["user_id", "transaction_type", "daily_bill_no", "created_at"],
            },
        ),
        (
            "Amounts",
            {
                "fields": ["total_amount", "discount", "cash_paid", "upi_paid"],
            },
        ),
        (
            "Details",
            {
                "fields": ["products", "applied_offer_ids", "refund"],
            },
        ),
    ]
