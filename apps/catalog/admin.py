"""
Django admin configuration for catalog models.
"""

from django.contrib import admin

from .models import Offer, Product, SpecialNumber, TodaysMenu


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for Product model."""

    list_display = ["name", "category", "price", "quantity", "user_id", "updated_at"]
    list_filter = ["category"]
    search_fields = ["name", "category"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    """Admin interface for Offer model."""

    list_display = [
        "name",
        "discount_type",
        "discount_value",
        "is_active",
        "is_recurring",
        "day_of_week",
        "start_date",
        "end_date",
    ]
    list_filter = ["discount_type", "is_active", "is_recurring"]
    search_fields = ["name", "description"]
    readonly_fields = ["created_at"]
    fieldsets = [
        (
            "Basic Information",
            {
                "fields": ["user_id", "name", "description", "product_ids"],
            },
        ),
        (
            "Discount",
            {
                "fields": ["discount_type", "discount_value"],
            },
        ),
        (
            "Schedule",
            {
                "fields": ["is_active", "is_recurring", "day_of_week", "start_date", "end_date"],
            },
        ),
        (
            "Timestamps",
            {
                "fields": ["created_at"],
            },
        ),
    ]


@admin.register(TodaysMenu)
class TodaysMenuAdmin(admin.ModelAdmin):
    """Admin interface for TodaysMenu model."""

    list_display = ["name", "menu_date", "price", "quantity", "is_available"]
    list_filter = ["menu_date", "is_available"]
    search_fields = ["name"]


@admin.register(SpecialNumber)
class SpecialNumberAdmin(admin.ModelAdmin):
    list_display = ["date", "number", "user_id"]
    list_filter = ["date"]
