"""
Django admin configuration for reporting models.
"""

from django.contrib import admin

from .models import DailySalesSummary


@admin.register(DailySalesSummary)
class DailySalesSummaryAdmin(admin.ModelAdmin):
    list_display = [
        "sales_date",
        "user_id",
        "total_sales",
        "total_loss",
        "total_dump",
        "items_sold",
        "closing_items",
    ]
    list_filter = ["sales_date"]
    search_fields = ["user_id"]
    ordering = ["-sales_date"]
    readonly_fields = ["updated_at"]
