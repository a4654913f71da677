"""
Django admin configuration for inventory models.
"""

from django.contrib import admin

from .models import LossDumpLog


@admin.register(LossDumpLog)
class LossDumpLogAdmin(admin.ModelAdmin):
    """Admin interface for LossDumpLog model."""

    list_display = ["product", "log_type", "quantity", "amount", "user_id", "logged_at"]
    list_filter = ["log_type", "logged_at"]
    search_fields = ["product__name", "reason"]
    readonly_fields = ["logged_at"]
