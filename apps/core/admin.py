"""
Django admin configuration for core models.
"""

from django.contrib import admin

from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Admin interface for Profile model."""

    list_display = ["id", "shop_name", "full_name", "phone", "updated_at"]
    search_fields = ["shop_name", "full_name", "phone"]
    readonly_fields = ["id", "created_at", "updated_at"]
    fieldsets = [
        (
            "Owner",
            {
                "fields": ["id", "full_name", "phone", "avatar_url"],
            },
        ),
        (
            "Shop",
            {
                "fields": ["shop_name", "address"],
            },
        ),
        (
            "Timestamps",
            {
                "fields": ["created_at", "updated_at"],
            },
        ),
    ]
