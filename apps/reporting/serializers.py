"""
Serializers for reporting data.
"""

from rest_framework import serializers

from .models import DailySalesSummary


class DailySalesSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = DailySalesSummary
        fields = [
            "id",
            "user_id",
            "sales_date",
            "total_sales",
            "total_loss",
            "total_dump",
            "items_sold",
            "closing_items",
            "updated_at",
        ]
        read_only_fields = fields
