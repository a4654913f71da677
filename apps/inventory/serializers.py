"""
Serializers for the inventory app.
"""

from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.db.models.functions import Greatest
from django.utils import timezone

from rest_framework import serializers

from apps.catalog.models import Product
from apps.core.utils import local_today, round_money
from apps.reporting.services import DailySalesSummaryService

from .models import LossDumpLog


class LossDumpLogSerializer(serializers.ModelSerializer):
    """
    Serializer for logging written-off stock.

    ``amount`` defaults to the product price times the quantity.
    """

    product_id = serializers.IntegerField(min_value=1)
    product_name = serializers.CharField(source="product.name", read_only=True, default=None)
    quantity = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False
    )

    class Meta:
        model = LossDumpLog
        fields = [
            "id",
            "product_id",
            "product_name",
            "log_type",
            "quantity",
            "amount",
            "reason",
            "logged_at",
        ]
        read_only_fields = ["id", "logged_at"]

    def validate_product_id(self, value):
        user_id = self.context["request"].user.id
        if not Product.objects.filter(id=value, user_id=user_id).exists():
            raise serializers.ValidationError("Product not found.")
        return value

    @transaction.atomic
    def create(self, validated_data):
        """
        Create the log entry and take the quantity out of stock.
        """
        user_id = self.context["request"].user.id
        product = Product.objects.select_for_update().get(
            id=validated_data.pop("product_id"), user_id=user_id
        )
        quantity = validated_data["quantity"]

        if validated_data.get("amount") is None:
            validated_data["amount"] = round_money(product.price * quantity)

        log = LossDumpLog.objects.create(
            user_id=user_id, product=product, logged_at=timezone.now(), **validated_data
        )

        Product.objects.filter(id=product.id).update(
            quantity=Greatest(F("quantity") - quantity, 0), updated_at=timezone.now()
        )

        DailySalesSummaryService.rebuild(user_id, local_today())
        return log
