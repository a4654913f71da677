"""
Serializers for the catalog app.
"""

from decimal import Decimal

from rest_framework import serializers

from .models import Offer, Product, SpecialNumber, TodaysMenu


class ProductSerializer(serializers.ModelSerializer):
    """Serializer for the caller's products."""

    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), coerce_to_string=False
    )
    quantity = serializers.IntegerField(min_value=0, required=False)

    class Meta:
        model = Product
        fields = ["id", "user_id", "name", "category", "quantity", "price", "created_at", "updated_at"]
        read_only_fields = ["id", "user_id", "created_at", "updated_at"]


class OfferSerializer(serializers.ModelSerializer):
    """
    Serializer for offers with scheduling and discount validation.
    """

    product_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False)
    discount_value = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), coerce_to_string=False
    )
    day_of_week = serializers.IntegerField(
        min_value=0, max_value=6, required=False, allow_null=True
    )

    class Meta:
        model = Offer
        fields = [
            "id",
            "user_id",
            "name",
            "description",
            "product_ids",
            "is_active",
            "is_recurring",
            "discount_type",
            "discount_value",
            "day_of_week",
            "start_date",
            "end_date",
            "created_at",
        ]
        read_only_fields = ["id", "user_id", "created_at"]

    def _current(self, attrs, field, default=None):
        if field in attrs:
            return attrs[field]
        if self.instance is not None:
            return getattr(self.instance, field)
        return default

    def validate_product_ids(self, value):
        request = self.context.get("request")
        ids = list(dict.fromkeys(value))
        if request is not None and ids:
            owned = set(
                Product.objects.filter(user_id=request.user.id, id__in=ids).values_list(
                    "id", flat=True
                )
            )
            unknown = [pid for pid in ids if pid not in owned]
            if unknown:
                raise serializers.ValidationError(
                    f"Unknown product ids: {', '.join(str(pid) for pid in unknown)}"
                )
        return ids

    def validate(self, attrs):
        is_recurring = self._current(attrs, "is_recurring", False)
        discount_type = self._current(attrs, "discount_type", Offer.PERCENTAGE)
        discount_value = self._current(attrs, "discount_value", Decimal("0"))

        if is_recurring:
            if self._current(attrs, "day_of_week") is None:
                raise serializers.ValidationError(
                    {"day_of_week": "Recurring offers need a day of week."}
                )
            attrs["start_date"] = None
            attrs["end_date"] = None
        else:
            attrs["day_of_week"] = None
            start_date = self._current(attrs, "start_date")
            end_date = self._current(attrs, "end_date")
            if start_date and end_date and start_date > end_date:
                raise serializers.ValidationError(
                    {"end_date": "End date must be on or after the start date."}
                )

        if discount_type == Offer.PERCENTAGE and discount_value > Decimal("100"):
            raise serializers.ValidationError(
                {"discount_value": "Percentage discount must be between 0 and 100."}
            )

        return attrs


class TodaysMenuSerializer(serializers.ModelSerializer):
    """Serializer for today's menu entries."""

    class Meta:
        model = TodaysMenu
        fields = [
            "id",
            "product_id",
            "menu_date",
            "name",
            "category",
            "price",
            "quantity",
            "is_available",
            "created_at",
        ]
        read_only_fields = fields


class MenuAddSerializer(serializers.Serializer):
    """Request body for putting a product on today's menu."""

    product_id = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False
    )
    quantity = serializers.IntegerField(min_value=0, required=False)
    is_available = serializers.BooleanField(required=False, default=True)


class SpecialNumberSerializer(serializers.ModelSerializer):
    """Serializer for setting the day's special number."""

    number = serializers.IntegerField(min_value=1, max_value=100)

    class Meta:
        model = SpecialNumber
        fields = ["date", "number"]
        read_only_fields = ["date"]
