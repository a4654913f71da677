"""
Serializers for the sales app.

Checkout follows the shop's till flow:
- Price lines from today's menu, falling back to the product price
- Apply the best running offer per line
- Assign the next daily bill number
- Make the bill free when it hits today's special number
- Check that cash plus UPI covers the total
- Persist the bill and deduct stock
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from rest_framework import serializers

from apps.catalog.models import Product
from apps.catalog.services import (
    calculate_offer_discount,
    get_active_offers,
    get_menu_prices,
    get_special_number,
)
from apps.core.models import Profile
from apps.core.utils import local_today, round_money
from apps.reporting.services import DailySalesSummaryService

from .models import BillingItem, Transaction, TransactionItem

logger = logging.getLogger(__name__)


class CheckoutItemSerializer(serializers.Serializer):
    """A product and quantity on the bill."""

    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class CheckoutSerializer(serializers.Serializer):
    """
    Serializer for completing a sale at the till.
    """

    items = CheckoutItemSerializer(many=True)
    cash_paid = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), default=Decimal("0.00")
    )
    upi_paid = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), default=Decimal("0.00")
    )

    def validate_items(self, value):
        """Validate that at least one item is provided."""
        if not value:
            raise serializers.ValidationError("At least one item is required.")
        return value

    @staticmethod
    def next_bill_number(user_id, day) -> int:
        """
        Next bill number for the owner's local day.

        Must run inside the checkout transaction: the owner's profile row is
        locked first, so concurrent checkouts for one shop are numbered in turn.
        """
        Profile.objects.select_for_update().get_or_create(id=user_id)
        last = Transaction.objects.filter(user_id=user_id, sales_date=day).aggregate(
            last=Max("daily_bill_no")
        )["last"]
        return (last or 0) + 1

    @transaction.atomic
    def create(self, validated_data):
        """
        Create the bill, its items and billing rows, and deduct stock.

        The returned transaction carries ``change_due``, ``special`` and
        ``applied_offer_names`` for the response.
        """
        user_id = self.context["request"].user.id
        today = local_today()
        items_data = validated_data["items"]
        cash_paid = validated_data["cash_paid"]
        upi_paid = validated_data["upi_paid"]

        product_ids = {item["product_id"] for item in items_data}
        products = {
            product.id: product
            for product in Product.objects.select_for_update().filter(
                user_id=user_id, id__in=product_ids
            )
        }
        missing = sorted(product_ids - set(products))
        if missing:
            raise serializers.ValidationError(
                {"items": f"Unknown product ids: {', '.join(str(pid) for pid in missing)}"}
            )

        menu_prices = get_menu_prices(user_id, today)
        lines = []
        for item in items_data:
            product = products[item["product_id"]]
            lines.append(
                {
                    "product_id": product.id,
                    "name": product.name,
                    "quantity": item["quantity"],
                    "price": menu_prices.get(product.id, product.price),
                }
            )

        subtotal = round_money(sum(line["price"] * line["quantity"] for line in lines))
        offer_discount, offer_ids, offer_names = calculate_offer_discount(
            lines, get_active_offers(user_id, today)
        )
        offer_discount = min(offer_discount, subtotal)

        bill_no = self.next_bill_number(user_id, today)
        special = get_special_number(user_id, today) == bill_no

        if special:
            total_amount = Decimal("0.00")
            discount = subtotal
            offer_ids, offer_names = [], []
        else:
            total_amount = subtotal - offer_discount
            discount = offer_discount

        if cash_paid + upi_paid < total_amount:
            raise serializers.ValidationError(
                f"Payment of {cash_paid + upi_paid:.2f} does not cover the total of "
                f"{total_amount:.2f}."
            )

        now = timezone.now()
        sale = Transaction.objects.create(
            user_id=user_id,
            transaction_type=Transaction.SALE,
            daily_bill_no=bill_no,
            sales_date=today,
            total_amount=total_amount,
            discount=discount,
            cash_paid=cash_paid,
            upi_paid=upi_paid,
            products=[
                {
                    "product_id": line["product_id"],
                    "name": line["name"],
                    "quantity": line["quantity"],
                    "price": float(line["price"]),
                }
                for line in lines
            ],
            applied_offer_ids=offer_ids,
            refund={},
            created_at=now,
        )

        for line in lines:
            product = products[line["product_id"]]
            TransactionItem.objects.create(
                transaction=sale,
                user_id=user_id,
                product=product,
                quantity=line["quantity"],
                unit_price=line["price"],
                item_type=TransactionItem.SALE,
                created_at=now,
            )
            BillingItem.objects.create(
                transaction=sale,
                menu_item=product,
                quantity=line["quantity"],
                price=round_money(line["price"] * line["quantity"]),
            )

            # Stock never goes negative, even when the till oversells
            product.quantity = max(0, product.quantity - line["quantity"])
            product.save(update_fields=["quantity", "updated_at"])

        DailySalesSummaryService.rebuild(user_id, today)

        sale.change_due = round_money(cash_paid + upi_paid - total_amount)
        sale.special = special
        sale.applied_offer_names = offer_names

        logger.info(
            f"Bill {bill_no} ({sale.id}) completed for {user_id}: "
            f"total {total_amount}, discount {discount}, special={special}"
        )
        return sale


class TransactionItemSerializer(serializers.ModelSerializer):
    """Serializer for sale and refund lines."""

    product_name = serializers.CharField(source="product.name", read_only=True, default=None)

    class Meta:
        model = TransactionItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "item_type",
            "created_at",
        ]


class BillingItemSerializer(serializers.ModelSerializer):
    """Serializer for refundable bill lines."""

    menu_item_name = serializers.CharField(source="menu_item.name", read_only=True, default=None)

    class Meta:
        model = BillingItem
        fields = ["id", "menu_item_id", "menu_item_name", "quantity", "price"]


class TransactionSerializer(serializers.ModelSerializer):
    """Serializer for a bill with its lines."""

    items = TransactionItemSerializer(many=True, read_only=True)
    billing_items = BillingItemSerializer(many=True, read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "user_id",
            "transaction_type",
            "daily_bill_no",
            "total_amount",
            "discount",
            "cash_paid",
            "upi_paid",
            "products",
            "applied_offer_ids",
            "refund",
            "created_at",
            "items",
            "billing_items",
        ]
        read_only_fields = fields
