"""
Sales models mapped onto the platform's transaction tables.

A sale writes three kinds of rows:
- ``transactions``: the bill header with a JSON snapshot of its lines
- ``transaction_items``: one SALE row per line, plus REFUND rows later
- ``billing_items``: the still-refundable quantity and line total per line
"""

from decimal import Decimal

from django.db import models
from django.utils import timezone

from apps.catalog.models import Product
from apps.core.utils import to_local


class Transaction(models.Model):
    """
    A completed sale (bill).
    """

    SALE = "SALE"

    TRANSACTION_TYPE_CHOICES = [
        (SALE, "Sale"),
    ]

    user_id = models.UUIDField(db_index=True)
    transaction_type = models.CharField(
        max_length=20, choices=TRANSACTION_TYPE_CHOICES, default=SALE
    )
    daily_bill_no = models.PositiveIntegerField(help_text="Bill number within the local day")
    sales_date = models.DateField(
        db_index=True, editable=False, help_text="Local business day the bill belongs to"
    )
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    cash_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    upi_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    products = models.JSONField(default=list, blank=True)
    applied_offer_ids = models.JSONField(default=list, blank=True)
    refund = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "transactions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user_id", "created_at"], name="txn_user_created_idx"),
            models.Index(fields=["user_id", "daily_bill_no"], name="txn_user_bill_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "sales_date", "daily_bill_no"], name="txn_user_day_bill_uniq"
            ),
        ]

    def __str__(self):
        return f"Bill {self.daily_bill_no} ({self.id})"

    def save(self, *args, **kwargs):
        if self.sales_date is None:
            self.sales_date = to_local(self.created_at or timezone.now()).date()
        super().save(*args, **kwargs)

    @property
    def subtotal(self) -> Decimal:
        return (self.total_amount or Decimal("0")) + (self.discount or Decimal("0"))


class TransactionItem(models.Model):
    """
    Sold or refunded quantity of one product on a bill.
    """

    SALE = "SALE"
    REFUND = "REFUND"

    ITEM_TYPE_CHOICES = [
        (SALE, "Sale"),
        (REFUND, "Refund"),
    ]

    transaction = models.ForeignKey(
        Transaction, on_delete=models.CASCADE, related_name="items", db_column="transaction_id"
    )
    user_id = models.UUIDField(db_index=True)
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transaction_items",
        db_column="product_id",
    )
    quantity = models.IntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    item_type = models.CharField(max_length=10, choices=ITEM_TYPE_CHOICES, default=SALE)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "transaction_items"
        ordering = ["id"]

    def __str__(self):
        return f"{self.item_type} {self.quantity} x {self.product_id}"


class BillingItem(models.Model):
    """
    The refundable remainder of one bill line.

    ``price`` is the line total for the remaining ``quantity``.
    """

    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name="billing_items",
        db_column="transaction_id",
    )
    menu_item = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="billing_items",
        db_column="menu_item_id",
    )
    quantity = models.IntegerField()
    price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = "billing_items"
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity} x {self.menu_item_id} on {self.transaction_id}"
