"""
Catalog models: products, offers, today's menu and special numbers.

All tables belong to the hosted platform. Rows are owned by the platform auth
user through ``user_id``.
"""

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Product(models.Model):
    """
    A sellable item with its stock on hand.
    """

    user_id = models.UUIDField(db_index=True)
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, default="")
    quantity = models.IntegerField(default=0, help_text="Stock on hand")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["user_id", "category"], name="product_user_category_idx"),
        ]

    def __str__(self):
        return self.name


class Offer(models.Model):
    """
    A discount applied automatically at checkout to the listed products.

    Recurring offers run every week on ``day_of_week`` (0 = Sunday). One-off
    offers run between ``start_date`` and ``end_date``.
    """

    PERCENTAGE = "percentage"
    BOGO = "bogo"

    DISCOUNT_TYPE_CHOICES = [
        (PERCENTAGE, "Percentage"),
        (BOGO, "Buy one get one"),
    ]

    user_id = models.UUIDField(db_index=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    product_ids = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    is_recurring = models.BooleanField(default=False)
    discount_type = models.CharField(
        max_length=20, choices=DISCOUNT_TYPE_CHOICES, default=PERCENTAGE
    )
    discount_value = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    day_of_week = models.SmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(6)],
    )
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "offers"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.name

    def applies_to(self, product_id) -> bool:
        return int(product_id) in {int(pid) for pid in (self.product_ids or [])}


class TodaysMenu(models.Model):
    """
    A product put on sale for one local day, with that day's price and stock.
    """

    user_id = models.UUIDField(db_index=True)
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="menu_entries", db_column="product_id"
    )
    menu_date = models.DateField()
    name = models.CharField(max_length=255, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    quantity = models.IntegerField(default=0)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "todays_menu"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "product", "menu_date"], name="unique_menu_entry_per_day"
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.menu_date})"


class SpecialNumber(models.Model):
    """
    The day's lucky bill number. The sale that gets it is free.
    """

    user_id = models.UUIDField(db_index=True)
    date = models.DateField()
    number = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(100)]
    )

    class Meta:
        db_table = "special_numbers"
        constraints = [
            models.UniqueConstraint(fields=["date", "user_id"], name="unique_special_number_per_day"),
        ]

    def __str__(self):
        return f"{self.date}: {self.number}"
