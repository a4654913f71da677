"""
Inventory models for stock written off outside of sales.
"""

from decimal import Decimal

from django.db import models
from django.utils import timezone

from apps.catalog.models import Product


class LossDumpLog(models.Model):
    """
    Stock written off as a loss (broken, spilled) or dumped (expired, unsold).
    """

    LOSS = "LOSS"
    DUMP = "DUMP"

    LOG_TYPE_CHOICES = [
        (LOSS, "Loss"),
        (DUMP, "Dump"),
    ]

    user_id = models.UUIDField(db_index=True)
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="loss_dump_logs",
        db_column="product_id",
    )
    log_type = models.CharField(max_length=10, choices=LOG_TYPE_CHOICES)
    quantity = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    reason = models.TextField(blank=True, default="")
    logged_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "loss_dump_logs"
        ordering = ["-logged_at"]
        indexes = [
            models.Index(fields=["user_id", "logged_at"], name="lossdump_user_logged_idx"),
        ]

    def __str__(self):
        return f"{self.log_type} {self.quantity} x {self.product_id}"
