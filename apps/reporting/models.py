"""
Reporting models.
"""

from decimal import Decimal

from django.db import models


class DailySalesSummary(models.Model):
    """
    One row per shop owner per local day, rebuilt from that day's activity.

    Feeds the dashboard and the sales report PDF.
    """

    user_id = models.UUIDField(db_index=True)
    sales_date = models.DateField()
    total_sales = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_loss = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_dump = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    items_sold = models.IntegerField(default=0)
    closing_items = models.IntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "daily_sales_summary"
        ordering = ["sales_date"]
        verbose_name = "Daily Sales Summary"
        verbose_name_plural = "Daily Sales Summaries"
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "sales_date"], name="unique_daily_summary_per_user"
            ),
        ]

    def __str__(self):
        return f"{self.sales_date}: {self.total_sales}"
