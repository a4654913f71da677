"""
Tests for the Excel sales export.

Tests cover:
- Parameter validation and empty ranges
- Workbook layout, header styling and row content
- File naming for daily and monthly exports
"""

from datetime import timedelta
from decimal import Decimal
from io import BytesIO

from django.utils import timezone

import pytest
from openpyxl import load_workbook

from apps.core.utils import local_today
from apps.sales.models import Transaction

EXPORT_URL = "/api/exports/sales"


def _workbook(response):
    return load_workbook(BytesIO(response.content))


@pytest.mark.django_db
class TestSalesExport:
    """Test GET /api/exports/sales."""

    def _params(self, export_type="daily", start=None, end=None):
        today = local_today().isoformat()
        return {
            "type": export_type,
            "dateRangeStart": start or today,
            "dateRangeEnd": end or today,
        }

    def test_invalid_type(self, api_client):
        response = api_client.get(EXPORT_URL, self._params(export_type="weekly"))

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid export parameters"}

    def test_missing_dates(self, api_client):
        response = api_client.get(EXPORT_URL, {"type": "daily"})

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid export parameters"}

    def test_no_transactions(self, api_client):
        response = api_client.get(EXPORT_URL, self._params())

        assert response.status_code == 404
        assert response.json() == {"message": "No transactions found."}

    def test_daily_export(self, api_client, transaction_factory, product_factory):
        chai = product_factory(price="20.00")
        bun = product_factory(name="Bun Maska", price="30.00")
        sale = transaction_factory([(chai, 2), (bun, 1)], bill_no=5, upi="70.00")

        params = self._params()
        response = api_client.get(EXPORT_URL, params)

        assert response.status_code == 200
        assert response["Content-Type"] == (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert response["Content-Disposition"] == (
            f'attachment; filename="Daily_Transactions_{params["dateRangeStart"]}'
            f'_to_{params["dateRangeEnd"]}.xlsx"'
        )

        ws = _workbook(response)["Sales Export"]
        rows = list(ws.iter_rows(values_only=True))
        assert rows[0] == (
            "Txn ID", "Bill No", "Date & Time", "Product Name", "Qty",
            "Price", "Line Total", "Discount", "Cash Paid", "UPI Paid",
        )
        assert len(rows) == 3
        assert rows[1][:2] == (sale.id, 5)
        assert rows[1][3:7] == ("Masala Chai", 2, 20, 40)
        assert rows[2][3:7] == ("Bun Maska", 1, 30, 30)
        assert rows[1][9] == 70

    def test_header_styling_and_widths(self, api_client, transaction_factory, product_factory):
        transaction_factory([(product_factory(), 1)])

        ws = _workbook(api_client.get(EXPORT_URL, self._params()))["Sales Export"]

        header = ws["A1"]
        assert header.font.bold is True
        assert header.font.color.rgb.endswith("333333")
        assert header.fill.start_color.rgb.endswith("EBEBEB")
        assert header.alignment.horizontal == "center"
        assert header.border.bottom.style == "thick"
        assert ws.column_dimensions["A"].width == 12
        assert ws.column_dimensions["C"].width == 22
        assert ws.column_dimensions["D"].width == 25

    def test_bill_without_lines_gets_placeholder_row(self, api_client, user_id):
        Transaction.objects.create(
            user_id=user_id, daily_bill_no=1, total_amount=Decimal("10.00"),
            cash_paid=Decimal("10.00"), products=[],
        )

        ws = _workbook(api_client.get(EXPORT_URL, self._params()))["Sales Export"]
        row = list(ws.iter_rows(min_row=2, values_only=True))[0]

        assert row[3:7] == ("—", "—", "—", "—")
        assert row[8] == 10

    def test_monthly_export_name_and_range(self, api_client, transaction_factory, product_factory):
        chai = product_factory()
        transaction_factory([(chai, 1)], bill_no=1)
        transaction_factory(
            [(chai, 1)], bill_no=2, created_at=timezone.now() - timedelta(days=40)
        )
        start = (local_today() - timedelta(days=5)).isoformat()

        response = api_client.get(EXPORT_URL, self._params("monthly", start=start))

        assert response.status_code == 200
        assert "Monthly_Transactions_" in response["Content-Disposition"]
        rows = list(_workbook(response)["Sales Export"].iter_rows(min_row=2, values_only=True))
        assert [row[1] for row in rows] == [1]

    def test_other_users_transactions_excluded(self, api_client, other_user_id,
                                               transaction_factory, product_factory):
        foreign = product_factory(owner=other_user_id)
        transaction_factory([(foreign, 1)], owner=other_user_id)

        response = api_client.get(EXPORT_URL, self._params())

        assert response.status_code == 404
