"""
Tests for refunds.

Tests cover:
- Request validation and refund rules
- Billing row, stock and refund history bookkeeping
- Refund listing and receipts
"""

from decimal import Decimal

import pytest

from apps.sales.models import BillingItem, Transaction, TransactionItem
from apps.sales.refund_service import RefundService


def _billing_row(sale, product):
    return BillingItem.objects.get(transaction=sale, menu_item=product)


@pytest.mark.django_db
class TestRecordRefund:
    """Test POST /api/refund/record."""

    def test_partial_refund(self, api_client, transaction_factory, product_factory):
        chai = product_factory(price="20.00", quantity=10)
        sale = transaction_factory([(chai, 3)])
        row = _billing_row(sale, chai)

        response = api_client.post(
            "/api/refund/record",
            {
                "transaction_id": sale.id,
                "entries": [{"billing_item_id": row.id, "refund_qty": 1}],
                "mode": "upi",
                "reasons": ["Spilled", "Too sweet"],
            },
            format="json",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["transaction_id"] == sale.id
        assert data["refunded_amount"] == 20.0
        assert data["entries"][0]["product_name"] == "Masala Chai"
        assert data["entries"][0]["per_unit_price"] == 20.0
        assert data["newRefund"]["last_refund_mode"] == "upi"
        assert data["newRefund"]["last_refund_reasons"] == "Spilled, Too sweet"

        row.refresh_from_db()
        assert row.quantity == 2
        assert row.price == Decimal("40.00")

        chai.refresh_from_db()
        assert chai.quantity == 11

        refund_item = TransactionItem.objects.get(transaction=sale, item_type=TransactionItem.REFUND)
        assert refund_item.quantity == 1
        assert refund_item.unit_price == Decimal("20.00")

    def test_full_refund_deletes_billing_row(self, api_client, transaction_factory, product_factory):
        chai = product_factory(price="20.00")
        sale = transaction_factory([(chai, 2)])
        row = _billing_row(sale, chai)

        response = api_client.post(
            "/api/refund/record",
            {"transaction_id": sale.id, "entries": [{"billing_item_id": row.id, "refund_qty": 2}]},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["refunded_amount"] == 40.0
        assert not BillingItem.objects.filter(id=row.id).exists()

    def test_refund_history_accumulates(self, api_client, transaction_factory, product_factory):
        chai = product_factory(price="20.00")
        sale = transaction_factory([(chai, 3)])
        row = _billing_row(sale, chai)

        for _ in range(2):
            api_client.post(
                "/api/refund/record",
                {
                    "transaction_id": sale.id,
                    "entries": [{"billing_item_id": row.id, "refund_qty": 1}],
                    "other_reason": "Cold",
                },
                format="json",
            )

        sale.refresh_from_db()
        assert len(sale.refund["history"]) == 2
        assert sale.refund["last_refund_mode"] == "cash"
        assert sale.refund["last_refund_reasons"] == "Cold"
        assert sale.refund["last_refund_total"] == 20.0

    def test_refund_over_purchased_quantity_rejected(self, api_client, transaction_factory,
                                                     product_factory):
        chai = product_factory()
        sale = transaction_factory([(chai, 2)])
        row = _billing_row(sale, chai)

        response = api_client.post(
            "/api/refund/record",
            {"transaction_id": sale.id, "entries": [{"billing_item_id": row.id, "refund_qty": 3}]},
            format="json",
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": f"Refund qty for billing item {row.id} exceeds purchased quantity"
        }

    def test_duplicate_entries_summed_against_limit(self, api_client, transaction_factory,
                                                    product_factory):
        chai = product_factory(quantity=5)
        sale = transaction_factory([(chai, 2)])
        row = _billing_row(sale, chai)

        response = api_client.post(
            "/api/refund/record",
            {
                "transaction_id": sale.id,
                "entries": [
                    {"billing_item_id": row.id, "refund_qty": 2},
                    {"billing_item_id": row.id, "refund_qty": 1},
                ],
            },
            format="json",
        )

        assert response.status_code == 400
        chai.refresh_from_db()
        assert chai.quantity == 5

    def test_missing_entries_rejected(self, api_client, transaction_factory, product_factory):
        sale = transaction_factory([(product_factory(), 1)])

        response = api_client.post(
            "/api/refund/record", {"transaction_id": sale.id, "entries": []}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["error"] == "transaction_id and non-empty entries are required"

    def test_non_positive_quantity_rejected(self, api_client, transaction_factory, product_factory):
        chai = product_factory()
        sale = transaction_factory([(chai, 1)])
        row = _billing_row(sale, chai)

        response = api_client.post(
            "/api/refund/record",
            {"transaction_id": sale.id, "entries": [{"billing_item_id": row.id, "refund_qty": 0}]},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error"] == (
            "Each entry must include billing_item_id and refund_qty > 0"
        )

    def test_billing_item_from_another_bill_rejected(self, api_client, transaction_factory,
                                                     product_factory):
        chai = product_factory()
        sale = transaction_factory([(chai, 1)], bill_no=1)
        other = transaction_factory([(chai, 1)], bill_no=2)
        foreign_row = _billing_row(other, chai)

        response = api_client.post(
            "/api/refund/record",
            {
                "transaction_id": sale.id,
                "entries": [{"billing_item_id": foreign_row.id, "refund_qty": 1}],
            },
            format="json",
        )

        assert response.status_code == 400
        assert "does not belong to the transaction" in response.json()["error"]

    def test_unknown_billing_item_rejected(self, api_client, transaction_factory, product_factory):
        sale = transaction_factory([(product_factory(), 1)])

        response = api_client.post(
            "/api/refund/record",
            {"transaction_id": sale.id, "entries": [{"billing_item_id": 9999, "refund_qty": 1}]},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Billing item 9999 not found"

    def test_other_users_bill_not_found(self, api_client, other_user_id, transaction_factory,
                                        product_factory):
        foreign = product_factory(owner=other_user_id)
        sale = transaction_factory([(foreign, 1)], owner=other_user_id)
        row = _billing_row(sale, foreign)

        response = api_client.post(
            "/api/refund/record",
            {"transaction_id": sale.id, "entries": [{"billing_item_id": row.id, "refund_qty": 1}]},
            format="json",
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Transaction not found"}

    def test_refund_after_checkout(self, api_client, checkout, product_factory):
        chai = product_factory(price="20.00", quantity=10)
        sale_id = checkout([(chai, 2)], cash="40.00").json()["transaction"]["id"]
        row = BillingItem.objects.get(transaction_id=sale_id)

        response = api_client.post(
            "/api/refund/record",
            {"transaction_id": sale_id, "entries": [{"billing_item_id": row.id, "refund_qty": 1}]},
            format="json",
        )

        assert response.status_code == 200
        chai.refresh_from_db()
        assert chai.quantity == 9


@pytest.mark.django_db
class TestRefundListAndReceipt:
    """Test refund listing and receipt rendering."""

    def _refund(self, user_id, sale, product, qty=1):
        row = _billing_row(sale, product)
        return RefundService.record_refund(
            user_id,
            {"transaction_id": sale.id, "entries": [{"billing_item_id": row.id, "refund_qty": qty}]},
        )

    def test_refund_list_only_includes_refunded_bills(self, api_client, user_id,
                                                      transaction_factory, product_factory):
        chai = product_factory()
        refunded = transaction_factory([(chai, 2)], bill_no=1)
        transaction_factory([(chai, 1)], bill_no=2)
        self._refund(user_id, refunded, chai)

        response = api_client.get("/api/refund/list")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [row["id"] for row in data["refunds"]] == [refunded.id]
        assert data["refunds"][0]["refund"]["history"][0]["refund_qty"] == 1

    def test_refund_receipt_html(self, api_client, user_id, transaction_factory, product_factory):
        chai = product_factory(price="20.00")
        sale = transaction_factory([(chai, 3)], bill_no=8)
        self._refund(user_id, sale, chai, qty=2)

        response = api_client.get(f"/api/refund/{sale.id}/receipt")

        assert response.status_code == 200
        content = response.content.decode()
        assert "Refund For Bill:" in content
        assert "REFUND TOTAL" in content
        assert "40.00" in content
        assert "*** Refund Processed Successfully ***" in content

    def test_refund_receipt_pdf(self, api_client, user_id, transaction_factory, product_factory):
        chai = product_factory()
        sale = transaction_factory([(chai, 1)])
        self._refund(user_id, sale, chai)

        response = api_client.get(f"/api/refund/{sale.id}/receipt?format=pdf")

        assert response.status_code == 200
        assert response["Content-Disposition"] == f'attachment; filename="refund_{sale.id}.pdf"'
        assert response.content.startswith(b"%PDF")

    def test_refund_receipt_invalid_id(self, api_client):
        response = api_client.get("/api/refund/abc/receipt")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid transaction_id"

    @pytest.mark.parametrize("transaction_id", ["1_1", "%201", "-1"])
    def test_refund_receipt_rejects_loosely_numeric_id(self, api_client, transaction_id):
        response = api_client.get(f"/api/refund/{transaction_id}/receipt")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid transaction_id"

    def test_refund_receipt_unknown_bill(self, api_client):
        response = api_client.get("/api/refund/424242/receipt")

        assert response.status_code == 404


@pytest.mark.django_db
def test_refund_list_excludes_other_users(api_client, other_user_id, transaction_factory,
                                          product_factory):
    foreign = product_factory(owner=other_user_id)
    sale = transaction_factory([(foreign, 2)], owner=other_user_id)
    RefundService.record_refund(
        other_user_id,
        {
            "transaction_id": sale.id,
            "entries": [{"billing_item_id": _billing_row(sale, foreign).id, "refund_qty": 1}],
        },
    )

    response = api_client.get("/api/refund/list")

    assert response.json()["refunds"] == []
    assert Transaction.objects.filter(id=sale.id).exclude(refund={}).exists()
