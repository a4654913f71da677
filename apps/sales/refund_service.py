"""
Refund bookkeeping for completed bills.

A refund reduces the refundable quantity on the bill's billing rows, writes
REFUND transaction items, puts the stock back and appends the refunded lines
to the bill's ``refund`` history.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from rest_framework.exceptions import NotFound

from apps.catalog.models import Product
from apps.core.exceptions import RefundError
from apps.core.utils import local_today, round_money
from apps.reporting.services import DailySalesSummaryService

from .models import BillingItem, Transaction, TransactionItem

logger = logging.getLogger(__name__)


def _to_int(value) -> Optional[int]:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


class RefundService:
    """
    Validates and records refunds against billing items.
    """

    DEFAULT_MODE = "cash"

    @staticmethod
    def normalize_entries(entries) -> List[Dict[str, int]]:
        """
        Validate the request's entries.

        Raises:
            RefundError: If an entry has no billing item or a non-positive quantity
        """
        normalized = []
        for entry in entries:
            entry = entry if isinstance(entry, dict) else {}
            billing_item_id = _to_int(entry.get("billing_item_id"))
            refund_qty = _to_int(entry.get("refund_qty"))
            if not billing_item_id or refund_qty is None or refund_qty <= 0:
                raise RefundError("Each entry must include billing_item_id and refund_qty > 0")
            normalized.append({"billing_item_id": billing_item_id, "refund_qty": refund_qty})
        return normalized

    @staticmethod
    def reasons_text(reasons, other_reason) -> str:
        if isinstance(reasons, list) and reasons:
            return ", ".join(str(reason) for reason in reasons)
        return other_reason or "N/A"

    @classmethod
    @transaction.atomic
    def record_refund(cls, user_id, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Record a refund for one of the user's bills.

        Returns the response body: ``ok``, ``transaction_id``, ``newRefund``
        (the merged refund JSON), ``refunded_amount`` and ``entries``.

        Raises:
            RefundError: For malformed requests or quantities beyond what is refundable
            NotFound: If the bill does not exist for this user
        """
        transaction_id = _to_int(payload.get("transaction_id"))
        entries = payload.get("entries")
        if not transaction_id or not isinstance(entries, list) or not entries:
            raise RefundError("transaction_id and non-empty entries are required")

        normalized = cls.normalize_entries(entries)
        mode = payload.get("mode") or cls.DEFAULT_MODE
        reasons = payload.get("reasons") or []
        other_reason = payload.get("other_reason") or ""
        refunded_by = payload.get("refunded_by")

        try:
            sale = Transaction.objects.select_for_update().get(id=transaction_id, user_id=user_id)
        except Transaction.DoesNotExist:
            raise NotFound("Transaction not found")

        billing_ids = [entry["billing_item_id"] for entry in normalized]
        billing_rows = {
            row.id: row
            for row in BillingItem.objects.select_for_update()
            .select_related("menu_item")
            .filter(id__in=billing_ids)
        }

        # Quantities requested per billing row across all entries
        requested: Dict[int, int] = {}
        for entry in normalized:
            billing_id = entry["billing_item_id"]
            row = billing_rows.get(billing_id)
            if row is None:
                raise RefundError(f"Billing item {billing_id} not found")
            if row.transaction_id != sale.id:
                raise RefundError(f"Billing item {billing_id} does not belong to the transaction")
            if row.quantity <= 0:
                raise RefundError(f"Billing item {billing_id} has zero quantity")
            requested[billing_id] = requested.get(billing_id, 0) + entry["refund_qty"]
            if requested[billing_id] > row.quantity:
                raise RefundError(
                    f"Refund qty for billing item {billing_id} exceeds purchased quantity"
                )

        now = timezone.now()
        refunded_at = now.isoformat()
        refund_total = Decimal("0.00")
        processed = []

        for entry in normalized:
            row = billing_rows[entry["billing_item_id"]]
            qty = entry["refund_qty"]
            per_unit = row.price / row.quantity
            amount = round_money(per_unit * qty)
            refund_total += amount

            product = row.menu_item
            processed.append(
                {
                    "billing_item_id": row.id,
                    "product_id": row.menu_item_id,
                    "product_name": product.name if product else f"#{row.menu_item_id}",
                    "refund_qty": qty,
                    "per_unit_price": float(round_money(per_unit)),
                    "refund_amount": float(amount),
                    "refunded_at": refunded_at,
                    "refunded_by": refunded_by,
                }
            )

            remaining = row.quantity - qty
            if remaining > 0:
                row.price = round_money(per_unit * remaining)
                row.quantity = remaining
                row.save(update_fields=["quantity", "price"])
            else:
                row.delete()

            TransactionItem.objects.create(
                transaction=sale,
                user_id=user_id,
                product=product,
                quantity=qty,
                unit_price=round_money(per_unit),
                item_type=TransactionItem.REFUND,
                created_at=now,
            )

            if product is not None:
                Product.objects.filter(id=product.id).update(
                    quantity=F("quantity") + qty, updated_at=now
                )

        refund_total = round_money(refund_total)
        existing = sale.refund if isinstance(sale.refund, dict) else {}
        new_refund = {
            **existing,
            "last_refund_mode": mode,
            "last_refund_reasons": cls.reasons_text(reasons, other_reason),
            "history": list(existing.get("history") or []) + processed,
            "last_refunded_at": refunded_at,
            "last_refund_total": float(refund_total),
        }
        sale.refund = new_refund
        sale.save(update_fields=["refund"])

        DailySalesSummaryService.rebuild(user_id, local_today())

        logger.info(
            f"Refunded {refund_total} on bill {sale.daily_bill_no} ({sale.id}) "
            f"for {user_id}: {len(processed)} line(s), mode {mode}"
        )

        return {
            "ok": True,
            "transaction_id": sale.id,
            "newRefund": new_refund,
            "refunded_amount": float(refund_total),
            "entries": processed,
        }

    @staticmethod
    def list_refunds(user_id) -> List[Dict[str, Any]]:
        """The user's bills that carry refund data, newest first."""
        rows = (
            Transaction.objects.filter(user_id=user_id)
            .exclude(refund={})
            .exclude(refund__isnull=True)
            .order_by("-created_at")
            .values("id", "refund", "created_at", "user_id")
        )
        return list(rows)
