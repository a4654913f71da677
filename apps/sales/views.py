"""
Views for checkout, transactions, invoices and refunds.
"""

import logging
from urllib.parse import urlencode

from django.conf import settings
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.template.loader import render_to_string
from django.urls import reverse

from rest_framework import generics, status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from apps.core.utils import local_day_bounds, parse_date, to_local

from .models import Transaction
from .receipt_service import ReceiptService
from .refund_service import RefundService
from .serializers import CheckoutSerializer, TransactionSerializer

logger = logging.getLogger(__name__)


def _token_suffix(request) -> dict:
    """Carry the token along only when it came in the query string."""
    if getattr(request, "token_in_query", False) and request.auth:
        return {"token": request.auth}
    return {}


def _date_param(request, name):
    raw = request.query_params.get(name)
    if not raw:
        return None
    value = parse_date(raw)
    if value is None:
        raise ValidationError({name: "Expected a date in YYYY-MM-DD format."})
    return value


# Checkout


@api_view(["POST"])
def checkout(request):
    """
    Complete a sale.

    Request body:
    {
        "items": [{"product_id": 1, "quantity": 2}],
        "cash_paid": "50.00",
        "upi_paid": "0.00"
    }
    """
    serializer = CheckoutSerializer(data=request.data, context={"request": request})
    serializer.is_valid(raise_exception=True)
    sale = serializer.save()

    return Response(
        {
            "transaction": TransactionSerializer(sale).data,
            "change_due": sale.change_due,
            "special": sale.special,
            "applied_offers": sale.applied_offer_names,
        },
        status=status.HTTP_201_CREATED,
    )


# Transactions


@api_view(["GET"])
def transaction_list(request):
    """
    HTML table of the caller's bills, newest first.

    Query parameters:
    - start: First local day (YYYY-MM-DD)
    - end: Last local day (YYYY-MM-DD)
    """
    queryset = Transaction.objects.filter(user_id=request.user.id).order_by("-created_at")

    start = _date_param(request, "start")
    if start:
        queryset = queryset.filter(created_at__gte=local_day_bounds(start)[0])

    end = _date_param(request, "end")
    if end:
        queryset = queryset.filter(created_at__lt=local_day_bounds(end)[1])

    suffix = _token_suffix(request)
    rows = []
    for sale in queryset:
        invoice_url = reverse("sales:transaction_invoice", kwargs={"bill_no": sale.daily_bill_no})
        if suffix:
            invoice_url = f"{invoice_url}?{urlencode(suffix)}"
        rows.append(
            {
                "id": sale.id,
                "bill_no": sale.daily_bill_no,
                "date": to_local(sale.created_at).strftime("%d %b %Y %H:%M"),
                "total": sale.total_amount,
                "discount": sale.discount,
                "cash": sale.cash_paid,
                "upi": sale.upi_paid,
                "invoice_url": invoice_url,
            }
        )

    logger.debug(f"Listing {len(rows)} transactions for {request.user.id}")
    html = render_to_string(
        "sales/transaction_list.html", {"rows": rows, "shop_name": settings.SHOP_NAME}
    )
    return HttpResponse(html, content_type="text/html; charset=utf-8")


class TransactionDetailView(generics.RetrieveAPIView):
    """
    API endpoint for retrieving a single bill as JSON.
    """

    serializer_class = TransactionSerializer

    def get_queryset(self):
        return Transaction.objects.filter(user_id=self.request.user.id).prefetch_related(
            "items__product", "billing_items__menu_item"
        )


@api_view(["GET"])
def transaction_invoice(request, bill_no):
    """
    Invoice for the caller's latest bill with this daily bill number.

    ``?format=pdf`` downloads an 80mm thermal PDF instead of the HTML page.
    """
    sale = (
        Transaction.objects.filter(user_id=request.user.id, daily_bill_no=bill_no)
        .order_by("-created_at")
        .first()
    )
    if sale is None:
        raise NotFound("Transaction not found for this user")

    if request.query_params.get("format", "").lower() == "pdf":
        pdf_bytes = ReceiptService.generate_invoice(sale, output_format="pdf")
        response = HttpResponse(pdf_bytes, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="Invoice_TX-{bill_no}.pdf"'
        return response

    pdf_url = f"{request.path}?{urlencode({'format': 'pdf', **_token_suffix(request)})}"
    html = ReceiptService.generate_invoice(sale, output_format="html", pdf_url=pdf_url)
    return HttpResponse(html, content_type="text/html; charset=utf-8")


# Refunds


@api_view(["POST"])
def record_refund(request):
    """
    Refund quantities from a bill's billing items.

    Request body:
    {
        "transaction_id": 12,
        "entries": [{"billing_item_id": 30, "refund_qty": 1}],
        "mode": "cash",
        "reasons": ["Spilled"],
        "other_reason": "",
        "refunded_by": null
    }
    """
    payload = request.data if isinstance(request.data, dict) else {}
    result = RefundService.record_refund(request.user.id, payload)
    return Response(result, status=status.HTTP_200_OK)


@api_view(["GET"])
def refund_list(request):
    return Response({"success": True, "refunds": RefundService.list_refunds(request.user.id)})


@api_view(["GET"])
def refund_receipt(request, transaction_id):
    """
    Refund receipt for a bill, HTML by default or PDF with ``?format=pdf``.
    """
    if not str(transaction_id).isdigit():
        raise ValidationError("invalid transaction_id")
    pk = int(transaction_id)

    sale = get_object_or_404(Transaction, id=pk, user_id=request.user.id)

    if request.query_params.get("format", "").lower() == "pdf":
        pdf_bytes = ReceiptService.generate_refund_receipt(sale, output_format="pdf")
        response = HttpResponse(pdf_bytes, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="refund_{pk}.pdf"'
        return response

    html = ReceiptService.generate_refund_receipt(sale, output_format="html")
    return HttpResponse(html, content_type="text/html; charset=utf-8")
