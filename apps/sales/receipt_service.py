"""
Invoice and refund receipt rendering.

Both documents come in two flavours:
- HTML for the browser, rendered from Django templates
- 80mm thermal PDF built with ReportLab

The built-in PDF fonts have no rupee glyph, so PDFs print amounts as "Rs.".
"""

import io
from decimal import Decimal
from typing import Any, Dict, List
from xml.sax.saxutils import escape

from django.conf import settings
from django.template.loader import render_to_string
from django.utils.dateparse import parse_datetime

from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import HRFlowable

from apps.catalog.models import Offer, Product
from apps.core.utils import local_now, round_money, to_local

from .models import Transaction, TransactionItem

INVOICE_DATE_FORMAT = "%d-%b-%Y %H:%M"


def _money(value) -> Decimal:
    try:
        return round_money(value or 0)
    except ArithmeticError:
        return Decimal("0.00")


def _shop_details() -> Dict[str, str]:
    return {
        "shop_name": settings.SHOP_NAME,
        "address": settings.SHOP_ADDRESS,
        "phone": settings.SHOP_PHONE,
    }


def build_invoice_data(sale: Transaction) -> Dict[str, Any]:
    """
    Collect everything printed on a sale invoice.

    Lines come from the SALE transaction items, falling back to the JSON
    snapshot on the bill, and finally to one "Total Transaction" line.
    """
    sale_items = list(
        sale.items.filter(item_type=TransactionItem.SALE).select_related("product")
    )
    items: List[Dict[str, Any]] = []

    if sale_items:
        for item in sale_items:
            price = _money(item.unit_price)
            items.append(
                {
                    "qty": item.quantity,
                    "name": item.product.name if item.product else "Unknown Product",
                    "price": price,
                    "amt": _money(price * item.quantity),
                }
            )
    elif isinstance(sale.products, list) and sale.products:
        ids = [line.get("product_id") for line in sale.products if line.get("product_id")]
        names = dict(Product.objects.filter(id__in=ids).values_list("id", "name"))
        for line in sale.products:
            price = _money(line.get("price"))
            qty = int(line.get("quantity") or 0)
            items.append(
                {
                    "qty": qty,
                    "name": names.get(line.get("product_id")) or "Unknown Product",
                    "price": price,
                    "amt": _money(price * qty),
                }
            )
    else:
        subtotal = _money(sale.subtotal)
        items.append({"qty": 1, "name": "Total Transaction", "price": subtotal, "amt": subtotal})

    applied_offers: List[str] = []
    if sale.applied_offer_ids:
        names = Offer.objects.filter(id__in=sale.applied_offer_ids).values_list("name", flat=True)
        applied_offers = list(dict.fromkeys(names))

    return {
        **_shop_details(),
        "bill_no": sale.daily_bill_no,
        "date": to_local(sale.created_at).strftime(INVOICE_DATE_FORMAT),
        "items": items,
        "subtotal": _money(sum((item["amt"] for item in items), Decimal("0"))),
        "discount": _money(sale.discount),
        "applied_offers": applied_offers,
        "cash_paid": _money(sale.cash_paid),
        "upi_paid": _money(sale.upi_paid),
        "total": _money(sale.total_amount),
    }


def build_refund_data(sale: Transaction) -> Dict[str, Any]:
    """
    Collect the refunded lines recorded in the bill's refund history.
    """
    refund = sale.refund if isinstance(sale.refund, dict) else {}
    history = refund.get("history") or []

    items = [
        {
            "qty": int(entry.get("refund_qty") or 0),
            "name": entry.get("product_name") or "Unknown Product",
            "price": _money(entry.get("per_unit_price")),
            "amt": _money(entry.get("refund_amount")),
        }
        for entry in history
    ]
    total = _money(sum((item["amt"] for item in items), Decimal("0")))

    refunded_at = refund.get("last_refunded_at")
    if refunded_at:
        parsed = parse_datetime(refunded_at)
        refund_date = to_local(parsed) if parsed else local_now()
    else:
        refund_date = local_now()

    return {
        **_shop_details(),
        "bill_no": sale.daily_bill_no,
        "transaction_id": sale.id,
        "date": to_local(sale.created_at).strftime(INVOICE_DATE_FORMAT),
        "refund_date": refund_date.strftime(INVOICE_DATE_FORMAT),
        "items": items,
        "total": total,
        "mode": refund.get("last_refund_mode", ""),
        "reasons": refund.get("last_refund_reasons", ""),
    }


class ReceiptGenerator:
    """
    Thermal (80mm) PDF generator for invoices and refund receipts.
    """

    THERMAL_WIDTH = 80 * mm
    THERMAL_MARGIN = 4 * mm
    CURRENCY = "Rs."

    def __init__(self, data: Dict[str, Any]):
        self.data = data
        self.styles = getSampleStyleSheet()
        self._create_custom_styles()

    def _create_custom_styles(self):
        """Create custom paragraph styles for receipts."""
        self.shop_style = ParagraphStyle(
            "ThermalShop",
            parent=self.styles["Heading1"],
            fontSize=13,
            spaceAfter=2,
            alignment=1,  # Center alignment
            textColor=colors.black,
            fontName="Helvetica-Bold",
        )

        self.info_style = ParagraphStyle(
            "ThermalInfo",
            parent=self.styles["Normal"],
            fontSize=7,
            leading=9,
            alignment=1,
            textColor=colors.black,
        )

        self.body_style = ParagraphStyle(
            "ThermalBody",
            parent=self.styles["Normal"],
            fontSize=7,
            leading=9,
            alignment=0,  # Left alignment
            textColor=colors.black,
        )

        self.offers_style = ParagraphStyle(
            "ThermalOffers",
            parent=self.body_style,
            fontSize=6,
            alignment=2,  # Right alignment
        )

    def _page_height(self, extra_rows: int) -> float:
        rows = len(self.data["items"]) + extra_rows
        return max(120 * mm, (70 + rows * 6) * mm)

    def _build_doc(self, story, extra_rows: int) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=(self.THERMAL_WIDTH, self._page_height(extra_rows)),
            rightMargin=self.THERMAL_MARGIN,
            leftMargin=self.THERMAL_MARGIN,
            topMargin=self.THERMAL_MARGIN,
            bottomMargin=self.THERMAL_MARGIN,
            title=f"Bill {self.data['bill_no']}",
        )
        doc.build(story)
        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes

    def _dashed_rule(self):
        return HRFlowable(
            width="100%", thickness=0.5, color=colors.grey, dash=(2, 2), spaceBefore=3, spaceAfter=3
        )

    def _build_shop_header(self):
        return [
            Paragraph(escape(self.data["shop_name"]), self.shop_style),
            Paragraph(escape(self.data["address"]), self.info_style),
            Paragraph(escape(f"Ph: {self.data['phone']}"), self.info_style),
            self._dashed_rule(),
        ]

    def _build_meta_row(self, left: str, right: str):
        table = Table([[left, right]], colWidths=[30 * mm, 42 * mm])
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
                    ("FONTSIZE", (0, 0), (-1, -1), 7),
                    ("ALIGN", (1, 0), (1, 0), "RIGHT"),
                    ("LEFTPADDING", (0, 0), (-1, -1), 0),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 0),
                ]
            )
        )
        return [table, self._dashed_rule()]

    def _build_items_table(self):
        data = [["Qty", "Item", "Price", "Amt"]]
        for item in self.data["items"]:
            name = item["name"]
            data.append(
                [
                    str(item["qty"]),
                    name[:22] + ("..." if len(name) > 22 else ""),
                    f"{item['price']:.2f}",
                    f"{item['amt']:.2f}",
                ]
            )

        table = Table(data, colWidths=[8 * mm, 34 * mm, 15 * mm, 15 * mm])
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
                    ("FONTSIZE", (0, 0), (-1, -1), 7),
                    ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
                    ("LINEBELOW", (0, 0), (-1, 0), 0.5, colors.grey, None, (2, 2)),
                    ("LEFTPADDING", (0, 0), (-1, -1), 0),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 0),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        return [table]

    def _totals_table(self, rows, bold_last: bool = True):
        table = Table(rows, colWidths=[42 * mm, 30 * mm])
        style = [
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
            ("RIGHTPADDING", (0, 0), (-1, -1), 0),
        ]
        if bold_last:
            style += [
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, -1), (-1, -1), 9),
                ("LINEABOVE", (0, -1), (-1, -1), 0.5, colors.grey, None, (2, 2)),
            ]
        table.setStyle(TableStyle(style))
        return table

    def _footer(self, message: str):
        return [
            Spacer(1, 4),
            self._dashed_rule(),
            Paragraph(message, self.info_style),
        ]

    def generate_invoice_pdf(self) -> bytes:
        """Build the sale invoice."""
        data = self.data
        cur = self.CURRENCY
        story = self._build_shop_header()
        story += self._build_meta_row(f"Bill No: {data['bill_no']}", f"Date: {data['date']}")
        story += self._build_items_table()
        story.append(self._dashed_rule())

        story.append(self._totals_table([["SUBTOTAL", f"{cur} {data['subtotal']:.2f}"]], False))
        if data["discount"] > 0:
            story.append(
                self._totals_table(
                    [["Discount Deducted", f"-{cur} {data['discount']:.2f}"]], False
                )
            )
            offers = ", ".join(data["applied_offers"]) or "N/A"
            story.append(Paragraph(escape(f"Offers: {offers}"), self.offers_style))

        story.append(
            self._totals_table(
                [
                    ["CASH", f"{cur} {data['cash_paid']:.2f}"],
                    ["UPI", f"{cur} {data['upi_paid']:.2f}"],
                    ["TOTAL PAID", f"{cur} {data['total']:.2f}"],
                ]
            )
        )
        story += self._footer("*** Thank You. Visit Again ***")
        return self._build_doc(story, extra_rows=8)

    def generate_refund_pdf(self) -> bytes:
        """Build the refund receipt."""
        data = self.data
        story = self._build_shop_header()
        story += self._build_meta_row(
            f"Refund For Bill: {data['bill_no']}", f"Refund Date: {data['refund_date']}"
        )
        story += self._build_items_table()
        story.append(self._dashed_rule())
        story.append(
            self._totals_table([["REFUND TOTAL", f"{self.CURRENCY} {data['total']:.2f}"]])
        )
        story += self._footer("*** Refund Processed Successfully ***")
        return self._build_doc(story, extra_rows=4)


class ReceiptService:
    """
    Service class for invoice and refund receipt output.
    """

    @staticmethod
    def generate_invoice(sale: Transaction, output_format: str = "html", pdf_url: str = "") -> bytes:
        """
        Render a sale invoice.

        Args:
            sale: Transaction instance
            output_format: 'pdf' or 'html'
            pdf_url: Link behind "Download PDF" on the HTML invoice

        Returns:
            PDF bytes or UTF-8 encoded HTML
        """
        data = build_invoice_data(sale)
        if output_format == "pdf":
            return ReceiptGenerator(data).generate_invoice_pdf()
        elif output_format == "html":
            return render_to_string(
                "sales/invoice.html", {"invoice": data, "pdf_url": pdf_url}
            ).encode("utf-8")
        raise ValueError(f"Unsupported output format: {output_format}")

    @staticmethod
    def generate_refund_receipt(sale: Transaction, output_format: str = "html") -> bytes:
        """
        Render the refund receipt for a bill.
        """
        data = build_refund_data(sale)
        if output_format == "pdf":
            return ReceiptGenerator(data).generate_refund_pdf()
        elif output_format == "html":
            return render_to_string("sales/refund_receipt.html", {"receipt": data}).encode("utf-8")
        raise ValueError(f"Unsupported output format: {output_format}")
