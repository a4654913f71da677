"""
Reporting services for the Babuji Chaay POS backend.

This module provides:
- The per-day sales summary rebuild used by the dashboard
- Excel export of transactions
- The daily sales report PDF
"""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, Iterable, List, Tuple

from django.conf import settings
from django.db.models import Sum
from django.utils.html import escape

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from apps.core.utils import local_day_bounds, local_range_bounds, round_money, to_local

from .models import DailySalesSummary

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class DailySalesSummaryService:
    """
    Rebuilds ``daily_sales_summary`` rows from the day's sales, refunds and write-offs.
    """

    @staticmethod
    def _refunds_on(user_id, start: datetime, end: datetime) -> Decimal:
        """Sum of refund amounts whose history entries fall within [start, end)."""
        from apps.sales.models import Transaction, TransactionItem

        total = ZERO
        # Every refund writes REFUND items stamped with its refunded_at
        refunded_ids = TransactionItem.objects.filter(
            user_id=user_id,
            item_type=TransactionItem.REFUND,
            created_at__gte=start,
            created_at__lt=end,
        ).values("transaction_id")
        refunded = Transaction.objects.filter(user_id=user_id, id__in=refunded_ids).values_list(
            "refund", flat=True
        )
        for refund in refunded:
            if not isinstance(refund, dict):
                continue
            for entry in refund.get("history") or []:
                try:
                    refunded_at = datetime.fromisoformat(str(entry.get("refunded_at")))
                except ValueError:
                    continue
                if refunded_at.tzinfo is None:
                    continue
                if start <= refunded_at < end:
                    total += Decimal(str(entry.get("refund_amount") or 0))
        return total

    @classmethod
    def rebuild(cls, user_id, day: date) -> DailySalesSummary:
        """
        Recompute and upsert the summary row for one user and local day.
        """
        from apps.catalog.models import Product
        from apps.inventory.models import LossDumpLog
        from apps.sales.models import Transaction, TransactionItem

        start, end = local_day_bounds(day)

        sales = (
            Transaction.objects.filter(
                user_id=user_id, created_at__gte=start, created_at__lt=end
            ).aggregate(total=Sum("total_amount"))["total"]
            or ZERO
        )
        refunds = cls._refunds_on(user_id, start, end)

        write_offs = {
            row["log_type"]: row["total"] or ZERO
            for row in LossDumpLog.objects.filter(
                user_id=user_id, logged_at__gte=start, logged_at__lt=end
            )
            .values("log_type")
            .annotate(total=Sum("amount"))
        }

        day_items = TransactionItem.objects.filter(
            user_id=user_id, created_at__gte=start, created_at__lt=end
        )
        sold = (
            day_items.filter(item_type=TransactionItem.SALE).aggregate(qty=Sum("quantity"))["qty"]
            or 0
        )
        returned = (
            day_items.filter(item_type=TransactionItem.REFUND).aggregate(qty=Sum("quantity"))[
                "qty"
            ]
            or 0
        )

        closing = Product.objects.filter(user_id=user_id).aggregate(qty=Sum("quantity"))["qty"] or 0

        summary, created = DailySalesSummary.objects.update_or_create(
            user_id=user_id,
            sales_date=day,
            defaults={
                "total_sales": round_money(sales - refunds),
                "total_loss": round_money(write_offs.get(LossDumpLog.LOSS, ZERO)),
                "total_dump": round_money(write_offs.get(LossDumpLog.DUMP, ZERO)),
                "items_sold": sold - returned,
                "closing_items": closing,
            },
        )

        logger.debug(
            f"{'Created' if created else 'Updated'} daily summary for {user_id} on {day}: "
            f"sales={summary.total_sales} items={summary.items_sold}"
        )
        return summary

    @classmethod
    def rebuild_range(cls, user_id, start_day: date, end_day: date) -> List[DailySalesSummary]:
        summaries = []
        day = start_day
        while day <= end_day:
            summaries.append(cls.rebuild(user_id, day))
            day += timedelta(days=1)
        return summaries

    @staticmethod
    def active_user_ids(start_day: date, end_day: date) -> List[Any]:
        """Users with sales or write-offs in the given local date range."""
        from apps.inventory.models import LossDumpLog
        from apps.sales.models import Transaction, TransactionItem

        start, end = local_range_bounds(start_day, end_day)
        user_ids = set(
            Transaction.objects.filter(created_at__gte=start, created_at__lt=end).values_list(
                "user_id", flat=True
            )
        )
        user_ids.update(
            TransactionItem.objects.filter(created_at__gte=start, created_at__lt=end).values_list(
                "user_id", flat=True
            )
        )
        user_ids.update(
            LossDumpLog.objects.filter(logged_at__gte=start, logged_at__lt=end).values_list(
                "user_id", flat=True
            )
        )
        return sorted(user_ids, key=str)


class SalesExportService:
    """
    Builds the transactions spreadsheet.
    """

    EXPORT_TYPES = ("daily", "monthly")
    SHEET_TITLE = "Sales Export"
    PLACEHOLDER = "—"

    COLUMNS = [
        ("Txn ID", 12),
        ("Bill No", 10),
        ("Date & Time", 22),
        ("Product Name", 25),
        ("Qty", 8),
        ("Price", 12),
        ("Line Total", 15),
        ("Discount", 12),
        ("Cash Paid", 12),
        ("UPI Paid", 12),
    ]

    @classmethod
    def filename(cls, export_type: str, start_day: date, end_day: date) -> str:
        prefix = "Daily" if export_type == "daily" else "Monthly"
        return f"{prefix}_Transactions_{start_day.isoformat()}_to_{end_day.isoformat()}.xlsx"

    @staticmethod
    def transactions_for(user_id, start_day: date, end_day: date):
        from apps.sales.models import Transaction

        start, end = local_range_bounds(start_day, end_day)
        return Transaction.objects.filter(
            user_id=user_id, created_at__gte=start, created_at__lt=end
        ).order_by("created_at", "id")

    @classmethod
    def rows_for(cls, sale) -> List[List[Any]]:
        """One row per snapshot line, or a single placeholder row."""
        stamp = to_local(sale.created_at).strftime("%Y-%m-%d %H:%M:%S")
        money = [float(sale.discount or 0), float(sale.cash_paid or 0), float(sale.upi_paid or 0)]
        lines = sale.products if isinstance(sale.products, list) else []

        if not lines:
            return [
                [sale.id, sale.daily_bill_no, stamp]
                + [cls.PLACEHOLDER] * 4
                + money
            ]

        rows = []
        for item in lines:
            item = item if isinstance(item, dict) else {}
            name = item.get("name") or item.get("product_name") or "Unknown"
            qty = item.get("quantity") or 1
            price = float(item.get("price") or 0)
            rows.append(
                [sale.id, sale.daily_bill_no, stamp, name, qty, price, round(qty * price, 2)]
                + money
            )
        return rows

    @classmethod
    def build_workbook(cls, transactions: Iterable) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = cls.SHEET_TITLE

        header_font = Font(bold=True, color="333333")
        header_fill = PatternFill(start_color="EBEBEB", end_color="EBEBEB", fill_type="solid")
        thin = Side(style="thin")
        header_border = Border(left=thin, right=thin, top=thin, bottom=Side(style="thick"))
        cell_border = Border(left=thin, right=thin, top=thin, bottom=thin)

        ws.append([title for title, _ in cls.COLUMNS])
        for cell in ws[1]:
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = header_border

        for index, (_, width) in enumerate(cls.COLUMNS, start=1):
            ws.column_dimensions[ws.cell(row=1, column=index).column_letter].width = width

        for sale in transactions:
            for row in cls.rows_for(sale):
                ws.append(row)
                for cell in ws[ws.max_row]:
                    cell.border = cell_border

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()


class SalesReportGenerator:
    """
    Renders the daily sales report PDF from summary rows.
    """

    TITLE = "Babuji Chaay - Daily Sales Report"
    HEADERS = ["Date", "Sales", "Loss", "Dump", "Items Sold", "Closing Items"]

    def __init__(self, summaries: List[DailySalesSummary], start_day: date, end_day: date):
        self.summaries = list(summaries)
        self.start_day = start_day
        self.end_day = end_day

    def totals(self) -> Dict[str, Any]:
        return {
            "sales": round_money(sum((row.total_sales for row in self.summaries), ZERO)),
            "loss": round_money(sum((row.total_loss for row in self.summaries), ZERO)),
            "dump": round_money(sum((row.total_dump for row in self.summaries), ZERO)),
            "items": sum(row.items_sold for row in self.summaries),
        }

    def table_data(self) -> List[List[str]]:
        data = [list(self.HEADERS)]
        for row in self.summaries:
            data.append(
                [
                    row.sales_date.strftime("%d %b %Y"),
                    f"{row.total_sales:.2f}",
                    f"{row.total_loss:.2f}",
                    f"{row.total_dump:.2f}",
                    str(row.items_sold),
                    str(row.closing_items),
                ]
            )
        return data

    def _table_style(self, row_count: int) -> TableStyle:
        commands = [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#333333")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ]
        for index in range(1, row_count):
            if index % 2 == 0:
                commands.append(("BACKGROUND", (0, index), (-1, index), colors.HexColor("#F2F2F2")))
        return TableStyle(commands)

    def generate(self) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=0.75 * inch,
            rightMargin=0.75 * inch,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "ReportTitle", parent=styles["Heading1"], fontSize=18, alignment=1, spaceAfter=12
        )
        footer_style = ParagraphStyle(
            "ReportFooter", parent=styles["Normal"], fontSize=8, alignment=1,
            textColor=colors.grey,
        )

        elements = [
            Paragraph(escape(self.TITLE), title_style),
            Paragraph(
                escape(f"Report Period: {self.start_day.isoformat()} → {self.end_day.isoformat()}"),
                styles["Normal"],
            ),
            Spacer(1, 0.25 * inch),
        ]

        data = self.table_data()
        table = Table(data, repeatRows=1)
        table.setStyle(self._table_style(len(data)))
        elements.append(table)
        elements.append(Spacer(1, 0.3 * inch))

        totals = self.totals()
        elements.append(Paragraph("Summary", styles["Heading2"]))
        for label, value in (
            ("Total Sales", f"{totals['sales']:.2f}"),
            ("Total Loss", f"{totals['loss']:.2f}"),
            ("Total Dump", f"{totals['dump']:.2f}"),
            ("Total Items Sold", str(totals["items"])),
        ):
            elements.append(Paragraph(f"{label}: {value}", styles["Normal"]))

        elements.append(Spacer(1, 0.4 * inch))
        elements.append(Paragraph(escape(settings.REPORT_FOOTER), footer_style))

        doc.build(elements)
        return buffer.getvalue()

    @staticmethod
    def filename(start_day: date, end_day: date) -> str:
        return f"Daily_Sales_Report_{start_day.isoformat()}_to_{end_day.isoformat()}.pdf"


def summaries_for(user_id, start_day: date, end_day: date):
    return DailySalesSummary.objects.filter(
        user_id=user_id, sales_date__gte=start_day, sales_date__lte=end_day
    ).order_by("sales_date")


def yesterday_and_today(today: date) -> Tuple[date, date]:
    return today - timedelta(days=1), today
