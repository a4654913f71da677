"""
Views for sales exports, the sales report PDF and the dashboard summary.
"""

import logging

from django.http import HttpResponse

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import ParseError
from rest_framework.response import Response

from apps.core.utils import parse_date

from .serializers import DailySalesSummarySerializer
from .services import SalesExportService, SalesReportGenerator, summaries_for

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _report_range(request):
    start_day = parse_date(request.query_params.get("start"))
    end_day = parse_date(request.query_params.get("end"))
    if start_day is None or end_day is None:
        raise ParseError("Missing date range parameters")
    return start_day, end_day


@api_view(["GET"])
def sales_export(request):
    """
    Download the caller's transactions as an Excel workbook.

    Query parameters: ``type`` (daily or monthly), ``dateRangeStart`` and
    ``dateRangeEnd`` (YYYY-MM-DD).
    """
    export_type = request.query_params.get("type")
    start_day = parse_date(request.query_params.get("dateRangeStart"))
    end_day = parse_date(request.query_params.get("dateRangeEnd"))

    if export_type not in SalesExportService.EXPORT_TYPES or start_day is None or end_day is None:
        return Response(
            {"message": "Invalid export parameters"}, status=status.HTTP_400_BAD_REQUEST
        )

    try:
        transactions = list(
            SalesExportService.transactions_for(request.user.id, start_day, end_day)
        )
        if not transactions:
            return Response(
                {"message": "No transactions found."}, status=status.HTTP_404_NOT_FOUND
            )

        content = SalesExportService.build_workbook(transactions)
    except Exception as e:
        logger.exception(f"Excel export failed for {request.user.id}: {e}")
        return Response(
            {"message": "Failed to generate Excel export", "error": str(e)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    filename = SalesExportService.filename(export_type, start_day, end_day)
    logger.info(
        f"Exported {len(transactions)} transactions ({export_type}) for {request.user.id}: {filename}"
    )

    response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@api_view(["GET"])
def generate_report(request):
    """
    Render the daily sales report PDF for ``start`` through ``end``.
    """
    start_day, end_day = _report_range(request)

    summaries = summaries_for(request.user.id, start_day, end_day)
    pdf_bytes = SalesReportGenerator(summaries, start_day, end_day).generate()
    filename = SalesReportGenerator.filename(start_day, end_day)

    logger.info(f"Generated sales report {filename} for {request.user.id}")

    response = HttpResponse(pdf_bytes, content_type="application/pdf")
    response["Content-Disposition"] = f'inline; filename="{filename}"'
    return response


@api_view(["GET"])
def report_summary(request):
    """Daily summary rows for the dashboard."""
    start_day, end_day = _report_range(request)
    summaries = summaries_for(request.user.id, start_day, end_day)
    return Response({"results": DailySalesSummarySerializer(summaries, many=True).data})
