"""
Views for loss and dump logs.
"""

import logging

from rest_framework import generics
from rest_framework.exceptions import ValidationError

from apps.core.utils import local_day_bounds, parse_date

from .models import LossDumpLog
from .serializers import LossDumpLogSerializer

logger = logging.getLogger(__name__)


class LossDumpLogListCreateAPIView(generics.ListCreateAPIView):
    """
    API endpoint for listing and recording written-off stock.

    Query parameters:
    - date: Local day (YYYY-MM-DD)
    - log_type: LOSS or DUMP
    """

    serializer_class = LossDumpLogSerializer

    def get_queryset(self):
        queryset = LossDumpLog.objects.filter(user_id=self.request.user.id).select_related(
            "product"
        )

        raw_date = self.request.query_params.get("date")
        if raw_date:
            day = parse_date(raw_date)
            if day is None:
                raise ValidationError({"date": "Expected a date in YYYY-MM-DD format."})
            start, end = local_day_bounds(day)
            queryset = queryset.filter(logged_at__gte=start, logged_at__lt=end)

        log_type = self.request.query_params.get("log_type", "").upper()
        if log_type:
            if log_type not in (LossDumpLog.LOSS, LossDumpLog.DUMP):
                raise ValidationError({"log_type": "Expected LOSS or DUMP."})
            queryset = queryset.filter(log_type=log_type)

        return queryset.order_by("-logged_at")

    def perform_create(self, serializer):
        log = serializer.save()
        logger.info(
            f"{log.log_type} of {log.quantity} x product {log.product_id} "
            f"({log.amount}) logged by {self.request.user.id}"
        )
