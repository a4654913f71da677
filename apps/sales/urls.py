"""
URL configuration for sales app.
"""

from django.urls import path, re_path

from . import views

app_name = "sales"

urlpatterns = [
    # Transactions
    path("transactions/", views.transaction_list, name="transaction_list"),
    path("transactions/checkout/", views.checkout, name="checkout"),
    re_path(
        r"^transactions/daily/(?P<bill_no>\d+)/invoice/?$",
        views.transaction_invoice,
        name="transaction_invoice",
    ),
    path(
        "transactions/<int:pk>/",
        views.TransactionDetailView.as_view(),
        name="transaction_detail",
    ),
    # Refunds
    path("refund/record", views.record_refund, name="refund_record"),
    path("refund/list", views.refund_list, name="refund_list"),
    path("refund/<str:transaction_id>/receipt", views.refund_receipt, name="refund_receipt"),
]
