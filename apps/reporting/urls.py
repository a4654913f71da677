"""
URL configuration for reporting app.
"""

from django.urls import path

from . import views

app_name = "reporting"

urlpatterns = [
    path("exports/sales", views.sales_export, name="sales_export"),
    path("reports/generate", views.generate_report, name="generate_report"),
    path("reports/summary", views.report_summary, name="report_summary"),
]
