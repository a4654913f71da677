"""
URL configuration for inventory app.
"""

from django.urls import path

from . import views

app_name = "inventory"

urlpatterns = [
    path("loss-dump/", views.LossDumpLogListCreateAPIView.as_view(), name="loss_dump_list"),
]
