"""
URL configuration for the Babuji Chaay POS backend.
"""

from django.contrib import admin
from django.urls import include, path

from apps.core import views as core_views

urlpatterns = [
    path("", core_views.hello, name="hello"),
    path("health/", include("apps.core.health")),
    path("admin/", admin.site.urls),
    path("", include("apps.core.urls")),
    path("api/", include("apps.catalog.urls")),
    path("api/", include("apps.sales.urls")),
    path("api/", include("apps.inventory.urls")),
    path("api/", include("apps.reporting.urls")),
    path("", include("django_prometheus.urls")),  # Prometheus metrics endpoint at /metrics
]

handler404 = "apps.core.exceptions.route_not_found"
