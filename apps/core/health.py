"""
Health check views and URLs for monitoring and deployment verification.

Used by the hosting platform's health checks and by uptime monitoring.
"""

import logging

from django.conf import settings
from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.urls import path
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_GET

logger = logging.getLogger(__name__)


@never_cache
@require_GET
def health_check(request) -> JsonResponse:
    """
    Basic health check endpoint.

    Returns:
        JsonResponse: {"status": "ok", "version": "1.0.0", "environment": ...}
    """
    return JsonResponse(
        {
            "status": "ok",
            "version": getattr(settings, "VERSION", "1.0.0"),
            "environment": getattr(settings, "ENVIRONMENT", "unknown"),
        }
    )


@never_cache
@require_GET
def health_check_detailed(request) -> JsonResponse:
    """
    Detailed health check with database and cache connectivity.

    Returns 200 if all checks pass, 503 if any check fails.
    """
    health_status = {
        "status": "healthy",
        "version": getattr(settings, "VERSION", "1.0.0"),
        "environment": getattr(settings, "ENVIRONMENT", "unknown"),
        "checks": {},
    }

    all_healthy = True

    # Check database connectivity
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful",
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}",
        }
        all_healthy = False

    # Check cache connectivity (holds verified auth tokens)
    try:
        cache.set("health_check_test", "ok", timeout=10)
        if cache.get("health_check_test") != "ok":
            raise ValueError("Cache value mismatch")
        health_status["checks"]["cache"] = {
            "status": "healthy",
            "message": "Cache connection successful",
        }
    except Exception as e:
        logger.error(f"Cache health check failed: {e}")
        health_status["checks"]["cache"] = {
            "status": "unhealthy",
            "message": f"Cache connection failed: {str(e)}",
        }
        all_healthy = False

    if not all_healthy:
        health_status["status"] = "unhealthy"
        status_code = 503
    else:
        status_code = 200

    return JsonResponse(health_status, status=status_code)


urlpatterns = [
    path("", health_check, name="health"),
    path("detailed/", health_check_detailed, name="health_detailed"),
]
