"""Health check endpoints for production monitoring."""

import os
import time

from django.conf import settings
from django.db import connections
from django.db.utils import OperationalError
from django.http import JsonResponse
from django.utils import timezone

from bookings.services import PDFService

APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")
APP_START_TIME = time.time()


def _no_cache(response: JsonResponse) -> JsonResponse:
    response["Cache-Control"] = "no-cache, no-store, must-revalidate, max-age=0"
    response["Pragma"] = "no-cache"
    return response


def health_check(request):
    """
    Basic health check endpoint for load balancers.
    Returns 200 if the application is running; does not touch the database.
    """
    return _no_cache(JsonResponse(
        {
            "status": "healthy",
            "version": APP_VERSION,
            "environment": "production" if not settings.DEBUG else "development",
            "timestamp": timezone.now().isoformat(),
            "uptime_seconds": int(time.time() - APP_START_TIME),
        }
    ))


def readiness_check(request):
    """
    Readiness check - checks database connectivity.
    PDF backend availability is reported but does not fail readiness.
    """
    pdf = "up" if PDFService.is_available() else "down"
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
    except OperationalError:
        return _no_cache(JsonResponse({"status": "not_ready", "database": "down", "pdf": pdf}, status=503))
    return _no_cache(JsonResponse({"status": "ready", "database": "up", "pdf": pdf}))
