from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView

from bookings import health

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", health.health_check, name="health_check"),
    path("health/ready/", health.readiness_check, name="readiness_check"),
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/", include("bookings.api.urls")),
]
