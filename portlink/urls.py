"""PortLink root URL configuration."""

from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("admin/", admin.site.urls),

    # OpenAPI / Interactive Docs
    path("api/schema/",  SpectacularAPIView.as_view(),       name="schema"),
    path("api/docs/",    SpectacularSwaggerView.as_view(),   name="swagger-ui"),

    # Auth
    path("api/auth/",    include("apps.authentication.urls")),

    # Gate scheduling
    path("api/",         include("apps.scheduling.urls")),
    path("api/",         include("apps.fleet.urls")),
    path("api/",         include("apps.jobs.urls")),
    path("api/",         include("apps.permits.urls")),
    path("api/",         include("apps.traffic.urls")),

    # Notifications
    path("api/notifications/", include("apps.notifications.urls")),

    # Health, metrics, control room
    path("api/",        include("apps.ops.urls")),
]

# Prometheus exporter (/metrics)
urlpatterns += [path("", include("django_prometheus.urls"))]
