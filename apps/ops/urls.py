"""Operations and control-room routes, mounted under /api/."""
from django.urls import path
from .views import DashboardSummaryView, DeepHealthView, MaintenanceToggleView, MetricsView

urlpatterns = [
    path("health/deep/",             DeepHealthView.as_view(),        name="health-deep"),
    path("ops/metrics/",             MetricsView.as_view(),           name="ops-metrics"),
    path("ops/maintenance/toggle/",  MaintenanceToggleView.as_view(), name="ops-maintenance"),
    path("admin/dashboard/summary/", DashboardSummaryView.as_view(),  name="admin-dashboard-summary"),
]
