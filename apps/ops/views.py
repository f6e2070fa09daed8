"""
Operations views:
  - Deep health check (DB, cache, disk)
  - Prometheus-formatted gate metrics
  - Maintenance mode toggle
  - Port control room dashboard summary
"""

import os
import logging

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, connection
from django.db.models import Count, Sum
from django.http import HttpResponse
from django.utils import timezone
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from drf_spectacular.utils import extend_schema

from apps.authentication.permissions import IsPortAdmin
from apps.fleet.models import Driver
from apps.jobs.models import Job
from apps.permits.models import Permit
from apps.scheduling.models import TimeSlot
from apps.traffic.models import TrafficUpdate

logger = logging.getLogger("portlink.ops")


# ── GET /api/health/deep/ ─────────────────────────────────────────────────────
@extend_schema(tags=["Ops"], summary="Deep health check — DB, cache, disk")
class DeepHealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        checks = {}

        try:
            with connection.cursor() as cur:
                cur.execute("SELECT 1")
            checks["database"] = "ok"
        except DatabaseError as exc:
            checks["database"] = f"error: {exc}"

        try:
            cache.set("healthcheck", "1", 5)
            checks["cache"] = "ok" if cache.get("healthcheck") == "1" else "miss"
        except Exception as exc:
            checks["cache"] = f"error: {exc}"

        try:
            stat    = os.statvfs("/")
            free_gb = (stat.f_bavail * stat.f_frsize) / (1024 ** 3)
            checks["disk_free_gb"] = round(free_gb, 2)
            checks["disk"] = "ok" if free_gb > 1 else "low"
        except OSError as exc:
            checks["disk"] = f"error: {exc}"

        checks["maintenance"] = settings.MAINTENANCE_MODE

        overall = "ok" if all(v in ("ok", False) or isinstance(v, float)
                              for v in checks.values()) else "degraded"
        return Response({"status": overall, "checks": checks})


# ── GET /api/ops/metrics/ ────────────────────────────────────────────────────
@extend_schema(tags=["Ops"], summary="Prometheus-formatted gate metrics")
class MetricsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        permit_counts = Permit.objects.values_list("status").annotate(c=Count("id"))
        job_counts    = Job.objects.values_list("status").annotate(c=Count("id"))
        today = timezone.localdate()
        slots = TimeSlot.objects.filter(date=today).aggregate(
            capacity=Sum("capacity"), booked=Sum("booked"),
        )
        capacity = slots["capacity"] or 0
        booked   = slots["booked"] or 0

        lines = [
            "# HELP portlink_permits_total Permits by status",
            "# TYPE portlink_permits_total gauge",
        ]
        for status, count in permit_counts:
            lines.append(f'portlink_permits_total{{status="{status}"}} {count}')
        lines += [
            "",
            "# HELP portlink_jobs_total Jobs by status",
            "# TYPE portlink_jobs_total gauge",
        ]
        for status, count in job_counts:
            lines.append(f'portlink_jobs_total{{status="{status}"}} {count}')
        lines += [
            "",
            "# HELP portlink_slot_utilisation Share of today's gate capacity booked",
            "# TYPE portlink_slot_utilisation gauge",
            f"portlink_slot_utilisation {round(booked / capacity, 4) if capacity else 0}",
        ]
        return HttpResponse("\n".join(lines), content_type="text/plain; version=0.0.4")


# ── POST /api/ops/maintenance/toggle/ ────────────────────────────────────────
@extend_schema(tags=["Ops"], summary="Toggle maintenance mode (port admin only)")
class MaintenanceToggleView(APIView):
    permission_classes = [IsPortAdmin]

    def post(self, request):
        settings.MAINTENANCE_MODE = not settings.MAINTENANCE_MODE
        logger.info("Maintenance mode set to %s by %s",
                    settings.MAINTENANCE_MODE, request.user.email)
        return Response({"maintenance": settings.MAINTENANCE_MODE})


# ── GET /api/admin/dashboard/summary/ ────────────────────────────────────────
@extend_schema(tags=["Admin"], summary="Control room — gate capacity, permits and traffic")
class DashboardSummaryView(APIView):
    permission_classes = [IsPortAdmin]

    def get(self, request):
        today  = timezone.localdate()
        latest = TrafficUpdate.objects.order_by("-timestamp").first()
        slots  = TimeSlot.objects.filter(date=today).aggregate(
            capacity=Sum("capacity"), booked=Sum("booked"),
        )

        return Response({
            "date":                   today,
            "current_traffic":        latest.status if latest else None,
            "permits_by_status":      dict(Permit.objects.values_list("status").annotate(c=Count("id"))),
            "permits_by_priority":    dict(
                Permit.objects.filter(status=Permit.Status.APPROVED)
                .values_list("priority").annotate(c=Count("id"))
            ),
            "jobs_by_status":         dict(Job.objects.values_list("status").annotate(c=Count("id"))),
            "pending_jobs":           Job.objects.filter(status=Job.Status.PENDING).count(),
            "available_drivers":      Driver.objects.filter(is_available=True, is_active=True).count(),
            "today_capacity":         slots["capacity"] or 0,
            "today_booked":           slots["booked"] or 0,
        })
