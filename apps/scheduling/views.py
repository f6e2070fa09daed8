"""Slot availability and priority rule views."""

from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from apps.traffic.models import TrafficUpdate
from .models import TimeSlot, VesselSchedule
from .priority import priority_rules
from . import serializers as sz


# ── GET /api/slots/?date=YYYY-MM-DD ──────────────────────────────────────────
@extend_schema(tags=["Scheduling"], summary="Slot availability for a date, with vessels and current traffic")
class SlotAvailabilityView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        query = sz.SlotQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        date = query.validated_data["date"]

        slots   = TimeSlot.objects.filter(date=date).order_by("start_time")
        vessels = VesselSchedule.objects.filter(arrival_date=date)
        latest  = TrafficUpdate.objects.order_by("-timestamp").first()

        return Response({
            "success": True,
            "date":    date.isoformat(),
            "slots":   sz.TimeSlotSerializer(slots, many=True).data,
            "vessels": sz.VesselScheduleSerializer(vessels, many=True).data,
            "current_traffic": latest.as_feed() if latest else None,
        })


# ── GET /api/priority-rules/ ─────────────────────────────────────────────────
@extend_schema(tags=["Scheduling"], summary="Cargo type to priority tier table")
class PriorityRulesView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response({"success": True, "rules": priority_rules()})
