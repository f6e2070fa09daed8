"""Traffic telemetry endpoint."""

from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema

from .models import TrafficUpdate
from .permissions import HasCameraKey
from .service import TrafficService
from . import serializers as sz

traffic_service = TrafficService()


# ── GET/POST /api/traffic/ ────────────────────────────────────────────────────
class TrafficView(APIView):
    authentication_classes = []

    def get_permissions(self):
        if self.request.method == "POST":
            return [HasCameraKey()]
        return [permissions.AllowAny()]

    @extend_schema(tags=["Traffic"], summary="Ingest a gate camera reading; CONGESTED halts haltable permits")
    def post(self, request):
        ser = sz.TrafficUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        update = traffic_service.record(dict(ser.validated_data))
        return Response({
            "success":           True,
            "permits_affected":  update.permits_halted,
            "permits_protected": update.permits_protected,
        })

    @extend_schema(tags=["Traffic"], summary="Current gate traffic status")
    def get(self, request):
        latest = TrafficUpdate.objects.order_by("-timestamp").first()
        return Response({
            "success": True,
            "current": latest.as_feed() if latest else None,
            "recent":  [u.as_feed() for u in TrafficUpdate.objects.order_by("-timestamp")[:10]],
        })
