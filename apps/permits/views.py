"""Permit API views: direct booking, listing and manual actions."""

import logging
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema

from apps.authentication.permissions import (
    IsOrganizationMember, IsPortAdmin, get_scoped_or_404, scope_to_organization,
)
from apps.fleet.models import Driver
from apps.scheduling.models import TimeSlot, VesselSchedule
from apps.scheduling.priority import classify, ensure_authorized
from portlink.exceptions import NotFound
from .models import Permit
from .service import PermitIssuer, PermitService
from . import serializers as sz

logger = logging.getLogger("portlink.permits")
issuer = PermitIssuer()
permit_service = PermitService()


def _get_or_404(model, message, **lookup):
    try:
        return model.objects.get(**lookup)
    except (model.DoesNotExist, ValueError):
        raise NotFound(message)


# ── POST /api/book/ ───────────────────────────────────────────────────────────
@extend_schema(tags=["Permits"], summary="Book a permit for a driver on a specific slot")
class BookingView(APIView):
    permission_classes = [IsOrganizationMember]

    def post(self, request):
        ser = sz.BookingSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        slot   = _get_or_404(TimeSlot, "Time slot not found", id=d["slot_id"])
        driver = get_scoped_or_404(
            Driver.objects.all(), request.user, id=d["driver_id"]
        )
        vessel = None
        if d.get("vessel_id"):
            vessel = _get_or_404(VesselSchedule, "Vessel not found", id=d["vessel_id"])

        priority = classify(d["cargo_type"])
        if not request.user.is_port_admin:
            ensure_authorized(request.user.organization, priority)

        permit = issuer.issue(
            driver, slot=slot, cargo_type=d["cargo_type"], priority=priority,
            vessel=vessel, notes=d["notes"],
        )
        slot.refresh_from_db()
        return Response(
            {
                "success": True,
                "permit": {
                    "id":          str(permit.id),
                    "permit_code": permit.permit_code,
                    "qr_code":     permit.qr_code,
                    "status":      permit.status,
                    "priority":    permit.priority,
                    "cargo_type":  permit.cargo_type,
                    "expires_at":  permit.expires_at,
                    "slot": {
                        "date":       slot.date,
                        "start_time": slot.start_time.strftime("%H:%M"),
                        "end_time":   slot.end_time.strftime("%H:%M"),
                    },
                },
                "message": "Permit booked successfully",
            },
            status=status.HTTP_201_CREATED,
        )


# ── GET /api/permits/ ─────────────────────────────────────────────────────────
@extend_schema(tags=["Permits"], summary="List permits, filterable by driver and status")
class PermitListView(generics.ListAPIView):
    serializer_class   = sz.PermitSerializer
    permission_classes = [IsOrganizationMember]
    filter_backends    = [DjangoFilterBackend]
    filterset_fields   = {"driver": ["exact"], "status": ["exact", "in"], "priority": ["exact"]}

    def get_queryset(self):
        query = sz.PermitListQuerySerializer(data=self.request.query_params)
        query.is_valid(raise_exception=True)

        qs = Permit.objects.select_related("driver", "slot", "job")
        if query.validated_data.get("driver_id"):
            qs = qs.filter(driver_id=query.validated_data["driver_id"])
        return scope_to_organization(qs, self.request.user, field="driver__organization")


class _PermitActionView(APIView):
    permission_classes = [IsPortAdmin]
    message = ""

    def get_permit(self, request, pk):
        return get_scoped_or_404(
            Permit.objects.select_related("driver", "slot"), request.user,
            field="driver__organization", id=pk,
        )

    def respond(self, permit):
        return Response({
            "success": True,
            "permit":  sz.PermitSerializer(permit).data,
            "message": self.message.format(code=permit.permit_code),
        })


@extend_schema(tags=["Permits"], summary="Approve or reinstate a permit (port admin)")
class PermitApproveView(_PermitActionView):
    message = "Permit {code} approved"

    def post(self, request, pk):
        return self.respond(permit_service.approve(self.get_permit(request, pk)))


@extend_schema(tags=["Permits"], summary="Halt an approved permit (port admin)")
class PermitHaltView(_PermitActionView):
    message = "Permit {code} halted"

    def post(self, request, pk):
        return self.respond(permit_service.halt(self.get_permit(request, pk)))


@extend_schema(tags=["Permits"], summary="Cancel a permit and release its slot")
class PermitCancelView(_PermitActionView):
    permission_classes = [IsOrganizationMember]
    message = "Permit {code} cancelled"

    def post(self, request, pk):
        ser = sz.CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        permit = permit_service.cancel(self.get_permit(request, pk), reason=ser.validated_data["reason"])
        return self.respond(permit)


@extend_schema(tags=["Permits"], summary="Move a permit to another slot")
class PermitRescheduleView(_PermitActionView):
    permission_classes = [IsOrganizationMember]
    message = "Permit {code} rescheduled"

    def post(self, request, pk):
        ser = sz.RescheduleSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        permit   = self.get_permit(request, pk)
        new_slot = _get_or_404(TimeSlot, "Time slot not found", id=ser.validated_data["slot_id"])
        return self.respond(permit_service.reschedule(permit, new_slot))
