"""Driver API views."""

import logging
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema

from apps.authentication.models import Organization
from apps.authentication.permissions import (
    IsOrganizationMember, get_scoped_or_404, scope_to_organization,
)
from apps.permits.models import Permit
from portlink.exceptions import NotFound
from .models import Driver, DriverLocation
from .service import CREATED, LINKED, record_location, register_driver
from . import serializers as sz

logger = logging.getLogger("portlink.fleet")

REGISTRATION_MESSAGES = {
    CREATED: "Driver registered",
    LINKED:  "Driver linked to your organization",
}


# ── GET/POST /api/drivers/ ────────────────────────────────────────────────────
@extend_schema(tags=["Drivers"], summary="List the organization's drivers or register a new one")
class DriverListCreateView(generics.ListCreateAPIView):
    serializer_class   = sz.DriverSerializer
    permission_classes = [IsOrganizationMember]
    filter_backends    = [DjangoFilterBackend]
    filterset_fields   = ["is_available", "is_active", "vehicle_type"]

    def get_queryset(self):
        return scope_to_organization(Driver.objects.all(), self.request.user)

    def create(self, request, *args, **kwargs):
        ser = sz.DriverRegisterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        # Idempotent on phone: the driver app re-registers on every reinstall
        driver, outcome = register_driver(self._target_organization(request), dict(ser.validated_data))
        return Response(
            {"success": True, "driver": sz.DriverSerializer(driver).data,
             "message": REGISTRATION_MESSAGES.get(outcome, "Driver already registered")},
            status=status.HTTP_201_CREATED if outcome == CREATED else status.HTTP_200_OK,
        )

    def _target_organization(self, request):
        user = request.user
        if user.role != "PORT_ADMIN":
            return user.organization
        org_id = request.data.get("organization_id")
        if not org_id:
            return None
        try:
            return Organization.objects.get(id=org_id)
        except (Organization.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound("Organization not found")


# ── GET/PATCH /api/drivers/{id}/ ──────────────────────────────────────────────
@extend_schema(tags=["Drivers"], summary="Driver detail, or update vehicle and contact fields")
class DriverDetailView(APIView):
    permission_classes = [IsOrganizationMember]

    def get(self, request, pk):
        driver = get_scoped_or_404(Driver.objects.all(), request.user, id=pk)
        return Response({"success": True, "driver": sz.DriverSerializer(driver).data})

    def patch(self, request, pk):
        driver = get_scoped_or_404(Driver.objects.all(), request.user, id=pk)
        ser = sz.DriverUpdateSerializer(driver, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        driver = ser.save()
        logger.info("[DRIVER UPDATED] %s – %s: %s", driver.id, driver.name, sorted(ser.validated_data))
        return Response({
            "success": True,
            "driver":  sz.DriverSerializer(driver).data,
            "message": "Driver updated successfully",
        })


# ── GET/POST /api/locations/ ──────────────────────────────────────────────────
@extend_schema(tags=["Drivers"], summary="Report a driver's GPS position or list recent reports")
class LocationView(APIView):
    permission_classes = [IsOrganizationMember]

    def post(self, request):
        ser = sz.LocationReportSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = dict(ser.validated_data)

        driver = get_scoped_or_404(Driver.objects.all(), request.user, id=d.pop("driver_id"))
        permit = None
        permit_id = d.pop("permit_id", None)
        if permit_id:
            permit = Permit.objects.filter(id=permit_id, driver=driver).first()
            if permit is None:
                raise NotFound("Permit not found or does not belong to driver")

        location = record_location(driver, permit=permit, **d)
        return Response(
            {"success": True, "location": sz.DriverLocationSerializer(location).data,
             "message": "Location recorded successfully"},
            status=status.HTTP_201_CREATED,
        )

    def get(self, request):
        query = sz.LocationQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        q = query.validated_data

        qs = scope_to_organization(
            DriverLocation.objects.select_related("driver"), request.user, field="driver__organization",
        )
        if q.get("driver_id"):
            qs = qs.filter(driver_id=q["driver_id"])
        data = sz.DriverLocationSerializer(qs.order_by("-recorded_at")[:q["limit"]], many=True).data
        return Response({"success": True, "count": len(data), "locations": data})
