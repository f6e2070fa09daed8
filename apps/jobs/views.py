"""Job API views — organization side and driver side."""

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
from apps.fleet.models import Driver
from apps.fleet.serializers import DriverBriefSerializer
from portlink.exceptions import JobNotPending, NotFound
from .models import Job, JobTemplate
from .service import JobService
from . import serializers as sz

logger = logging.getLogger("portlink.jobs")
job_service = JobService()


def _job_or_404(request, pk):
    return get_scoped_or_404(
        Job.objects.select_related("organization", "assigned_driver"), request.user, id=pk,
    )


def _target_organization(request):
    """Staff act for their own organization; a port admin names one with organization_id."""
    if not request.user.is_port_admin:
        return request.user.organization
    org_id = request.data.get("organization_id")
    try:
        return Organization.objects.get(id=org_id)
    except (Organization.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound("Organization not found")


def _assignment_response(job, permit):
    slot, driver = permit.slot, permit.driver
    return Response(
        {
            "success": True,
            "permit": {
                "id":          str(permit.id),
                "qr_code":     permit.qr_code,
                "permit_code": permit.permit_code,
                "slot_date":   slot.date,
                "start_time":  slot.start_time.strftime("%H:%M"),
                "end_time":    slot.end_time.strftime("%H:%M"),
                "status":      permit.status,
                "priority":    permit.priority,
            },
            "driver": {
                "name":          driver.name,
                "phone":         driver.phone,
                "vehicle_plate": driver.vehicle_plate,
            },
            "job": {
                "job_number":    job.job_number,
                "customer_name": job.customer_name,
                "cargo_type":    job.cargo_type,
            },
            "notification_sent": True,
            "delivery_method":   permit.delivery_method,
            "message": "Job assigned and permit generated successfully",
        },
        status=status.HTTP_201_CREATED,
    )


# ── GET/POST /api/jobs/ ───────────────────────────────────────────────────────
@extend_schema(tags=["Jobs"], summary="List the organization's jobs or create a new one")
class JobListCreateView(generics.ListAPIView):
    serializer_class   = sz.JobSerializer
    permission_classes = [IsOrganizationMember]
    filter_backends    = [DjangoFilterBackend]
    filterset_fields   = ["status", "priority", "cargo_type", "preferred_date"]

    def get_queryset(self):
        qs = Job.objects.select_related("assigned_driver")
        return scope_to_organization(qs, self.request.user)

    def post(self, request):
        ser = sz.JobCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = job_service.create_job(_target_organization(request), dict(ser.validated_data))
        job = result["job"]
        return Response(
            {
                "success":           True,
                "job_id":            str(job.id),
                "job_number":        job.job_number,
                "priority":          job.priority,
                "available_drivers": DriverBriefSerializer(result["available_drivers"], many=True).data,
                "vessel_warning":    result["vessel_warning"],
                "message":           "Job created successfully",
            },
            status=status.HTTP_201_CREATED,
        )


# ── GET /api/jobs/{id}/ ───────────────────────────────────────────────────────
@extend_schema(tags=["Jobs"], summary="Job detail with driver and permit")
class JobDetailView(APIView):
    permission_classes = [IsOrganizationMember]

    def get(self, request, pk):
        return Response({"success": True, "job": sz.JobSerializer(_job_or_404(request, pk)).data})


# ── POST /api/jobs/{id}/assign/ ───────────────────────────────────────────────
@extend_schema(tags=["Jobs"], summary="Assign a driver, allocate a slot and issue the permit")
class JobAssignView(APIView):
    permission_classes = [IsOrganizationMember]

    def post(self, request, pk):
        ser = sz.AssignSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        job = _job_or_404(request, pk)
        if job.status != Job.Status.PENDING:
            raise JobNotPending(job.status)

        driver = Driver.objects.filter(
            id=ser.validated_data["driver_id"], organization_id=job.organization_id
        ).first()
        if driver is None:
            raise NotFound("Driver not found or doesn't belong to your organization")

        permit = job_service.assign(job, driver)
        return _assignment_response(job, permit)


# ── POST /api/jobs/{id}/auto-assign/ ──────────────────────────────────────────
@extend_schema(tags=["Jobs"], summary="Assign the first available driver of the organization")
class JobAutoAssignView(APIView):
    permission_classes = [IsOrganizationMember]

    def post(self, request, pk):
        job = _job_or_404(request, pk)
        permit = job_service.auto_assign(job)
        return _assignment_response(job, permit)


# ── POST /api/jobs/bulk-auto-assign/ ──────────────────────────────────────────
@extend_schema(tags=["Jobs"], summary="Assign every pending job, most critical first")
class BulkAutoAssignView(APIView):
    permission_classes = [IsOrganizationMember]

    def post(self, request):
        user = request.user
        queue = job_service.pending_queue(None if user.is_port_admin else user.organization)

        results = job_service.assign_all_pending(queue)
        if results["total"] == 0:
            message = "No pending jobs to assign"
        else:
            message = f"Successfully assigned {results['assigned']} out of {results['total']} jobs"
        return Response({"success": True, **results, "message": message})


# ── POST /api/jobs/{id}/cancel/ ───────────────────────────────────────────────
@extend_schema(tags=["Jobs"], summary="Cancel a pending or assigned job")
class JobCancelView(APIView):
    permission_classes = [IsOrganizationMember]

    def post(self, request, pk):
        ser = sz.CancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        job = job_service.cancel(_job_or_404(request, pk), reason=ser.validated_data["reason"])
        return Response({"success": True, "job": sz.JobSerializer(job).data, "message": "Job cancelled"})


# ── GET /api/driver/jobs/active/?driver_id= ──────────────────────────────────
@extend_schema(tags=["Driver"], summary="A driver's assigned and in-progress jobs")
class DriverActiveJobsView(APIView):
    permission_classes = [IsOrganizationMember]

    def get(self, request):
        query = sz.ActiveJobsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        jobs = scope_to_organization(
            Job.objects
            .filter(assigned_driver_id=query.validated_data["driver_id"],
                    status__in=[Job.Status.ASSIGNED, Job.Status.IN_PROGRESS])
            .select_related("organization", "assigned_driver")
            .order_by("preferred_date", "preferred_time"),
            request.user,
        )
        data = sz.JobSerializer(jobs, many=True).data
        return Response({"success": True, "count": len(data), "jobs": data})


# ── POST /api/driver/jobs/{id}/start/ ─────────────────────────────────────────
@extend_schema(tags=["Driver"], summary="Driver picks up the job")
class DriverJobStartView(APIView):
    permission_classes = [IsOrganizationMember]

    def post(self, request, pk):
        job = job_service.start(_job_or_404(request, pk))
        return Response({"success": True, "job": sz.JobSerializer(job).data, "message": "Job started"})


# ── POST /api/driver/jobs/{id}/complete/ ──────────────────────────────────────
@extend_schema(tags=["Driver"], summary="Driver completes the job; permit closed, driver freed")
class DriverJobCompleteView(APIView):
    permission_classes = [IsOrganizationMember]

    def post(self, request, pk):
        ser = sz.CompletionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        job = job_service.complete(
            _job_or_404(request, pk), notes=d["completion_notes"], completed_at=d.get("completed_at"),
        )
        return Response({
            "success": True,
            "message": "Job marked as completed",
            "job": {
                "id":           str(job.id),
                "job_number":   job.job_number,
                "status":       job.status,
                "completed_at": job.completed_at,
            },
            "driver_status": "available",
        })


# ── GET /api/jobs/{id}/track/ ─────────────────────────────────────────────────
@extend_schema(tags=["Jobs"], summary="Track a job: driver position, permit, slot and timeline")
class JobTrackView(APIView):
    permission_classes = [IsOrganizationMember]

    def get(self, request, pk):
        tracking = job_service.track(_job_or_404(request, pk))
        return Response({"success": True, **sz.JobTrackingSerializer(tracking).data})


# ── GET/POST /api/job-templates/ ──────────────────────────────────────────────
@extend_schema(tags=["Jobs"], summary="List or save reusable job templates")
class JobTemplateListCreateView(generics.ListCreateAPIView):
    serializer_class   = sz.JobTemplateSerializer
    permission_classes = [IsOrganizationMember]
    filter_backends    = [DjangoFilterBackend]
    filterset_fields   = ["cargo_type", "priority"]

    def get_queryset(self):
        return scope_to_organization(JobTemplate.objects.select_related("organization"), self.request.user)

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        template = job_service.create_template(_target_organization(request), dict(ser.validated_data))
        return Response(
            {"success": True, "template": sz.JobTemplateSerializer(template).data,
             "message": "Template created successfully"},
            status=status.HTTP_201_CREATED,
        )


# ── GET/PATCH/DELETE /api/job-templates/{id}/ ─────────────────────────────────
@extend_schema(tags=["Jobs"], summary="Read, update or delete a job template")
class JobTemplateDetailView(APIView):
    permission_classes = [IsOrganizationMember]

    def _template(self, request, pk):
        return get_scoped_or_404(JobTemplate.objects.select_related("organization"), request.user, id=pk)

    def get(self, request, pk):
        return Response({"success": True, "template": sz.JobTemplateSerializer(self._template(request, pk)).data})

    def patch(self, request, pk):
        template = self._template(request, pk)
        ser = sz.JobTemplateSerializer(template, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        template = job_service.update_template(template, dict(ser.validated_data))
        return Response({
            "success":  True,
            "template": sz.JobTemplateSerializer(template).data,
            "message":  "Template updated successfully",
        })

    def delete(self, request, pk):
        template = self._template(request, pk)
        logger.info("Template '%s' deleted by %s", template.template_name, request.user.email)
        template.delete()
        return Response({"success": True, "message": "Template deleted successfully"})
