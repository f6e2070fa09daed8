"""
JobService — job creation, assignment and the driver-side lifecycle.

    create  →  assign / auto_assign / assign_all_pending  →  start  →  complete
                                     ↘ cancel
"""

import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import APIException, ValidationError

from apps.fleet.models import Driver
from apps.fleet.service import first_available_driver, latest_location, release_driver
from apps.jobs.models import Job, JobNumberSequence, JobTemplate
from apps.permits.models import Permit
from apps.permits.service import PermitIssuer, PermitService
from apps.scheduling.priority import classify, ensure_authorized, priority_rank_expression
from apps.scheduling.service import VesselSurgeAdvisor
from portlink.exceptions import (
    InvalidTransition, JobNotPending, NoDriverAvailable, NoSlotAvailable,
)

logger = logging.getLogger("portlink.jobs")

# Failure reasons reported per job by the bulk loop
NO_DRIVER = "No available drivers"
NO_SLOT   = "No available time slots"
NO_PERMIT = "Failed to create permit"


def generate_job_number() -> str:
    """JOB-<YYYYMMDD>-<NNNN> from a locked per-day counter. Must run inside a transaction."""
    today = timezone.localdate()
    JobNumberSequence.objects.get_or_create(day=today)
    seq = JobNumberSequence.objects.select_for_update().get(day=today)
    seq.last_number += 1
    seq.save(update_fields=["last_number"])
    return f"JOB-{today:%Y%m%d}-{seq.last_number:04d}"


class JobService:
    """
    Dependencies are injected so they can be swapped in tests.
    """

    def __init__(self, issuer=None, permit_service=None, surge_advisor=None):
        self.issuer         = issuer         or PermitIssuer()
        self.permits        = permit_service or PermitService()
        self.surge_advisor  = surge_advisor  or VesselSurgeAdvisor()

    # ── Create ────────────────────────────────────────────────────────────────
    @transaction.atomic
    def create_job(self, organization, validated_data: dict) -> dict:
        """
        Classify, authorize and persist a PENDING job.
        An unauthorized tier is rejected with 403, never downgraded.
        """
        priority = classify(validated_data["cargo_type"])
        ensure_authorized(organization, priority)

        job = Job.objects.create(
            organization = organization,
            job_number   = generate_job_number(),
            priority     = priority,
            **validated_data,
        )

        drivers = list(
            Driver.objects
            .filter(organization=organization, is_available=True, is_active=True)
            .order_by("name")[:10]
        )
        warning = self.surge_advisor.advise(job.preferred_date, job.preferred_time, priority)

        logger.info("Job %s created for %s (%s)", job.job_number, organization.name, priority)
        if warning:
            logger.info("Vessel surge warning: %s trucks expected on %s",
                        warning["total_trucks"], job.preferred_date)
        return {"job": job, "available_drivers": drivers, "vessel_warning": warning}

    # ── Assign ────────────────────────────────────────────────────────────────
    def assign(self, job: Job, driver: Driver) -> Permit:
        """Bind a specific driver: allocate a slot and issue the permit in one transaction."""
        if job.status != Job.Status.PENDING:
            raise JobNotPending(job.status)
        permit = self.issuer.issue(driver, job=job)
        logger.info("Job %s assigned to %s, permit %s", job.job_number, driver.name, permit.permit_code)
        return permit

    def auto_assign(self, job: Job) -> Permit:
        if job.status != Job.Status.PENDING:
            raise JobNotPending(job.status)
        driver = first_available_driver(job.organization_id)
        if driver is None:
            raise NoDriverAvailable()
        return self.assign(job, driver)

    def pending_queue(self, organization=None):
        """PENDING jobs, most critical first, then earliest preferred window."""
        qs = Job.objects.filter(status=Job.Status.PENDING)
        if organization is not None:
            qs = qs.filter(organization=organization)
        return (
            qs.select_related("organization")
            .annotate(rank=priority_rank_expression())
            .order_by("-rank", "preferred_date", "preferred_time", "created_at")
        )

    def assign_all_pending(self, jobs) -> dict:
        """
        Assign each job in order. One job's failure never aborts the batch;
        each job commits or rolls back on its own.
        """
        jobs = list(jobs)
        results = {"assigned": 0, "failed": 0, "total": len(jobs), "details": []}

        for job in jobs:
            driver = first_available_driver(job.organization_id)
            if driver is None:
                self._record_failure(results, job, NO_DRIVER)
                continue
            try:
                permit = self.issuer.issue(driver, job=job)
            except NoSlotAvailable:
                self._record_failure(results, job, NO_SLOT)
                continue
            except APIException as exc:
                self._record_failure(results, job, str(exc.detail))
                continue
            except DatabaseError:
                logger.exception("Bulk assignment failed for %s", job.job_number)
                self._record_failure(results, job, NO_PERMIT)
                continue

            results["assigned"] += 1
            results["details"].append({
                "job_number":  job.job_number,
                "success":     True,
                "driver":      driver.name,
                "permit_code": permit.permit_code,
            })
            logger.info("[BULK-ASSIGN] %s → %s → %s", job.job_number, driver.name, permit.permit_code)

        logger.info("Bulk assignment: %d of %d jobs assigned", results["assigned"], results["total"])
        return results

    @staticmethod
    def _record_failure(results, job, reason):
        results["failed"] += 1
        results["details"].append({"job_number": job.job_number, "success": False, "error": reason})
        logger.warning("Bulk assignment skipped %s: %s", job.job_number, reason)

    # ── Driver lifecycle ──────────────────────────────────────────────────────
    @transaction.atomic
    def start(self, job: Job) -> Job:
        updated = (
            Job.objects
            .filter(id=job.id, status=Job.Status.ASSIGNED)
            .update(status=Job.Status.IN_PROGRESS, started_at=timezone.now(), updated_at=timezone.now())
        )
        if not updated:
            raise InvalidTransition("job", job.status, Job.Status.IN_PROGRESS)
        job.refresh_from_db()
        logger.info("Job %s started", job.job_number)
        return job

    @transaction.atomic
    def complete(self, job: Job, notes: str = "", completed_at=None) -> Job:
        """Job and its permit COMPLETED; the driver is free for the next job."""
        completed_at = completed_at or timezone.now()
        fields = {"status": Job.Status.COMPLETED, "completed_at": completed_at, "updated_at": timezone.now()}
        if notes:
            fields["notes"] = f"{job.notes}\n\n[COMPLETION] {notes}".strip()

        updated = (
            Job.objects
            .filter(id=job.id, status__in=[Job.Status.ASSIGNED, Job.Status.IN_PROGRESS])
            .update(**fields)
        )
        if not updated:
            raise InvalidTransition("job", job.status, Job.Status.COMPLETED)

        permit = job.permit
        if permit is not None and permit.status not in Permit.TERMINAL:
            self.permits.complete(permit)
        if job.assigned_driver_id:
            release_driver(job.assigned_driver_id)

        job.refresh_from_db()
        logger.info("Job %s completed", job.job_number)
        return job

    @transaction.atomic
    def cancel(self, job: Job, reason: str = "") -> Job:
        """PENDING/ASSIGNED → CANCELLED. Any live permit is cancelled and its slot released."""
        if job.status not in (Job.Status.PENDING, Job.Status.ASSIGNED):
            raise InvalidTransition("job", job.status, Job.Status.CANCELLED)

        permit = job.permit
        if permit is not None:
            # Reopens the job and frees the driver
            self.permits.cancel(permit, reason=reason)

        updated = (
            Job.objects
            .filter(id=job.id, status__in=[Job.Status.PENDING, Job.Status.ASSIGNED])
            .update(status=Job.Status.CANCELLED, updated_at=timezone.now())
        )
        if not updated:
            job.refresh_from_db()
            raise InvalidTransition("job", job.status, Job.Status.CANCELLED)
        if job.assigned_driver_id and permit is None:
            release_driver(job.assigned_driver_id)

        job.refresh_from_db()
        logger.info("Job %s cancelled", job.job_number)
        return job

    # ── Tracking ──────────────────────────────────────────────────────────────
    def track(self, job: Job) -> dict:
        """Job with its driver, the driver's last reported position, the live permit and a timeline."""
        driver = job.assigned_driver
        timeline = [{"event": "Job Created", "timestamp": job.created_at, "status": "completed"}]
        if job.assigned_at:
            label = f"Driver Assigned: {driver.name}" if driver else "Driver Assigned"
            timeline.append({"event": label, "timestamp": job.assigned_at, "status": "completed"})
        if job.started_at:
            state = "current" if job.status == Job.Status.IN_PROGRESS else "completed"
            timeline.append({"event": "In Progress", "timestamp": job.started_at, "status": state})
        if job.completed_at:
            timeline.append({"event": "Completed", "timestamp": job.completed_at, "status": "completed"})
        if job.status == Job.Status.CANCELLED:
            timeline.append({"event": "Cancelled", "timestamp": job.updated_at, "status": "completed"})

        return {
            "job":              job,
            "driver":           driver,
            "current_location": latest_location(job.assigned_driver_id),
            "permit":           job.permit,
            "timeline":         timeline,
        }

    # ── Templates ─────────────────────────────────────────────────────────────
    def create_template(self, organization, validated_data: dict) -> JobTemplate:
        priority = classify(validated_data["cargo_type"])
        ensure_authorized(organization, priority)
        try:
            with transaction.atomic():
                template = JobTemplate.objects.create(organization=organization, priority=priority, **validated_data)
        except IntegrityError:
            raise ValidationError({"template_name": ["A template with this name already exists."]})
        logger.info("Template '%s' saved for %s", template.template_name, organization.name)
        return template

    def update_template(self, template: JobTemplate, validated_data: dict) -> JobTemplate:
        if "cargo_type" in validated_data:
            priority = classify(validated_data["cargo_type"])
            ensure_authorized(template.organization, priority)
            template.priority = priority
        for field, value in validated_data.items():
            setattr(template, field, value)
        try:
            with transaction.atomic():
                template.save()
        except IntegrityError:
            raise ValidationError({"template_name": ["A template with this name already exists."]})
        return template
