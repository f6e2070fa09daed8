"""
Job model.
A Job is an organization's request to move containers through the gate.
Its lifecycle is enforced by JobService:

    PENDING → ASSIGNED → IN_PROGRESS → COMPLETED
    PENDING / ASSIGNED → CANCELLED
"""

import uuid
from django.db import models
from django.core.validators import MinValueValidator

from apps.scheduling.priority import CargoType, PriorityTier


class Job(models.Model):

    class Status(models.TextChoices):
        PENDING     = "PENDING",     "Pending"
        ASSIGNED    = "ASSIGNED",    "Assigned"
        IN_PROGRESS = "IN_PROGRESS", "In Progress"
        COMPLETED   = "COMPLETED",   "Completed"
        CANCELLED   = "CANCELLED",   "Cancelled"

    TERMINAL = (Status.COMPLETED, Status.CANCELLED)

    id               = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization     = models.ForeignKey("authentication.Organization", on_delete=models.PROTECT,
                                         related_name="jobs")
    job_number       = models.CharField(max_length=24, unique=True)
    customer_name    = models.CharField(max_length=120)
    container_number = models.CharField(max_length=20, blank=True)
    container_count  = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    cargo_type       = models.CharField(max_length=15, choices=CargoType.choices)
    # Derived from cargo_type at creation; never edited afterwards
    priority         = models.CharField(max_length=10, choices=PriorityTier.choices)
    pickup_location  = models.CharField(max_length=200)
    destination      = models.CharField(max_length=200)
    preferred_date   = models.DateField()
    preferred_time   = models.TimeField(null=True, blank=True)
    notes            = models.TextField(blank=True)
    status           = models.CharField(max_length=12, choices=Status.choices, default=Status.PENDING)

    assigned_driver  = models.ForeignKey("fleet.Driver", on_delete=models.SET_NULL,
                                         null=True, blank=True, related_name="jobs")
    assigned_at      = models.DateTimeField(null=True, blank=True)
    started_at       = models.DateTimeField(null=True, blank=True)
    completed_at     = models.DateTimeField(null=True, blank=True)
    created_at       = models.DateTimeField(auto_now_add=True)
    updated_at       = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organization", "status"], name="job_org_status_idx"),
            models.Index(fields=["assigned_driver", "status"], name="job_driver_status_idx"),
        ]

    def __str__(self):
        return f"{self.job_number} [{self.priority}] {self.status}"

    @property
    def permit(self):
        """The live permit for this job, if one has been issued."""
        return (
            self.permits
            .exclude(status__in=["CANCELLED", "EXPIRED"])
            .select_related("slot")
            .order_by("-created_at")
            .first()
        )


class JobNumberSequence(models.Model):
    """Per-day counter behind JOB-YYYYMMDD-NNNN numbers."""
    day         = models.DateField(unique=True)
    last_number = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.day}: {self.last_number}"


class JobTemplate(models.Model):
    """A saved job configuration an organization reuses for recurring moves."""

    id              = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization    = models.ForeignKey("authentication.Organization", on_delete=models.CASCADE,
                                        related_name="job_templates")
    template_name   = models.CharField(max_length=120)
    cargo_type      = models.CharField(max_length=15, choices=CargoType.choices)
    # Follows cargo_type, same as jobs
    priority        = models.CharField(max_length=10, choices=PriorityTier.choices)
    pickup_location = models.CharField(max_length=200)
    destination     = models.CharField(max_length=200)
    notes           = models.TextField(blank=True)
    created_at      = models.DateTimeField(auto_now_add=True)
    updated_at      = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["organization", "template_name"], name="job_template_unique_name"),
        ]

    def __str__(self):
        return f"{self.template_name} ({self.organization_id})"
