"""
Permit models.
A Permit authorizes one driver to use one time slot. Its priority is copied
at issuance and never changes. Status moves one way, except that a HALTED
permit can be reinstated or rescheduled back to APPROVED.
"""

import uuid
from django.db import models

from apps.scheduling.priority import CargoType, PriorityTier


class Permit(models.Model):

    class Status(models.TextChoices):
        PENDING   = "PENDING",   "Pending"
        APPROVED  = "APPROVED",  "Approved"
        HALTED    = "HALTED",    "Halted"
        CANCELLED = "CANCELLED", "Cancelled"
        EXPIRED   = "EXPIRED",   "Expired"
        COMPLETED = "COMPLETED", "Completed"

    class DeliveryMethod(models.TextChoices):
        APP = "APP", "App push"
        SMS = "SMS", "SMS"

    TERMINAL = (Status.CANCELLED, Status.EXPIRED, Status.COMPLETED)

    id                = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    permit_code       = models.CharField(max_length=20, unique=True)
    qr_code           = models.CharField(max_length=40, unique=True)
    driver            = models.ForeignKey("fleet.Driver", on_delete=models.PROTECT, related_name="permits")
    slot              = models.ForeignKey("scheduling.TimeSlot", on_delete=models.PROTECT, related_name="permits")
    job               = models.ForeignKey("jobs.Job", on_delete=models.SET_NULL,
                                          null=True, blank=True, related_name="permits")
    vessel            = models.ForeignKey("scheduling.VesselSchedule", on_delete=models.SET_NULL,
                                          null=True, blank=True, related_name="permits")
    cargo_type        = models.CharField(max_length=15, choices=CargoType.choices)
    priority          = models.CharField(max_length=10, choices=PriorityTier.choices)
    status            = models.CharField(max_length=10, choices=Status.choices, default=Status.APPROVED)
    delivery_method   = models.CharField(max_length=3, choices=DeliveryMethod.choices,
                                          default=DeliveryMethod.APP)

    # Reschedule history
    original_slot     = models.ForeignKey("scheduling.TimeSlot", on_delete=models.SET_NULL,
                                          null=True, blank=True, related_name="+")
    rescheduled_count = models.PositiveIntegerField(default=0)

    approved_at       = models.DateTimeField(null=True, blank=True)
    halted_at         = models.DateTimeField(null=True, blank=True)
    completed_at      = models.DateTimeField(null=True, blank=True)
    expires_at        = models.DateTimeField(null=True, blank=True)
    notes             = models.TextField(blank=True)
    created_at        = models.DateTimeField(auto_now_add=True)
    updated_at        = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "priority"], name="permit_status_priority_idx"),
            models.Index(fields=["driver", "status"], name="permit_driver_status_idx"),
        ]

    def __str__(self):
        return f"{self.permit_code} [{self.priority}] {self.status}"


class PermitCodeSequence(models.Model):
    """Monotonic counter behind permit codes. Never reset, so codes are never reused."""
    name        = models.CharField(max_length=30, unique=True)
    last_number = models.PositiveBigIntegerField(default=0)

    def __str__(self):
        return f"{self.name}: {self.last_number}"
