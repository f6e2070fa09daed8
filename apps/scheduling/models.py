"""
Scheduling models.
A TimeSlot is a fixed-capacity gate window; `booked` is shared by every
issuance and is only changed through SlotAllocator's conditional updates.
"""

import uuid
from django.db import models
from django.db.models import F, Q
from django.core.validators import MinValueValidator


class TrafficLevel(models.TextChoices):
    NORMAL    = "NORMAL",    "Normal"
    MODERATE  = "MODERATE",  "Moderate"
    CONGESTED = "CONGESTED", "Congested"


class TimeSlot(models.Model):

    class Status(models.TextChoices):
        AVAILABLE = "AVAILABLE", "Available"
        FULL      = "FULL",      "Full"
        CLOSED    = "CLOSED",    "Closed"

    id                = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    date              = models.DateField()
    start_time        = models.TimeField()
    end_time          = models.TimeField()
    capacity          = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    booked            = models.PositiveIntegerField(default=0)
    status            = models.CharField(max_length=10, choices=Status.choices, default=Status.AVAILABLE)
    predicted_traffic = models.CharField(max_length=10, choices=TrafficLevel.choices,
                                         default=TrafficLevel.NORMAL)
    created_at        = models.DateTimeField(auto_now_add=True)
    updated_at        = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "start_time"]
        constraints = [
            models.UniqueConstraint(fields=["date", "start_time"], name="slot_unique_window"),
            models.CheckConstraint(
                condition=Q(booked__gte=0) & Q(booked__lte=F("capacity")),
                name="slot_booked_within_capacity",
            ),
        ]
        indexes = [models.Index(fields=["date", "status"], name="slot_date_status_idx")]

    def __str__(self):
        return f"{self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M} ({self.booked}/{self.capacity})"

    @property
    def available(self) -> int:
        return max(self.capacity - self.booked, 0)

    @property
    def is_available(self) -> bool:
        return self.status == self.Status.AVAILABLE and self.booked < self.capacity


class VesselSchedule(models.Model):
    """Advisory only: expected truck surge after a vessel unloads."""

    class Status(models.TextChoices):
        SCHEDULED = "SCHEDULED", "Scheduled"
        ARRIVED   = "ARRIVED",   "Arrived"
        DEPARTED  = "DEPARTED",  "Departed"
        DELAYED   = "DELAYED",   "Delayed"

    id               = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vessel_name      = models.CharField(max_length=120)
    arrival_date     = models.DateField()
    arrival_time     = models.TimeField(null=True, blank=True)
    estimated_trucks = models.PositiveIntegerField(default=0)
    actual_trucks    = models.PositiveIntegerField(default=0)
    cargo_priority   = models.CharField(max_length=10, blank=True)
    status           = models.CharField(max_length=10, choices=Status.choices, default=Status.SCHEDULED)
    notes            = models.TextField(blank=True)
    created_at       = models.DateTimeField(auto_now_add=True)
    updated_at       = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["arrival_date", "arrival_time"]
        indexes  = [models.Index(fields=["arrival_date", "status"], name="vessel_arrival_idx")]

    def __str__(self):
        return f"{self.vessel_name} – {self.arrival_date} ({self.estimated_trucks} trucks)"
