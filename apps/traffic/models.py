"""Gate camera telemetry. Append-only; the newest row by timestamp is the current status."""

import uuid
from django.db import models

from apps.scheduling.models import TrafficLevel


class TrafficUpdate(models.Model):
    id                = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    camera_id         = models.CharField(max_length=60)
    timestamp         = models.DateTimeField()
    status            = models.CharField(max_length=10, choices=TrafficLevel.choices)
    vehicle_count     = models.PositiveIntegerField(default=0)
    truck_count       = models.PositiveIntegerField(default=0)
    recommendation    = models.TextField(blank=True)
    processed         = models.BooleanField(default=False)
    permits_halted    = models.PositiveIntegerField(default=0)
    permits_protected = models.PositiveIntegerField(default=0)
    created_at        = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-timestamp"]
        indexes  = [models.Index(fields=["-timestamp"], name="traffic_latest_idx")]

    def __str__(self):
        return f"{self.camera_id} {self.status} @ {self.timestamp:%Y-%m-%d %H:%M}"

    def as_feed(self) -> dict:
        return {
            "id":                str(self.id),
            "camera_id":         self.camera_id,
            "timestamp":         self.timestamp.isoformat(),
            "status":            self.status,
            "vehicle_count":     self.vehicle_count,
            "truck_count":       self.truck_count,
            "recommendation":    self.recommendation,
            "permits_halted":    self.permits_halted,
            "permits_protected": self.permits_protected,
        }
