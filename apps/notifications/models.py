"""Notification record — one per attempted delivery to a driver."""

import uuid
from django.db import models


class Notification(models.Model):

    class Type(models.TextChoices):
        INFO       = "INFO",       "Info"
        WARNING    = "WARNING",    "Warning"
        URGENT     = "URGENT",     "Urgent"
        RESCHEDULE = "RESCHEDULE", "Reschedule"
        APPROVAL   = "APPROVAL",   "Approval"
        DENIAL     = "DENIAL",     "Denial"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        SENT    = "SENT",    "Sent"
        FAILED  = "FAILED",  "Failed"

    id              = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    driver          = models.ForeignKey("fleet.Driver", on_delete=models.CASCADE, related_name="notifications")
    permit          = models.ForeignKey("permits.Permit", on_delete=models.SET_NULL,
                                        null=True, blank=True, related_name="notifications")
    title           = models.CharField(max_length=120)
    message         = models.TextField()
    type            = models.CharField(max_length=10, choices=Type.choices, default=Type.INFO)
    delivery_method = models.CharField(max_length=3, default="APP")
    status          = models.CharField(max_length=7, choices=Status.choices, default=Status.PENDING)
    error_message   = models.TextField(blank=True)
    created_at      = models.DateTimeField(auto_now_add=True)
    sent_at         = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes  = [models.Index(fields=["driver", "status"], name="notification_driver_idx")]

    def __str__(self):
        return f"{self.type} → {self.driver_id}: {self.title}"
