"""Driver registry and location reports. Drivers do not log in; their organization dispatches them."""

import uuid
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Driver(models.Model):

    class VehicleType(models.TextChoices):
        TRUCK     = "TRUCK",     "Truck"
        CONTAINER = "CONTAINER", "Container carrier"
        TANKER    = "TANKER",    "Tanker"
        FLATBED   = "FLATBED",   "Flatbed"

    class DeliveryMethod(models.TextChoices):
        APP = "APP", "Push (mobile app)"
        SMS = "SMS", "SMS"

    id             = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization   = models.ForeignKey("authentication.Organization", on_delete=models.SET_NULL,
                                       null=True, blank=True, related_name="drivers")
    name           = models.CharField(max_length=120)
    phone          = models.CharField(max_length=20, unique=True)
    vehicle_plate  = models.CharField(max_length=20)
    vehicle_type   = models.CharField(max_length=10, choices=VehicleType.choices,
                                      default=VehicleType.TRUCK)
    has_smartphone = models.BooleanField(default=True)
    prefers_sms    = models.BooleanField(default=False)
    push_token     = models.CharField(max_length=255, blank=True)
    # False while bound to an ASSIGNED / IN_PROGRESS job
    is_available   = models.BooleanField(default=True)
    is_active      = models.BooleanField(default=True)
    created_at     = models.DateTimeField(auto_now_add=True)
    updated_at     = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes  = [
            models.Index(fields=["organization", "is_available", "is_active"], name="driver_dispatch_idx"),
        ]

    def __str__(self):
        return f"{self.name} – {self.vehicle_plate}"

    @property
    def delivery_method(self) -> str:
        if self.has_smartphone and not self.prefers_sms:
            return self.DeliveryMethod.APP
        return self.DeliveryMethod.SMS


class DriverLocation(models.Model):
    """GPS reading reported by the driver app. Append-only."""

    id          = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    driver      = models.ForeignKey(Driver, on_delete=models.CASCADE, related_name="locations")
    permit      = models.ForeignKey("permits.Permit", on_delete=models.SET_NULL,
                                    null=True, blank=True, related_name="locations")
    latitude    = models.DecimalField(max_digits=9, decimal_places=6,
                                      validators=[MinValueValidator(-90), MaxValueValidator(90)])
    longitude   = models.DecimalField(max_digits=9, decimal_places=6,
                                      validators=[MinValueValidator(-180), MaxValueValidator(180)])
    accuracy    = models.FloatField(null=True, blank=True)   # metres
    speed       = models.FloatField(null=True, blank=True)   # km/h
    heading     = models.PositiveSmallIntegerField(null=True, blank=True,
                                                   validators=[MaxValueValidator(360)])
    eta_minutes = models.PositiveIntegerField(null=True, blank=True)
    recorded_at = models.DateTimeField()
    created_at  = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-recorded_at"]
        indexes  = [
            models.Index(fields=["driver", "-recorded_at"], name="driver_location_latest_idx"),
        ]

    def __str__(self):
        return f"{self.driver_id} @ {self.latitude},{self.longitude}"
