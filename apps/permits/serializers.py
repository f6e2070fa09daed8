"""Permit serializers."""

from rest_framework import serializers

from apps.fleet.serializers import DriverBriefSerializer
from apps.scheduling.priority import CargoType
from .models import Permit


class PermitSlotSerializer(serializers.Serializer):
    id                = serializers.UUIDField()
    date              = serializers.DateField()
    start_time        = serializers.TimeField(format="%H:%M")
    end_time          = serializers.TimeField(format="%H:%M")
    predicted_traffic = serializers.CharField()


class PermitSerializer(serializers.ModelSerializer):
    slot       = PermitSlotSerializer(read_only=True)
    driver     = DriverBriefSerializer(read_only=True)
    job_number = serializers.CharField(source="job.job_number", read_only=True, default=None)

    class Meta:
        model  = Permit
        fields = [
            "id", "permit_code", "qr_code", "status", "priority", "cargo_type",
            "delivery_method", "driver", "slot", "job", "job_number", "vessel",
            "original_slot", "rescheduled_count",
            "approved_at", "halted_at", "completed_at", "expires_at", "notes", "created_at",
        ]


class BookingSerializer(serializers.Serializer):
    driver_id  = serializers.UUIDField()
    slot_id    = serializers.UUIDField()
    cargo_type = serializers.ChoiceField(choices=CargoType.choices)
    vessel_id  = serializers.UUIDField(required=False, allow_null=True)
    notes      = serializers.CharField(required=False, allow_blank=True, default="")


class RescheduleSerializer(serializers.Serializer):
    slot_id = serializers.UUIDField()


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=200)


class PermitListQuerySerializer(serializers.Serializer):
    driver_id = serializers.UUIDField(required=False)
