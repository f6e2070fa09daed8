"""Scheduling serializers."""

from rest_framework import serializers
from .models import TimeSlot, VesselSchedule


class SlotQuerySerializer(serializers.Serializer):
    date = serializers.DateField()


class TimeSlotSerializer(serializers.ModelSerializer):
    available    = serializers.IntegerField(read_only=True)
    is_available = serializers.BooleanField(read_only=True)
    start_time   = serializers.TimeField(format="%H:%M")
    end_time     = serializers.TimeField(format="%H:%M")

    class Meta:
        model  = TimeSlot
        fields = [
            "id", "date", "start_time", "end_time", "capacity", "booked",
            "available", "status", "predicted_traffic", "is_available",
        ]


class VesselScheduleSerializer(serializers.ModelSerializer):
    class Meta:
        model  = VesselSchedule
        fields = [
            "id", "vessel_name", "arrival_date", "arrival_time",
            "estimated_trucks", "actual_trucks", "cargo_priority", "status",
        ]
