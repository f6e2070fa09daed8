"""Driver serializers."""

import re
from rest_framework import serializers
from .models import Driver, DriverLocation

PHONE_PATTERN = re.compile(r"^\+\d{9,15}$")


def validate_phone(value):
    if not PHONE_PATTERN.match(value):
        raise serializers.ValidationError("Phone must be in E.164 format, e.g. +966512345678.")


class DriverSerializer(serializers.ModelSerializer):
    delivery_method = serializers.CharField(read_only=True)

    class Meta:
        model  = Driver
        fields = [
            "id", "name", "phone", "vehicle_plate", "vehicle_type",
            "has_smartphone", "prefers_sms", "delivery_method",
            "is_available", "is_active", "created_at",
        ]
        read_only_fields = ["id", "is_available", "created_at"]


class DriverRegisterSerializer(serializers.Serializer):
    name           = serializers.CharField(min_length=2, max_length=120)
    phone          = serializers.CharField(validators=[validate_phone])
    vehicle_plate  = serializers.CharField(max_length=20)
    vehicle_type   = serializers.ChoiceField(choices=Driver.VehicleType.choices)
    has_smartphone = serializers.BooleanField(default=True)
    prefers_sms    = serializers.BooleanField(default=False)
    push_token     = serializers.CharField(required=False, allow_blank=True, default="")


class DriverBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model  = Driver
        fields = ["id", "name", "phone", "vehicle_plate", "vehicle_type"]


class DriverUpdateSerializer(serializers.ModelSerializer):
    """Fields an organization may change on its own driver. Availability is owned by dispatch."""

    class Meta:
        model  = Driver
        fields = [
            "name", "vehicle_plate", "vehicle_type",
            "has_smartphone", "prefers_sms", "push_token", "is_active",
        ]
        extra_kwargs = {"name": {"min_length": 2}}

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No valid fields to update")
        return attrs


class LocationReportSerializer(serializers.Serializer):
    driver_id   = serializers.UUIDField()
    permit_id   = serializers.UUIDField(required=False, allow_null=True)
    latitude    = serializers.DecimalField(max_digits=9, decimal_places=6, min_value=-90, max_value=90)
    longitude   = serializers.DecimalField(max_digits=9, decimal_places=6, min_value=-180, max_value=180)
    accuracy    = serializers.FloatField(required=False, allow_null=True, min_value=0)
    speed       = serializers.FloatField(required=False, allow_null=True, min_value=0)
    heading     = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=360)
    eta_minutes = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    recorded_at = serializers.DateTimeField(required=False, allow_null=True)


class LocationQuerySerializer(serializers.Serializer):
    driver_id = serializers.UUIDField(required=False)
    limit     = serializers.IntegerField(required=False, min_value=1, max_value=500, default=50)


class DriverLocationSerializer(serializers.ModelSerializer):
    driver = DriverBriefSerializer(read_only=True)

    class Meta:
        model  = DriverLocation
        fields = [
            "id", "driver", "permit", "latitude", "longitude",
            "accuracy", "speed", "heading", "eta_minutes", "recorded_at",
        ]


class CurrentLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model  = DriverLocation
        fields = ["latitude", "longitude", "speed", "eta_minutes", "recorded_at"]
