"""Job serializers."""

from rest_framework import serializers

from apps.fleet.serializers import CurrentLocationSerializer, DriverBriefSerializer
from apps.permits.serializers import PermitSlotSerializer
from apps.scheduling.priority import CargoType
from .models import Job, JobTemplate


class JobCreateSerializer(serializers.Serializer):
    customer_name    = serializers.CharField(min_length=1, max_length=120)
    container_number = serializers.CharField(required=False, allow_blank=True, max_length=20, default="")
    container_count  = serializers.IntegerField(min_value=1, default=1)
    cargo_type       = serializers.ChoiceField(choices=CargoType.choices)
    pickup_location  = serializers.CharField(min_length=1, max_length=200)
    destination      = serializers.CharField(min_length=1, max_length=200)
    preferred_date   = serializers.DateField()
    preferred_time   = serializers.TimeField(input_formats=["%H:%M", "%H:%M:%S"])
    notes            = serializers.CharField(required=False, allow_blank=True, default="")


class JobPermitSerializer(serializers.Serializer):
    permit_id   = serializers.UUIDField(source="id")
    permit_code = serializers.CharField()
    qr_code     = serializers.CharField()
    status      = serializers.CharField()
    time_slot   = PermitSlotSerializer(source="slot")


class JobSerializer(serializers.ModelSerializer):
    assigned_driver = DriverBriefSerializer(read_only=True)
    permit          = JobPermitSerializer(read_only=True, allow_null=True)
    preferred_time  = serializers.TimeField(format="%H:%M")

    class Meta:
        model  = Job
        fields = [
            "id", "job_number", "status", "priority", "cargo_type",
            "customer_name", "container_number", "container_count",
            "pickup_location", "destination", "preferred_date", "preferred_time", "notes",
            "assigned_driver", "permit", "assigned_at", "started_at", "completed_at", "created_at",
        ]


class AssignSerializer(serializers.Serializer):
    driver_id = serializers.UUIDField()


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=200)


class ActiveJobsQuerySerializer(serializers.Serializer):
    driver_id = serializers.UUIDField()


class CompletionSerializer(serializers.Serializer):
    completion_notes = serializers.CharField(required=False, allow_blank=True, default="")
    completed_at     = serializers.DateTimeField(required=False)


class JobTemplateSerializer(serializers.ModelSerializer):
    cargo_type = serializers.ChoiceField(choices=CargoType.choices)

    class Meta:
        model  = JobTemplate
        fields = [
            "id", "template_name", "cargo_type", "priority",
            "pickup_location", "destination", "notes", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "priority", "created_at", "updated_at"]
        extra_kwargs = {"notes": {"required": False}}


class TrackedDriverSerializer(DriverBriefSerializer):
    current_location = serializers.SerializerMethodField()

    class Meta(DriverBriefSerializer.Meta):
        fields = DriverBriefSerializer.Meta.fields + ["current_location"]

    def get_current_location(self, driver):
        location = self.context.get("current_location")
        return CurrentLocationSerializer(location).data if location else None


class JobTrackingSerializer(serializers.Serializer):
    job      = JobSerializer()
    driver   = serializers.SerializerMethodField()
    permit   = JobPermitSerializer(allow_null=True)
    timeline = serializers.ListField(child=serializers.DictField())

    def get_driver(self, obj):
        if obj["driver"] is None:
            return None
        return TrackedDriverSerializer(
            obj["driver"], context={"current_location": obj["current_location"]},
        ).data
