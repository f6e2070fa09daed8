from rest_framework import serializers

from apps.scheduling.models import TrafficLevel


class TrafficUpdateSerializer(serializers.Serializer):
    camera_id      = serializers.CharField(min_length=1, max_length=60)
    timestamp      = serializers.DateTimeField()
    status         = serializers.ChoiceField(choices=TrafficLevel.choices)
    vehicle_count  = serializers.IntegerField(min_value=0)
    truck_count    = serializers.IntegerField(min_value=0)
    recommendation = serializers.CharField(required=False, allow_blank=True, default="")
