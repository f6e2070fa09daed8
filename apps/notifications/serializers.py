from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model  = Notification
        fields = [
            "id", "driver", "permit", "title", "message", "type",
            "delivery_method", "status", "error_message", "created_at", "sent_at",
        ]


class BroadcastSerializer(serializers.Serializer):
    title   = serializers.CharField(max_length=120, default="Port announcement")
    message = serializers.CharField(max_length=160)
    type    = serializers.ChoiceField(choices=Notification.Type.choices, default=Notification.Type.INFO)
