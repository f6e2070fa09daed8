"""Driver notification feed and port-wide broadcast."""

from rest_framework import generics
from rest_framework.views import APIView
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema

from apps.authentication.permissions import IsOrganizationMember, IsPortAdmin, scope_to_organization
from apps.fleet.models import Driver
from apps.notifications.models import Notification
from apps.notifications.service import NotificationService
from . import serializers as sz

notifier = NotificationService()


@extend_schema(tags=["Notifications"], summary="Notifications sent to the organization's drivers")
class NotificationListView(generics.ListAPIView):
    serializer_class   = sz.NotificationSerializer
    permission_classes = [IsOrganizationMember]
    filter_backends    = [DjangoFilterBackend]
    filterset_fields   = ["driver", "status", "type"]

    def get_queryset(self):
        qs = Notification.objects.select_related("driver")
        return scope_to_organization(qs, self.request.user, field="driver__organization")


@extend_schema(tags=["Notifications"], summary="Notify every active driver (port admin only)")
class BroadcastView(APIView):
    permission_classes = [IsPortAdmin]

    def post(self, request):
        ser = sz.BroadcastSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data
        count = notifier.broadcast(
            Driver.objects.filter(is_active=True), d["title"], d["message"], type=d["type"]
        )
        return Response({"success": True, "sent_to": count})
