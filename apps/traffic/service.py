"""
Congestion response.

A CONGESTED reading halts every APPROVED permit in a haltable tier
(NORMAL, LOW). EMERGENCY and ESSENTIAL permits are counted as protected and
never touched. Re-running on the same state halts nothing new. Halted
permits stay halted until an operator reinstates or reschedules them.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone

from apps.notifications.models import Notification
from apps.notifications.service import NotificationService
from apps.permits.models import Permit
from apps.scheduling.models import TrafficLevel
from apps.scheduling.priority import HALTABLE_PRIORITIES, PROTECTED_PRIORITIES
from apps.traffic.models import TrafficUpdate

logger = logging.getLogger("portlink.traffic")

TRAFFIC_GROUP = "traffic"


def broadcast_traffic(payload: dict) -> None:
    """Push an event to every ws/traffic/ subscriber."""
    layer = get_channel_layer()
    if layer is None:
        return
    async_to_sync(layer.group_send)(TRAFFIC_GROUP, {"type": "traffic.update", **payload})


class CongestionResponder:

    def __init__(self, notification_service=None):
        self.notifier = notification_service or NotificationService()

    @transaction.atomic
    def on_traffic_update(self, status) -> dict:
        if status != TrafficLevel.CONGESTED:
            return {"halted_count": 0, "protected_count": 0, "halted_ids": []}

        protected_count = Permit.objects.filter(
            status=Permit.Status.APPROVED, priority__in=PROTECTED_PRIORITIES
        ).count()

        candidates = list(
            Permit.objects
            .select_for_update()
            .filter(status=Permit.Status.APPROVED, priority__in=HALTABLE_PRIORITIES)
            .values_list("id", flat=True)
        )
        halted_count = (
            Permit.objects
            .filter(id__in=candidates, status=Permit.Status.APPROVED)
            .update(status=Permit.Status.HALTED, halted_at=timezone.now(), updated_at=timezone.now())
        )

        for permit in Permit.objects.filter(id__in=candidates).select_related("driver"):
            self.notifier.notify(
                permit.driver,
                title   = "Permit Halted – Port Congestion",
                message = (
                    f"Gate traffic is congested. Permit {permit.permit_code} is on hold. "
                    f"Do not proceed until you are notified."
                ),
                type    = Notification.Type.WARNING,
                permit  = permit,
            )

        logger.warning(
            "[TRAFFIC ALERT] CONGESTED: %d permits halted, %d protected", halted_count, protected_count
        )
        return {"halted_count": halted_count, "protected_count": protected_count, "halted_ids": candidates}


class TrafficService:
    """Record a camera reading, run the responder, publish the result."""

    def __init__(self, responder=None):
        self.responder = responder or CongestionResponder()

    @transaction.atomic
    def record(self, validated_data: dict) -> TrafficUpdate:
        update = TrafficUpdate.objects.create(**validated_data)
        result = self.responder.on_traffic_update(update.status)

        update.processed         = True
        update.permits_halted    = result["halted_count"]
        update.permits_protected = result["protected_count"]
        update.save(update_fields=["processed", "permits_halted", "permits_protected"])

        feed = update.as_feed()
        transaction.on_commit(lambda: broadcast_traffic(feed))
        logger.info(
            "Traffic %s from %s: %d vehicles, %d trucks",
            update.status, update.camera_id, update.vehicle_count, update.truck_count,
        )
        return update
