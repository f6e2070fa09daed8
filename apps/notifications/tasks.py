"""Celery tasks for notification delivery."""

import logging
from celery import shared_task

logger = logging.getLogger("portlink.notifications")


@shared_task
def deliver_notification(notification_id: str):
    from apps.notifications.models import Notification
    from apps.notifications.service import NotificationService

    try:
        notification = Notification.objects.select_related("driver").get(id=notification_id)
    except Notification.DoesNotExist:
        logger.error("Notification %s not found for delivery", notification_id)
        return False

    if notification.status == Notification.Status.SENT:
        return True
    return NotificationService().deliver(notification)
