"""
Notification service.
Every notification is stored first, then delivered by a Celery task:
SMS goes to the gateway when SMS_GATEWAY_URL is set, everything else is
logged. Delivery never blocks or rolls back the flow that triggered it.
"""

import logging
import requests
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.notifications.models import Notification
from apps.notifications.tasks import deliver_notification

logger = logging.getLogger("portlink.notifications")


class NotificationService:

    def notify(self, driver, title: str, message: str,
               type: str = Notification.Type.INFO, permit=None):
        """
        Record a notification and queue its delivery for after commit.
        Returns the stored Notification, or None if it could not be stored.
        """
        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    driver          = driver,
                    permit          = permit,
                    title           = title,
                    message         = message,
                    type            = type,
                    delivery_method = driver.delivery_method,
                )
        except DatabaseError:
            logger.exception("Could not record notification for driver %s", driver.id)
            return None

        # A broker outage is logged by Django and never fails the committed request
        transaction.on_commit(lambda: deliver_notification.delay(str(notification.id)), robust=True)
        return notification

    def deliver(self, notification: Notification) -> bool:
        """Send one stored notification and mark it SENT or FAILED."""
        driver = notification.driver
        if notification.delivery_method == "SMS":
            ok, error = self.send_sms(driver.phone, notification.message)
        else:
            logger.info("[PUSH] To %s: %s – %s", driver.name, notification.title, notification.message)
            ok, error = True, ""

        notification.status        = Notification.Status.SENT if ok else Notification.Status.FAILED
        notification.error_message = error
        notification.sent_at       = timezone.now() if ok else None
        notification.save(update_fields=["status", "error_message", "sent_at"])
        return ok

    def send_sms(self, phone: str, message: str):
        """Post to the SMS gateway. Without a gateway configured the message is only logged."""
        if not settings.SMS_GATEWAY_URL:
            logger.info("[SMS] To %s: %s", phone, message)
            return True, ""
        try:
            resp = requests.post(
                f"{settings.SMS_GATEWAY_URL}/send",
                json={"phone": phone, "message": message},
                timeout=3,
            )
            if resp.status_code == 200:
                logger.info("SMS sent to %s", phone)
                return True, ""
            logger.warning("SMS gateway returned %s for %s", resp.status_code, phone)
            return False, f"Gateway returned {resp.status_code}"
        except requests.RequestException as exc:
            logger.warning("SMS failed for %s: %s", phone, exc)
            return False, str(exc)

    def broadcast(self, drivers, title: str, message: str, type: str = Notification.Type.INFO) -> int:
        """Notify every driver in the queryset. Returns count recorded."""
        sent = 0
        for driver in drivers:
            if self.notify(driver, title, message, type=type):
                sent += 1
        logger.info("Broadcast '%s' recorded for %d drivers", title, sent)
        return sent
