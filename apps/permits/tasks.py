"""Celery tasks for permit lifecycle."""

import logging
from celery import shared_task

logger = logging.getLogger("portlink.permits")


@shared_task
def expire_permits():
    """
    Beat task: APPROVED/HALTED permits whose slot ended more than the grace
    period ago become EXPIRED.
    """
    from apps.permits.service import PermitService

    count = PermitService().expire_overdue()
    logger.info("Expired %d overdue permits", count)
    return count
