"""
Driver availability, registration and location reports.

is_available is a shared flag every assignment path contends over, so it is
only ever flipped with a conditional UPDATE. It is never read and then written.
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.fleet.models import Driver, DriverLocation
from portlink.exceptions import DriverRegisteredElsewhere

logger = logging.getLogger("portlink.fleet")

# Registration outcomes
CREATED  = "CREATED"
LINKED   = "LINKED"
EXISTING = "EXISTING"


def claim_driver(driver_id) -> bool:
    """Mark the driver busy. False if someone else got there first."""
    updated = (
        Driver.objects
        .filter(id=driver_id, is_available=True, is_active=True)
        .update(is_available=False)
    )
    if not updated:
        logger.info("Driver %s could not be claimed (busy or inactive)", driver_id)
    return updated == 1


def release_driver(driver_id) -> None:
    Driver.objects.filter(id=driver_id).update(is_available=True)


def first_available_driver(organization_id):
    """First available, active driver of the organization. No ranking beyond that."""
    return (
        Driver.objects
        .filter(organization_id=organization_id, is_available=True, is_active=True)
        .order_by("name", "created_at")
        .first()
    )


def register_driver(organization, data: dict):
    """
    Register a driver by phone number, idempotently.

    A phone already owned by another organization is refused with 409.
    An unowned driver is linked to ``organization``. Returns (driver, outcome).
    """
    existing = Driver.objects.filter(phone=data["phone"]).first()
    if existing is None:
        try:
            with transaction.atomic():
                driver = Driver.objects.create(organization=organization, **data)
        except IntegrityError:
            # Lost a race with a concurrent registration of the same phone
            existing = Driver.objects.get(phone=data["phone"])
        else:
            logger.info("Driver %s registered for %s", driver.phone, organization)
            return driver, CREATED

    if organization is None or existing.organization_id == organization.id:
        return existing, EXISTING

    if existing.organization_id is None:
        linked = (
            Driver.objects
            .filter(id=existing.id, organization__isnull=True)
            .update(
                organization=organization,
                has_smartphone=data.get("has_smartphone", existing.has_smartphone),
                prefers_sms=data.get("prefers_sms", existing.prefers_sms),
                updated_at=timezone.now(),
            )
        )
        existing.refresh_from_db()
        if linked:
            logger.info("Driver %s linked to %s", existing.phone, organization)
            return existing, LINKED
        if existing.organization_id == organization.id:
            return existing, EXISTING

    logger.warning("Driver %s is registered with another organization", existing.phone)
    raise DriverRegisteredElsewhere(existing.phone)


def record_location(driver: Driver, permit=None, **reading) -> DriverLocation:
    """Append one GPS reading. recorded_at defaults to now."""
    if reading.get("recorded_at") is None:
        reading["recorded_at"] = timezone.now()
    location = DriverLocation.objects.create(driver=driver, permit=permit, **reading)
    logger.info("[LOCATION] %s at %s,%s (eta %s min)",
                driver.name, location.latitude, location.longitude, location.eta_minutes)
    return location


def latest_location(driver_id):
    if driver_id is None:
        return None
    return (
        DriverLocation.objects
        .filter(driver_id=driver_id)
        .order_by("-recorded_at")
        .first()
    )
