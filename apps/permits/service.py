"""
Permit issuance and permit transitions.

PermitIssuer.issue runs as one transaction:
    permit code  →  slot capacity  →  driver claim  →  Permit row  →  job ASSIGNED
and queues the driver notification for after commit. If any step fails,
nothing is persisted: no capacity consumed, no driver marked busy.
"""

import logging
import secrets
from datetime import datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.fleet.service import claim_driver, release_driver
from apps.jobs.models import Job
from apps.notifications.models import Notification
from apps.notifications.service import NotificationService
from apps.permits.models import Permit, PermitCodeSequence
from apps.scheduling.models import TimeSlot
from apps.scheduling.priority import classify
from apps.scheduling.service import SlotAllocator
from portlink.exceptions import (
    DriverUnavailable, InvalidTransition, JobNotPending, SlotUnavailable,
)

logger = logging.getLogger("portlink.permits")

PERMIT_SEQUENCE = "permit"


def generate_permit_code() -> str:
    """PRM-<year>-<NNNNNN> from a locked counter row. Must run inside a transaction."""
    PermitCodeSequence.objects.get_or_create(name=PERMIT_SEQUENCE)
    seq = PermitCodeSequence.objects.select_for_update().get(name=PERMIT_SEQUENCE)
    seq.last_number += 1
    seq.save(update_fields=["last_number"])
    return f"PRM-{timezone.localdate().year}-{seq.last_number:06d}"


def generate_qr_code() -> str:
    return f"PERMIT-{secrets.token_hex(8).upper()}"


def permit_expiry(slot: TimeSlot):
    end = datetime.combine(slot.date, slot.end_time)
    return timezone.make_aware(end) + timedelta(hours=settings.PORTLINK_PERMIT_GRACE_HOURS)


class PermitIssuer:
    """
    Dependencies are injected so they can be swapped in tests.
    """

    def __init__(self, allocator=None, notification_service=None):
        self.allocator = allocator or SlotAllocator()
        self.notifier  = notification_service or NotificationService()

    @transaction.atomic
    def issue(self, driver, *, job=None, slot=None, cargo_type=None,
              priority=None, vessel=None, notes="") -> Permit:
        """
        Job path: pass `job`; the slot is allocated from its preferred date/time
        and the driver is claimed. Direct booking: pass `slot` and `cargo_type`.
        """
        if job is not None:
            cargo_type = job.cargo_type
            priority   = job.priority
        priority = priority or classify(cargo_type)

        permit_code = generate_permit_code()

        if slot is None:
            slot = self.allocator.allocate(job.preferred_date, job.preferred_time, priority)
        else:
            if not self.allocator.reserve(slot.id):
                slot.refresh_from_db()
                if slot.status == TimeSlot.Status.CLOSED:
                    raise SlotUnavailable("Time slot is closed")
                raise SlotUnavailable()
            slot.refresh_from_db()

        if job is not None:
            if not claim_driver(driver.id):
                raise DriverUnavailable(f"Driver {driver.name} is not available")
            driver.is_available = False

        now = timezone.now()
        permit = Permit.objects.create(
            permit_code     = permit_code,
            qr_code         = generate_qr_code(),
            driver          = driver,
            slot            = slot,
            job             = job,
            vessel          = vessel,
            cargo_type      = cargo_type,
            priority        = priority,
            status          = Permit.Status.APPROVED,
            delivery_method = driver.delivery_method,
            approved_at     = now,
            expires_at      = permit_expiry(slot),
            notes           = notes or "",
        )

        if job is not None:
            updated = (
                Job.objects
                .filter(id=job.id, status=Job.Status.PENDING)
                .update(status=Job.Status.ASSIGNED, assigned_driver=driver,
                        assigned_at=now, updated_at=now)
            )
            if not updated:
                job.refresh_from_db()
                raise JobNotPending(job.status)
            job.refresh_from_db()

        self.notifier.notify(
            driver,
            title   = "New Job Assigned" if job else "Permit Approved",
            message = self._issue_message(permit, slot, job),
            type    = Notification.Type.APPROVAL,
            permit  = permit,
        )
        logger.info(
            "Permit %s issued to %s for slot %s (%s)",
            permit.permit_code, driver.name, slot, priority,
        )
        return permit

    @staticmethod
    def _issue_message(permit, slot, job):
        window = f"{slot.date} {slot.start_time:%H:%M}-{slot.end_time:%H:%M}"
        if job is not None:
            return f"Job {job.job_number} assigned. Permit: {permit.permit_code}. Slot: {window}"
        return f"Your permit {permit.permit_code} for {window} has been approved."


class PermitService:
    """Manual permit actions by port staff, plus the completion hook used by jobs."""

    def __init__(self, allocator=None, notification_service=None):
        self.allocator = allocator or SlotAllocator()
        self.notifier  = notification_service or NotificationService()

    def _transition(self, permit, allowed, to_status, **fields):
        updated = (
            Permit.objects
            .filter(id=permit.id, status__in=allowed)
            .update(status=to_status, updated_at=timezone.now(), **fields)
        )
        if not updated:
            permit.refresh_from_db()
            raise InvalidTransition("permit", permit.status, to_status)
        permit.refresh_from_db()
        return permit

    @transaction.atomic
    def approve(self, permit):
        """PENDING → APPROVED, or reinstate a HALTED permit."""
        permit = self._transition(
            permit, [Permit.Status.PENDING, Permit.Status.HALTED], Permit.Status.APPROVED,
            approved_at=timezone.now(), halted_at=None,
        )
        self.notifier.notify(
            permit.driver, "Permit Approved",
            f"Permit {permit.permit_code} is approved. You may proceed to the gate.",
            type=Notification.Type.APPROVAL, permit=permit,
        )
        logger.info("Permit %s approved", permit.permit_code)
        return permit

    @transaction.atomic
    def halt(self, permit):
        permit = self._transition(
            permit, [Permit.Status.APPROVED], Permit.Status.HALTED, halted_at=timezone.now(),
        )
        self.notifier.notify(
            permit.driver, "Permit Halted",
            f"Permit {permit.permit_code} is on hold. Do not proceed to the gate.",
            type=Notification.Type.WARNING, permit=permit,
        )
        logger.info("Permit %s halted manually", permit.permit_code)
        return permit

    @transaction.atomic
    def cancel(self, permit, reason=""):
        """
        Cancel and give the slot back. A job-bound permit returns its job to
        PENDING and frees the driver so the job can be assigned again.
        """
        permit = self._transition(
            permit, [Permit.Status.PENDING, Permit.Status.APPROVED, Permit.Status.HALTED],
            Permit.Status.CANCELLED,
        )
        self.allocator.release(permit.slot_id)

        if permit.job_id:
            reopened = (
                Job.objects
                .filter(id=permit.job_id, status=Job.Status.ASSIGNED)
                .update(status=Job.Status.PENDING, assigned_driver=None,
                        assigned_at=None, updated_at=timezone.now())
            )
            if reopened:
                release_driver(permit.driver_id)

        self.notifier.notify(
            permit.driver, "Permit Cancelled",
            f"Permit {permit.permit_code} has been cancelled. {reason}".strip(),
            type=Notification.Type.DENIAL, permit=permit,
        )
        logger.info("Permit %s cancelled", permit.permit_code)
        return permit

    @transaction.atomic
    def reschedule(self, permit, new_slot):
        """Move an APPROVED or HALTED permit to another slot; it comes back APPROVED."""
        if permit.status not in (Permit.Status.APPROVED, Permit.Status.HALTED):
            raise InvalidTransition("permit", permit.status, "RESCHEDULED")
        if new_slot.id == permit.slot_id:
            raise SlotUnavailable("Permit is already booked on this slot")

        if not self.allocator.reserve(new_slot.id):
            raise SlotUnavailable()
        new_slot.refresh_from_db()

        old_slot_id = permit.slot_id
        original    = permit.original_slot if permit.original_slot_id else permit.slot
        permit = self._transition(
            permit, [Permit.Status.APPROVED, Permit.Status.HALTED], Permit.Status.APPROVED,
            slot=new_slot,
            original_slot=original,
            rescheduled_count=permit.rescheduled_count + 1,
            approved_at=timezone.now(),
            halted_at=None,
            expires_at=permit_expiry(new_slot),
        )
        self.allocator.release(old_slot_id)

        self.notifier.notify(
            permit.driver, "Permit Rescheduled",
            f"Permit {permit.permit_code} moved to {new_slot.date} "
            f"{new_slot.start_time:%H:%M}-{new_slot.end_time:%H:%M}.",
            type=Notification.Type.RESCHEDULE, permit=permit,
        )
        logger.info("Permit %s rescheduled to %s", permit.permit_code, new_slot)
        return permit

    def complete(self, permit):
        return self._transition(
            permit, [Permit.Status.APPROVED, Permit.Status.HALTED], Permit.Status.COMPLETED,
            completed_at=timezone.now(),
        )

    def expire_overdue(self, now=None) -> int:
        """APPROVED/HALTED permits past expires_at become EXPIRED. Returns count."""
        now = now or timezone.now()
        return (
            Permit.objects
            .filter(status__in=[Permit.Status.APPROVED, Permit.Status.HALTED], expires_at__lt=now)
            .update(status=Permit.Status.EXPIRED, updated_at=now)
        )
