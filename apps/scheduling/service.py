"""
Slot allocation.

`booked` on a TimeSlot is shared by every issuance path (job assignment,
direct booking, bulk assignment, reschedule). It is only changed through
the conditional UPDATEs below, so the database arbitrates races and a slot
can never be booked past its capacity.

Ranking for a preferred (date, time):
    1. an AVAILABLE slot starting exactly at the preferred time wins outright
    2. otherwise the nearest start time, with CONGESTED slots pushed to the
       back unless the tier is protected; ties go to the earlier slot
"""

import logging
from datetime import time

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from apps.scheduling.models import TimeSlot, TrafficLevel, VesselSchedule
from apps.scheduling.priority import is_protected
from portlink.exceptions import NoSlotAvailable

logger = logging.getLogger("portlink.scheduling")


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


class SlotAllocator:

    def open_slots(self, date):
        return TimeSlot.objects.filter(
            date=date,
            status=TimeSlot.Status.AVAILABLE,
            booked__lt=F("capacity"),
        )

    def rank(self, slots, preferred_time, priority):
        slots = list(slots)
        if preferred_time is None:
            return sorted(slots, key=lambda s: s.start_time)

        protected = is_protected(priority)
        target    = _minutes(preferred_time)

        def key(slot):
            exact   = 0 if slot.start_time == preferred_time else 1
            penalty = 0 if protected or slot.predicted_traffic != TrafficLevel.CONGESTED else 1
            return (exact, penalty, abs(_minutes(slot.start_time) - target), slot.start_time)

        return sorted(slots, key=key)

    def find_slot(self, date, preferred_time=None, priority="NORMAL"):
        """Id of the best open slot for the request, or None. Does not reserve."""
        ranked = self.rank(self.open_slots(date), preferred_time, priority)
        return ranked[0].id if ranked else None

    def reserve(self, slot_id) -> bool:
        """Take one unit of capacity. False if the slot is full, closed or gone."""
        updated = (
            TimeSlot.objects
            .filter(id=slot_id, status=TimeSlot.Status.AVAILABLE, booked__lt=F("capacity"))
            .update(booked=F("booked") + 1, updated_at=timezone.now())
        )
        if not updated:
            return False
        TimeSlot.objects.filter(id=slot_id, booked__gte=F("capacity")).update(
            status=TimeSlot.Status.FULL
        )
        return True

    def release(self, slot_id) -> None:
        """Give back one unit. Never drops below zero; a FULL slot reopens."""
        TimeSlot.objects.filter(id=slot_id, booked__gt=0).update(
            booked=F("booked") - 1, updated_at=timezone.now()
        )
        TimeSlot.objects.filter(
            id=slot_id, status=TimeSlot.Status.FULL, booked__lt=F("capacity")
        ).update(status=TimeSlot.Status.AVAILABLE)

    def allocate(self, date, preferred_time=None, priority="NORMAL") -> TimeSlot:
        """
        Reserve the best slot for the request.
        Walks the ranking so that losing a race for one slot falls through
        to the next candidate instead of failing the request.
        """
        for slot in self.rank(self.open_slots(date), preferred_time, priority):
            if self.reserve(slot.id):
                slot.refresh_from_db()
                logger.info("Reserved slot %s for %s request at %s", slot, priority, preferred_time)
                return slot
        logger.warning("No slot on %s for %s request at %s", date, priority, preferred_time)
        raise NoSlotAvailable()


class VesselSurgeAdvisor:
    """
    Advisory warning when scheduled vessels will flood the gate.
    Never blocks a request; it only explains the risk and lists calmer slots.
    """

    def __init__(self, allocator=None):
        self.allocator = allocator or SlotAllocator()

    def advise(self, date, preferred_time, priority):
        if preferred_time is None:
            return None

        start_hour, end_hour = settings.PORTLINK_SURGE_WINDOW
        if not (start_hour <= preferred_time.hour < end_hour):
            return None

        vessels = list(
            VesselSchedule.objects
            .filter(arrival_date=date, status=VesselSchedule.Status.SCHEDULED)
            .order_by("arrival_time")
        )
        trucks = sum(v.estimated_trucks for v in vessels)
        if not vessels or trucks <= settings.PORTLINK_SURGE_TRUCK_THRESHOLD:
            return None

        level = (
            TrafficLevel.CONGESTED
            if trucks > settings.PORTLINK_SURGE_CONGESTED_THRESHOLD
            else TrafficLevel.MODERATE
        )
        calmer = self.allocator.open_slots(date).exclude(predicted_traffic=TrafficLevel.CONGESTED)
        alternatives = sorted(
            calmer, key=lambda s: (s.predicted_traffic != TrafficLevel.NORMAL, s.start_time)
        )[: settings.PORTLINK_SURGE_ALTERNATIVES]

        logger.info("Vessel surge on %s: %d trucks expected (%s)", date, trucks, level)
        return {
            "vessels": [
                {
                    "name":             v.vessel_name,
                    "arrival_time":     v.arrival_time.strftime("%H:%M") if v.arrival_time else None,
                    "estimated_trucks": v.estimated_trucks,
                    "cargo_priority":   v.cargo_priority,
                }
                for v in vessels
            ],
            "total_trucks":        trucks,
            "expected_congestion": level.value,
            "message": (
                f"{len(vessels)} vessels arriving {date}, {trucks} trucks expected. "
                f"Heavy traffic {start_hour:02d}:00-{end_hour:02d}:00."
            ),
            "suggested_alternatives": [
                {
                    "time":      f"{s.start_time:%H:%M} - {s.end_time:%H:%M}",
                    "available": s.available,
                    "traffic":   s.predicted_traffic,
                }
                for s in alternatives
            ],
            "priority_protected": is_protected(priority),
        }
