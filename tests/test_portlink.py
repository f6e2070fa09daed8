"""
PortLink Test Suite — services, allocation and concurrency.

Coverage:
  - Unit: cargo classification, slot ranking, permit expiry
  - Integration: slot allocation, permit issuance, job lifecycle,
    tracking and templates, driver registry, bulk assignment,
    congestion response, notification delivery
  - Concurrency: slot capacity, driver claims and job numbering under
    parallel writes
  - Realtime: traffic WebSocket feed

Run: pytest tests/ -v
"""

import datetime
import re
import threading
from datetime import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests
from asgiref.sync import async_to_sync
from django.test import override_settings
from django.utils import timezone

SLOT_DATE = datetime.date(2025, 1, 10)
PERMIT_CODE = re.compile(r"^PRM-\d{4}-\d{6}$")


def _issuer():
    from apps.permits.service import PermitIssuer
    return PermitIssuer(notification_service=MagicMock())


def _permit_service():
    from apps.permits.service import PermitService
    return PermitService(notification_service=MagicMock())


# ═══════════════════════════════════════════════════════════════════════════════
# UNIT TESTS: Priority Classification
# ═══════════════════════════════════════════════════════════════════════════════

class TestClassification:

    @pytest.mark.parametrize("cargo,tier", [
        ("MEDICAL",        "EMERGENCY"),
        ("PERISHABLE",     "EMERGENCY"),
        ("HAZARDOUS",      "EMERGENCY"),
        ("TIME_SENSITIVE", "ESSENTIAL"),
        ("STANDARD",       "NORMAL"),
        ("OTHER",          "NORMAL"),
        ("BULK",           "LOW"),
    ])
    def test_cargo_maps_to_tier(self, cargo, tier):
        from apps.scheduling.priority import classify
        assert classify(cargo) == tier

    def test_classification_is_case_insensitive(self):
        from apps.scheduling.priority import classify
        assert classify("medical") == "EMERGENCY"
        assert classify(" bulk ") == "LOW"

    def test_unknown_or_missing_cargo_is_normal(self):
        from apps.scheduling.priority import classify
        assert classify("FURNITURE") == "NORMAL"
        assert classify(None) == "NORMAL"
        assert classify("") == "NORMAL"

    def test_only_top_two_tiers_are_protected(self):
        from apps.scheduling.priority import is_protected
        assert is_protected("EMERGENCY")
        assert is_protected("ESSENTIAL")
        assert not is_protected("NORMAL")
        assert not is_protected("LOW")

    def test_rules_table_lists_every_cargo_type_highest_first(self):
        from apps.scheduling.priority import priority_rules
        rules = priority_rules()
        assert len(rules) == 7
        assert rules[0]["priority_level"] == "EMERGENCY"
        assert rules[-1] == {
            "cargo_type": "BULK", "priority_level": "LOW", "max_delay_minutes": 1440,
            "can_be_halted": True, "description": "Bulk",
        }
        medical = next(r for r in rules if r["cargo_type"] == "MEDICAL")
        assert medical["can_be_halted"] is False
        assert medical["max_delay_minutes"] == 30

    def test_unauthorized_tier_is_rejected_not_downgraded(self):
        from apps.scheduling.priority import ensure_authorized
        from portlink.exceptions import PriorityNotAuthorized

        org = SimpleNamespace(
            authorized_priorities=["NORMAL", "LOW"],
            is_authorized_for=lambda p: p in ("NORMAL", "LOW"),
        )
        ensure_authorized(org, "NORMAL")
        with pytest.raises(PriorityNotAuthorized) as exc:
            ensure_authorized(org, "EMERGENCY")
        assert exc.value.authorized == ["NORMAL", "LOW"]


# ═══════════════════════════════════════════════════════════════════════════════
# UNIT TESTS: Slot Ranking
# ═══════════════════════════════════════════════════════════════════════════════

class TestSlotRanking:

    def _slot(self, hhmm, traffic="NORMAL"):
        return SimpleNamespace(start_time=time.fromisoformat(hhmm), predicted_traffic=traffic)

    def _rank(self, slots, preferred, priority="NORMAL"):
        from apps.scheduling.service import SlotAllocator
        ranked = SlotAllocator().rank(slots, time.fromisoformat(preferred), priority)
        return [s.start_time.strftime("%H:%M") for s in ranked]

    def test_exact_match_wins_even_when_congested(self):
        slots = [self._slot("09:00"), self._slot("10:00", "CONGESTED")]
        assert self._rank(slots, "10:00")[0] == "10:00"

    def test_nearest_start_time_when_no_exact_match(self):
        slots = [self._slot("08:00"), self._slot("11:00"), self._slot("13:00")]
        assert self._rank(slots, "10:00") == ["11:00", "08:00", "13:00"]

    def test_equal_distance_prefers_earlier_slot(self):
        slots = [self._slot("11:00"), self._slot("09:00")]
        assert self._rank(slots, "10:00")[0] == "09:00"

    def test_congested_slot_pushed_back_for_haltable_tier(self):
        slots = [self._slot("11:00", "CONGESTED"), self._slot("07:00")]
        assert self._rank(slots, "10:00", "NORMAL")[0] == "07:00"

    def test_protected_tier_ignores_congestion(self):
        slots = [self._slot("11:00", "CONGESTED"), self._slot("07:00")]
        assert self._rank(slots, "10:00", "EMERGENCY")[0] == "11:00"

    def test_no_preferred_time_orders_by_start(self):
        from apps.scheduling.service import SlotAllocator
        slots = [self._slot("14:00"), self._slot("06:00")]
        ranked = SlotAllocator().rank(slots, None, "NORMAL")
        assert [s.start_time.hour for s in ranked] == [6, 14]


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION: Slot Allocation
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestSlotAllocator:

    def test_medical_request_takes_last_unit_then_slot_is_full(self, make_slot):
        from apps.scheduling.service import SlotAllocator
        from portlink.exceptions import NoSlotAvailable

        slot = make_slot("10:00", capacity=10, booked=9)
        allocator = SlotAllocator()

        got = allocator.allocate(SLOT_DATE, time(10, 0), "EMERGENCY")
        assert got.id == slot.id

        slot.refresh_from_db()
        assert slot.booked == 10
        assert slot.status == "FULL"

        with pytest.raises(NoSlotAvailable):
            allocator.allocate(SLOT_DATE, time(10, 0), "EMERGENCY")

    def test_find_slot_skips_full_and_closed(self, make_slot):
        from apps.scheduling.service import SlotAllocator

        make_slot("10:00", capacity=5, booked=5)
        make_slot("11:00", status="CLOSED")
        open_slot = make_slot("14:00")

        assert SlotAllocator().find_slot(SLOT_DATE, time(10, 0)) == open_slot.id

    def test_find_slot_returns_none_without_candidates(self, make_slot):
        from apps.scheduling.service import SlotAllocator

        make_slot("10:00", status="CLOSED")
        assert SlotAllocator().find_slot(SLOT_DATE, time(10, 0)) is None
        assert SlotAllocator().find_slot(SLOT_DATE + datetime.timedelta(days=1)) is None

    def test_find_slot_does_not_reserve(self, make_slot):
        from apps.scheduling.service import SlotAllocator

        slot = make_slot("10:00")
        SlotAllocator().find_slot(SLOT_DATE, time(10, 0))
        slot.refresh_from_db()
        assert slot.booked == 0

    def test_reserve_refuses_past_capacity(self, make_slot):
        from apps.scheduling.service import SlotAllocator

        slot = make_slot("10:00", capacity=2)
        allocator = SlotAllocator()
        assert allocator.reserve(slot.id) is True
        assert allocator.reserve(slot.id) is True
        assert allocator.reserve(slot.id) is False

        slot.refresh_from_db()
        assert slot.booked == 2
        assert slot.status == "FULL"

    def test_release_reopens_full_slot_and_never_goes_negative(self, make_slot):
        from apps.scheduling.service import SlotAllocator

        slot = make_slot("10:00", capacity=1, booked=1, status="FULL")
        allocator = SlotAllocator()

        allocator.release(slot.id)
        slot.refresh_from_db()
        assert (slot.booked, slot.status) == (0, "AVAILABLE")

        allocator.release(slot.id)
        slot.refresh_from_db()
        assert slot.booked == 0

    def test_release_leaves_closed_slot_closed(self, make_slot):
        from apps.scheduling.service import SlotAllocator

        slot = make_slot("10:00", booked=3, status="CLOSED")
        SlotAllocator().release(slot.id)
        slot.refresh_from_db()
        assert (slot.booked, slot.status) == (2, "CLOSED")


@pytest.mark.django_db
class TestVesselSurgeAdvisor:

    def _vessels(self, *trucks):
        from apps.scheduling.models import VesselSchedule
        for i, count in enumerate(trucks):
            VesselSchedule.objects.create(
                vessel_name=f"MSC Aurora {i}", arrival_date=SLOT_DATE,
                arrival_time=time(6 + i, 0), estimated_trucks=count, cargo_priority="NORMAL",
            )

    def test_warning_lists_vessels_and_calmer_slots(self, make_slot):
        from apps.scheduling.service import VesselSurgeAdvisor

        self._vessels(250, 250)
        make_slot("10:00", predicted_traffic="CONGESTED")
        make_slot("16:00", predicted_traffic="MODERATE")
        make_slot("18:00")

        warning = VesselSurgeAdvisor().advise(SLOT_DATE, time(10, 0), "NORMAL")

        assert warning["total_trucks"] == 500
        assert warning["expected_congestion"] == "MODERATE"
        assert [v["name"] for v in warning["vessels"]] == ["MSC Aurora 0", "MSC Aurora 1"]
        assert [a["time"] for a in warning["suggested_alternatives"]] == ["18:00 - 19:00", "16:00 - 17:00"]
        assert warning["priority_protected"] is False

    def test_heavy_surge_expects_congestion(self, make_slot):
        from apps.scheduling.service import VesselSurgeAdvisor

        self._vessels(400, 300)
        warning = VesselSurgeAdvisor().advise(SLOT_DATE, time(9, 0), "EMERGENCY")
        assert warning["expected_congestion"] == "CONGESTED"
        assert warning["priority_protected"] is True

    def test_no_warning_outside_surge_window(self):
        from apps.scheduling.service import VesselSurgeAdvisor

        self._vessels(500, 500)
        assert VesselSurgeAdvisor().advise(SLOT_DATE, time(15, 0), "NORMAL") is None

    def test_no_warning_below_truck_threshold(self):
        from apps.scheduling.service import VesselSurgeAdvisor

        self._vessels(150, 150)
        assert VesselSurgeAdvisor().advise(SLOT_DATE, time(10, 0), "NORMAL") is None


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION: Permit Issuance
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestPermitIssuer:

    def test_job_issuance_binds_slot_driver_and_job(self, org, driver, make_slot, make_job):
        from apps.notifications.models import Notification

        slot = make_slot("10:00")
        job  = make_job(org, cargo_type="MEDICAL")
        issuer = _issuer()

        permit = issuer.issue(driver, job=job)

        assert PERMIT_CODE.match(permit.permit_code)
        assert permit.qr_code.startswith("PERMIT-")
        assert permit.status == "APPROVED"
        assert permit.priority == "EMERGENCY"
        assert permit.slot_id == slot.id
        assert permit.job_id == job.id

        slot.refresh_from_db()
        driver.refresh_from_db()
        job.refresh_from_db()
        assert slot.booked == 1
        assert driver.is_available is False
        assert job.status == "ASSIGNED"
        assert job.assigned_driver_id == driver.id

        issuer.notifier.notify.assert_called_once()
        assert issuer.notifier.notify.call_args.kwargs["type"] == Notification.Type.APPROVAL

    def test_permit_codes_increase_by_one(self, driver, make_slot):
        slot = make_slot("10:00")
        issuer = _issuer()

        first  = issuer.issue(driver, slot=slot, cargo_type="STANDARD")
        second = issuer.issue(driver, slot=slot, cargo_type="STANDARD")

        assert PERMIT_CODE.match(second.permit_code)
        assert int(second.permit_code[-6:]) == int(first.permit_code[-6:]) + 1

    def test_expiry_is_slot_end_plus_grace(self, driver, make_slot):
        slot = make_slot("10:00", end="11:00")
        permit = _issuer().issue(driver, slot=slot, cargo_type="STANDARD")

        expires = timezone.localtime(permit.expires_at)
        assert expires.date() == SLOT_DATE + datetime.timedelta(days=1)
        assert (expires.hour, expires.minute) == (11, 0)

    def test_direct_booking_does_not_claim_driver(self, driver, make_slot):
        slot = make_slot("10:00")
        _issuer().issue(driver, slot=slot, cargo_type="STANDARD")
        driver.refresh_from_db()
        assert driver.is_available is True

    def test_busy_driver_leaves_no_trace(self, org, driver, make_slot, make_job):
        from apps.permits.models import Permit
        from portlink.exceptions import DriverUnavailable

        driver.is_available = False
        driver.save()
        slot = make_slot("10:00")
        job  = make_job(org)

        with pytest.raises(DriverUnavailable):
            _issuer().issue(driver, job=job)

        slot.refresh_from_db()
        job.refresh_from_db()
        assert slot.booked == 0
        assert job.status == "PENDING"
        assert Permit.objects.count() == 0

    def test_job_taken_meanwhile_rolls_back_slot_and_driver(self, org, driver, make_slot, make_job):
        from apps.jobs.models import Job
        from apps.permits.models import Permit
        from portlink.exceptions import JobNotPending

        slot = make_slot("10:00")
        job  = make_job(org)
        Job.objects.filter(id=job.id).update(status="CANCELLED")

        with pytest.raises(JobNotPending):
            _issuer().issue(driver, job=job)

        slot.refresh_from_db()
        driver.refresh_from_db()
        assert slot.booked == 0
        assert driver.is_available is True
        assert Permit.objects.count() == 0

    def test_closed_slot_rejected_with_reason(self, driver, make_slot):
        from portlink.exceptions import SlotUnavailable

        slot = make_slot("10:00", status="CLOSED")
        with pytest.raises(SlotUnavailable) as exc:
            _issuer().issue(driver, slot=slot, cargo_type="STANDARD")
        assert str(exc.value.detail) == "Time slot is closed"


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION: Permit Actions
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestPermitService:

    def test_halt_then_reinstate(self, driver, make_slot, make_permit):
        permit = make_permit(driver, make_slot("10:00", booked=1))
        svc = _permit_service()

        svc.halt(permit)
        assert permit.status == "HALTED"
        assert permit.halted_at is not None

        svc.approve(permit)
        assert permit.status == "APPROVED"
        assert permit.halted_at is None

    def test_halt_twice_is_invalid(self, driver, make_slot, make_permit):
        from portlink.exceptions import InvalidTransition

        permit = make_permit(driver, make_slot("10:00", booked=1), status="HALTED")
        with pytest.raises(InvalidTransition):
            _permit_service().halt(permit)

    def test_cancel_releases_slot(self, driver, make_slot, make_permit):
        slot = make_slot("10:00", capacity=1, booked=1, status="FULL")
        permit = make_permit(driver, slot)

        _permit_service().cancel(permit, reason="Vessel delayed")

        slot.refresh_from_db()
        assert permit.status == "CANCELLED"
        assert (slot.booked, slot.status) == (0, "AVAILABLE")

    def test_cancelled_permit_cannot_be_cancelled_again(self, driver, make_slot, make_permit):
        from portlink.exceptions import InvalidTransition

        slot = make_slot("10:00", booked=1)
        permit = make_permit(driver, slot, status="CANCELLED")
        with pytest.raises(InvalidTransition):
            _permit_service().cancel(permit)
        slot.refresh_from_db()
        assert slot.booked == 1

    def test_cancelling_job_permit_reopens_job(self, org, driver, make_slot, make_job):
        slot = make_slot("10:00")
        job  = make_job(org)
        permit = _issuer().issue(driver, job=job)

        _permit_service().cancel(permit)

        job.refresh_from_db()
        driver.refresh_from_db()
        slot.refresh_from_db()
        assert job.status == "PENDING"
        assert job.assigned_driver_id is None
        assert driver.is_available is True
        assert slot.booked == 0

    def test_reschedule_moves_capacity(self, driver, make_slot):
        old_slot = make_slot("10:00")
        new_slot = make_slot("15:00")
        permit = _issuer().issue(driver, slot=old_slot, cargo_type="STANDARD")

        _permit_service().reschedule(permit, new_slot)

        old_slot.refresh_from_db()
        new_slot.refresh_from_db()
        assert permit.slot_id == new_slot.id
        assert permit.original_slot_id == old_slot.id
        assert permit.rescheduled_count == 1
        assert (old_slot.booked, new_slot.booked) == (0, 1)

    def test_reschedule_keeps_first_original_slot(self, driver, make_slot):
        first  = make_slot("08:00")
        second = make_slot("09:00")
        third  = make_slot("12:00")
        permit = _issuer().issue(driver, slot=first, cargo_type="STANDARD")
        svc = _permit_service()

        svc.reschedule(permit, second)
        svc.reschedule(permit, third)

        assert permit.original_slot_id == first.id
        assert permit.rescheduled_count == 2

    def test_reschedule_into_full_slot_changes_nothing(self, driver, make_slot):
        from portlink.exceptions import SlotUnavailable

        slot = make_slot("10:00")
        full = make_slot("11:00", capacity=1, booked=1, status="FULL")
        permit = _issuer().issue(driver, slot=slot, cargo_type="STANDARD")

        with pytest.raises(SlotUnavailable):
            _permit_service().reschedule(permit, full)

        permit.refresh_from_db()
        assert permit.slot_id == slot.id
        assert permit.rescheduled_count == 0

    def test_reschedule_to_same_slot_rejected(self, driver, make_slot):
        from portlink.exceptions import SlotUnavailable

        slot = make_slot("10:00")
        permit = _issuer().issue(driver, slot=slot, cargo_type="STANDARD")
        with pytest.raises(SlotUnavailable):
            _permit_service().reschedule(permit, slot)

    def test_expire_permits_task(self, driver, make_slot, make_permit):
        from apps.permits.tasks import expire_permits

        slot = make_slot("10:00")
        overdue = make_permit(driver, slot, expires_at=timezone.now() - datetime.timedelta(hours=1))
        current = make_permit(driver, slot, expires_at=timezone.now() + datetime.timedelta(hours=1))
        done    = make_permit(driver, slot, status="COMPLETED",
                              expires_at=timezone.now() - datetime.timedelta(hours=1))

        assert expire_permits() == 1

        overdue.refresh_from_db()
        current.refresh_from_db()
        done.refresh_from_db()
        assert overdue.status == "EXPIRED"
        assert current.status == "APPROVED"
        assert done.status == "COMPLETED"


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION: Job Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestJobService:

    def _service(self):
        from apps.jobs.service import JobService
        return JobService(issuer=_issuer(), permit_service=_permit_service())

    def test_create_job_classifies_and_numbers(self, org, make_driver):
        make_driver(organization=org, name="Bilal")
        result = self._service().create_job(org, {
            "customer_name": "Riyadh Medical", "cargo_type": "MEDICAL",
            "pickup_location": "Berth 2", "destination": "Hospital",
            "preferred_date": SLOT_DATE, "preferred_time": time(15, 0),
        })

        job = result["job"]
        assert job.priority == "EMERGENCY"
        assert job.status == "PENDING"
        assert re.match(r"^JOB-\d{8}-\d{4}$", job.job_number)
        assert [d.name for d in result["available_drivers"]] == ["Bilal"]
        assert result["vessel_warning"] is None

    def test_create_job_rejects_unauthorized_tier(self, make_org):
        from apps.jobs.models import Job
        from portlink.exceptions import PriorityNotAuthorized

        basic = make_org(name="Basic Freight")
        with pytest.raises(PriorityNotAuthorized):
            self._service().create_job(basic, {
                "customer_name": "X", "cargo_type": "HAZARDOUS",
                "pickup_location": "A", "destination": "B",
                "preferred_date": SLOT_DATE, "preferred_time": time(10, 0),
            })
        assert Job.objects.count() == 0

    def test_pending_queue_orders_by_priority(self, org, make_job):
        make_job(org, cargo_type="BULK", customer_name="low")
        make_job(org, cargo_type="MEDICAL", customer_name="emergency")
        make_job(org, cargo_type="STANDARD", customer_name="normal")
        make_job(org, cargo_type="TIME_SENSITIVE", customer_name="essential")

        names = [j.customer_name for j in self._service().pending_queue(org)]
        assert names == ["emergency", "essential", "normal", "low"]

    def test_assign_rejects_non_pending_job(self, org, driver, make_job):
        from portlink.exceptions import JobNotPending

        job = make_job(org, status="ASSIGNED")
        with pytest.raises(JobNotPending) as exc:
            self._service().assign(job, driver)
        assert str(exc.value.detail) == "Job already assigned"

    def test_auto_assign_without_driver(self, org, make_job, make_slot):
        from portlink.exceptions import NoDriverAvailable

        make_slot("10:00")
        with pytest.raises(NoDriverAvailable):
            self._service().auto_assign(make_job(org))

    def test_bulk_assign_isolates_failures(self, org, driver, make_job, make_slot):
        make_slot("10:00")
        urgent = make_job(org, cargo_type="MEDICAL")
        normal = make_job(org, cargo_type="STANDARD")
        svc = self._service()

        results = svc.assign_all_pending(svc.pending_queue(org))

        assert (results["assigned"], results["failed"], results["total"]) == (1, 1, 2)
        assert results["details"][0]["job_number"] == urgent.job_number
        assert results["details"][0]["success"] is True
        assert results["details"][1] == {
            "job_number": normal.job_number, "success": False, "error": "No available drivers",
        }
        normal.refresh_from_db()
        assert normal.status == "PENDING"

    def test_bulk_assign_reports_missing_slot(self, org, driver, make_job):
        job = make_job(org, preferred_date=datetime.date(2025, 2, 1))
        svc = self._service()

        results = svc.assign_all_pending([job])

        assert results["details"][0]["error"] == "No available time slots"
        driver.refresh_from_db()
        assert driver.is_available is True

    def test_start_and_complete_free_driver(self, org, driver, make_job, make_slot):
        make_slot("10:00")
        job = make_job(org, notes="Fragile")
        svc = self._service()
        permit = svc.assign(job, driver)

        svc.start(job)
        assert job.status == "IN_PROGRESS"
        assert job.started_at is not None

        svc.complete(job, notes="Delivered to dock 3")

        permit.refresh_from_db()
        driver.refresh_from_db()
        assert job.status == "COMPLETED"
        assert job.notes == "Fragile\n\n[COMPLETION] Delivered to dock 3"
        assert permit.status == "COMPLETED"
        assert driver.is_available is True

    def test_start_requires_assignment(self, org, make_job):
        from portlink.exceptions import InvalidTransition

        with pytest.raises(InvalidTransition):
            self._service().start(make_job(org))

    def test_cancel_assigned_job_releases_everything(self, org, driver, make_job, make_slot):
        slot = make_slot("10:00")
        job = make_job(org)
        svc = self._service()
        permit = svc.assign(job, driver)

        svc.cancel(job, reason="Customer withdrew")

        permit.refresh_from_db()
        slot.refresh_from_db()
        driver.refresh_from_db()
        assert job.status == "CANCELLED"
        assert permit.status == "CANCELLED"
        assert slot.booked == 0
        assert driver.is_available is True

    def test_completed_job_cannot_be_cancelled(self, org, make_job):
        from portlink.exceptions import InvalidTransition

        with pytest.raises(InvalidTransition):
            self._service().cancel(make_job(org, status="COMPLETED"))

    def test_job_numbers_follow_daily_sequence(self, org):
        svc = self._service()
        payload = {
            "customer_name": "Dammam Foods", "cargo_type": "STANDARD",
            "pickup_location": "Berth 1", "destination": "Warehouse 7",
            "preferred_date": SLOT_DATE, "preferred_time": time(10, 0),
        }
        first  = svc.create_job(org, dict(payload))["job"]
        second = svc.create_job(org, dict(payload))["job"]

        prefix = f"JOB-{timezone.localdate():%Y%m%d}-"
        assert first.job_number == prefix + "0001"
        assert second.job_number == prefix + "0002"

    def test_track_assigned_job(self, org, driver, make_job, make_slot):
        from apps.fleet.service import record_location

        make_slot("10:00")
        job = make_job(org)
        svc = self._service()
        permit = svc.assign(job, driver)
        record_location(driver, permit=permit, latitude="26.430000", longitude="50.100000", eta_minutes=12)
        job.refresh_from_db()

        tracking = svc.track(job)

        assert tracking["driver"] == driver
        assert tracking["permit"] == permit
        assert tracking["current_location"].eta_minutes == 12
        assert [e["event"] for e in tracking["timeline"]] == ["Job Created", "Driver Assigned: Ahmed"]

    def test_track_pending_job_has_no_driver(self, org, make_job):
        tracking = self._service().track(make_job(org))
        assert tracking["driver"] is None
        assert tracking["permit"] is None
        assert tracking["current_location"] is None
        assert len(tracking["timeline"]) == 1

    def test_template_priority_follows_cargo(self, org):
        template = self._service().create_template(org, {
            "template_name": "Weekly pharma run", "cargo_type": "MEDICAL",
            "pickup_location": "Berth 2", "destination": "Central Hospital",
        })
        assert template.priority == "EMERGENCY"

        updated = self._service().update_template(template, {"cargo_type": "BULK"})
        assert updated.priority == "LOW"

    def test_template_rejects_unauthorized_tier(self, make_org):
        from apps.jobs.models import JobTemplate
        from portlink.exceptions import PriorityNotAuthorized

        with pytest.raises(PriorityNotAuthorized):
            self._service().create_template(make_org(name="Basic Freight"), {
                "template_name": "Chemicals", "cargo_type": "HAZARDOUS",
                "pickup_location": "A", "destination": "B",
            })
        assert JobTemplate.objects.count() == 0


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION: Driver Registry
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestDriverRegistry:

    DATA = {
        "name": "Yusuf Haddad", "phone": "+966512345678", "vehicle_plate": "KSA 4412",
        "vehicle_type": "CONTAINER", "has_smartphone": False, "prefers_sms": True,
    }

    def test_new_phone_creates_driver(self, org):
        from apps.fleet.service import CREATED, register_driver

        driver, outcome = register_driver(org, dict(self.DATA))
        assert outcome == CREATED
        assert driver.organization_id == org.id

    def test_same_organization_is_idempotent(self, org, make_driver):
        from apps.fleet.service import EXISTING, register_driver

        existing = make_driver(organization=org, phone=self.DATA["phone"])
        driver, outcome = register_driver(org, dict(self.DATA))
        assert outcome == EXISTING
        assert driver.id == existing.id

    def test_unowned_driver_is_linked(self, org, make_driver):
        from apps.fleet.service import LINKED, register_driver

        orphan = make_driver(organization=None, phone=self.DATA["phone"])
        driver, outcome = register_driver(org, dict(self.DATA))

        assert outcome == LINKED
        assert driver.id == orphan.id
        assert driver.organization_id == org.id
        assert driver.delivery_method == "SMS"

    def test_driver_of_another_organization_is_refused(self, org, make_org, make_driver):
        from apps.fleet.service import register_driver
        from portlink.exceptions import DriverRegisteredElsewhere

        rival = make_org(name="Rival Haulage")
        make_driver(organization=rival, phone=self.DATA["phone"])

        with pytest.raises(DriverRegisteredElsewhere):
            register_driver(org, dict(self.DATA))

    def test_latest_location_is_most_recent_reading(self, driver):
        from apps.fleet.service import latest_location, record_location

        now = timezone.now()
        record_location(driver, latitude="26.400000", longitude="50.000000",
                        recorded_at=now - datetime.timedelta(minutes=5))
        newest = record_location(driver, latitude="26.410000", longitude="50.010000", recorded_at=now)

        assert latest_location(driver.id) == newest
        assert latest_location(None) is None


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION: Congestion Response
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestCongestionResponder:

    @pytest.fixture
    def five_permits(self, driver, make_slot, make_permit):
        slot = make_slot("10:00", booked=5)
        return [
            make_permit(driver, slot, priority=p)
            for p in ("EMERGENCY", "EMERGENCY", "ESSENTIAL", "NORMAL", "LOW")
        ]

    def _responder(self):
        from apps.traffic.service import CongestionResponder
        return CongestionResponder(notification_service=MagicMock())

    def test_congestion_halts_only_haltable_tiers(self, five_permits):
        from apps.permits.models import Permit

        responder = self._responder()
        result = responder.on_traffic_update("CONGESTED")

        assert result["halted_count"] == 2
        assert result["protected_count"] == 3
        statuses = dict(Permit.objects.values_list("priority", "status").distinct())
        assert statuses["NORMAL"] == "HALTED"
        assert statuses["LOW"] == "HALTED"
        assert statuses["EMERGENCY"] == "APPROVED"
        assert statuses["ESSENTIAL"] == "APPROVED"
        assert responder.notifier.notify.call_count == 2

    def test_repeat_congestion_halts_nothing_new(self, five_permits):
        responder = self._responder()
        responder.on_traffic_update("CONGESTED")
        again = responder.on_traffic_update("CONGESTED")
        assert (again["halted_count"], again["protected_count"]) == (0, 3)

    @pytest.mark.parametrize("level", ["NORMAL", "MODERATE"])
    def test_calm_traffic_changes_nothing(self, five_permits, level):
        from apps.permits.models import Permit

        result = self._responder().on_traffic_update(level)
        assert (result["halted_count"], result["protected_count"]) == (0, 0)
        assert not Permit.objects.filter(status="HALTED").exists()

    def test_recorded_update_carries_counts(self, five_permits):
        from apps.traffic.service import TrafficService

        update = TrafficService(responder=self._responder()).record({
            "camera_id": "GATE-CAM-01", "timestamp": timezone.now(), "status": "CONGESTED",
            "vehicle_count": 140, "truck_count": 95, "recommendation": "Hold normal traffic",
        })
        update.refresh_from_db()
        assert update.processed is True
        assert (update.permits_halted, update.permits_protected) == (2, 3)


# ═══════════════════════════════════════════════════════════════════════════════
# INTEGRATION: Notification Delivery
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestNotificationDelivery:

    def _notification(self, driver, method="APP"):
        from apps.notifications.models import Notification
        return Notification.objects.create(
            driver=driver, title="Permit Approved", message="Proceed to gate 3",
            type="APPROVAL", delivery_method=method,
        )

    def test_notify_queues_delivery_after_commit(self, driver, django_capture_on_commit_callbacks):
        from apps.notifications.service import NotificationService

        with patch("apps.notifications.service.deliver_notification.delay") as delay:
            with django_capture_on_commit_callbacks(execute=True):
                n = NotificationService().notify(driver, "Hello", "Gate opens at 10:00")
        delay.assert_called_once_with(str(n.id))
        assert n.status == "PENDING"

    def test_push_delivery_is_logged_and_marked_sent(self, driver, caplog):
        from apps.notifications.tasks import deliver_notification

        n = self._notification(driver)
        with caplog.at_level("INFO", logger="portlink.notifications"):
            assert deliver_notification(str(n.id)) is True

        n.refresh_from_db()
        assert n.status == "SENT"
        assert n.sent_at is not None
        assert "[PUSH]" in caplog.text

    @override_settings(SMS_GATEWAY_URL="http://sms-gateway.test")
    def test_sms_goes_through_gateway(self, driver):
        from apps.notifications.tasks import deliver_notification

        n = self._notification(driver, method="SMS")
        with patch("apps.notifications.service.requests.post",
                   return_value=MagicMock(status_code=200)) as post:
            deliver_notification(str(n.id))

        post.assert_called_once()
        assert post.call_args.args[0] == "http://sms-gateway.test/send"
        assert post.call_args.kwargs["json"] == {"phone": driver.phone, "message": "Proceed to gate 3"}
        n.refresh_from_db()
        assert n.status == "SENT"

    @override_settings(SMS_GATEWAY_URL="http://sms-gateway.test")
    def test_unreachable_gateway_marks_failed(self, driver):
        from apps.notifications.tasks import deliver_notification

        n = self._notification(driver, method="SMS")
        with patch("apps.notifications.service.requests.post",
                   side_effect=requests.ConnectionError("gateway down")):
            assert deliver_notification(str(n.id)) is False

        n.refresh_from_db()
        assert n.status == "FAILED"
        assert "gateway down" in n.error_message
        assert n.sent_at is None

    def test_already_sent_is_not_resent(self, driver):
        from apps.notifications.tasks import deliver_notification

        n = self._notification(driver)
        n.status = "SENT"
        n.save()
        with patch("apps.notifications.service.NotificationService.deliver") as deliver:
            assert deliver_notification(str(n.id)) is True
        deliver.assert_not_called()

    def test_missing_notification(self, db):
        import uuid
        from apps.notifications.tasks import deliver_notification
        assert deliver_notification(str(uuid.uuid4())) is False

    def test_sms_preference_sets_delivery_method(self, make_driver, org):
        from apps.notifications.service import NotificationService

        d = make_driver(organization=org, has_smartphone=False)
        n = NotificationService().notify(d, "Hello", "SMS only")
        assert n.delivery_method == "SMS"


# ═══════════════════════════════════════════════════════════════════════════════
# CONCURRENCY: Slot Capacity and Driver Claims
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db(transaction=True)
class TestConcurrency:

    def _run(self, target, count):
        from django.db import connection

        results = {}

        def worker(idx):
            try:
                results[idx] = target(idx)
            except Exception as exc:
                results[idx] = exc
            finally:
                connection.close()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return results

    def test_slot_never_overbooked(self, make_slot):
        from apps.scheduling.service import SlotAllocator

        slot = make_slot("10:00", capacity=5)
        results = self._run(lambda _: SlotAllocator().reserve(slot.id), 12)

        slot.refresh_from_db()
        reserved = [r for r in results.values() if r is True]
        assert slot.booked <= slot.capacity
        assert slot.booked == len(reserved)

    def test_single_driver_not_double_booked(self, org, driver, make_slot, make_job):
        from apps.permits.models import Permit

        slot = make_slot("10:00")
        jobs = [make_job(org), make_job(org)]
        self._run(lambda i: _issuer().issue(driver, job=jobs[i]), 2)

        slot.refresh_from_db()
        permits = Permit.objects.filter(driver=driver).count()
        assert permits <= 1, "Driver was double-booked!"
        assert slot.booked == permits

    def test_parallel_job_creation_never_reuses_a_number(self, org):
        from django.db import IntegrityError
        from apps.jobs.models import Job, JobNumberSequence
        from apps.jobs.service import JobService

        JobNumberSequence.objects.create(day=timezone.localdate())

        def create(i):
            return JobService(issuer=_issuer(), permit_service=_permit_service()).create_job(org, {
                "customer_name": f"Customer {i}", "cargo_type": "STANDARD",
                "pickup_location": "Berth 1", "destination": "Dry Port",
                "preferred_date": SLOT_DATE, "preferred_time": time(10, 0),
            })["job"].job_number

        results = self._run(create, 6)

        assert not [r for r in results.values() if isinstance(r, IntegrityError)]
        numbers = list(Job.objects.values_list("job_number", flat=True))
        assert len(numbers) == len(set(numbers))
        assert sorted(numbers) == sorted(r for r in results.values() if isinstance(r, str))


# ═══════════════════════════════════════════════════════════════════════════════
# REALTIME: Traffic Feed
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db(transaction=True)
class TestTrafficFeed:

    def test_broadcast_reaches_group(self):
        from channels.layers import get_channel_layer
        from apps.traffic.service import TRAFFIC_GROUP, broadcast_traffic

        layer = get_channel_layer()
        channel = async_to_sync(layer.new_channel)()
        async_to_sync(layer.group_add)(TRAFFIC_GROUP, channel)

        broadcast_traffic({"status": "CONGESTED", "permits_halted": 2})

        message = async_to_sync(layer.receive)(channel)
        assert message == {"type": "traffic.update", "status": "CONGESTED", "permits_halted": 2}
        async_to_sync(layer.group_discard)(TRAFFIC_GROUP, channel)

    def test_consumer_sends_current_status_then_live_updates(self):
        from channels.layers import get_channel_layer
        from channels.testing import WebsocketCommunicator
        from apps.traffic.consumers import TrafficConsumer
        from apps.traffic.models import TrafficUpdate
        from apps.traffic.service import TRAFFIC_GROUP

        TrafficUpdate.objects.create(
            camera_id="GATE-CAM-02", timestamp=timezone.now(), status="MODERATE",
            vehicle_count=60, truck_count=40,
        )

        async def scenario():
            comm = WebsocketCommunicator(TrafficConsumer.as_asgi(), "/ws/traffic/")
            connected, _ = await comm.connect()
            assert connected

            first = await comm.receive_json_from()
            assert first["status"] == "MODERATE"
            assert first["camera_id"] == "GATE-CAM-02"

            await get_channel_layer().group_send(
                TRAFFIC_GROUP, {"type": "traffic.update", "status": "CONGESTED"}
            )
            live = await comm.receive_json_from()
            assert live == {"type": "traffic.update", "status": "CONGESTED"}

            await comm.send_json_to({"action": "current"})
            again = await comm.receive_json_from()
            assert again["status"] == "MODERATE"

            await comm.disconnect()

        async_to_sync(scenario)()


# ═══════════════════════════════════════════════════════════════════════════════
# COMMANDS: Opening Gate Slots
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestOpenSlotsCommand:

    def _call(self, *args):
        from io import StringIO
        from django.core.management import call_command

        out = StringIO()
        call_command("open_slots", *args, stdout=out)
        return out.getvalue()

    def test_opens_hourly_windows(self):
        from apps.scheduling.models import TimeSlot

        out = self._call("2025-01-10", "--days", "2", "--first-hour", "8",
                         "--last-hour", "12", "--capacity", "15", "--congested", "9")

        assert "Opened 8 slots" in out
        day = TimeSlot.objects.filter(date=SLOT_DATE)
        assert [s.start_time.hour for s in day] == [8, 9, 10, 11]
        assert {s.capacity for s in day} == {15}
        assert day.get(start_time=time(9, 0)).predicted_traffic == "CONGESTED"

    def test_rerun_keeps_existing_bookings(self, make_slot):
        slot = make_slot("08:00", capacity=10, booked=7)
        out = self._call("2025-01-10", "--first-hour", "8", "--last-hour", "10")

        assert "Opened 1 slots" in out
        slot.refresh_from_db()
        assert (slot.capacity, slot.booked) == (10, 7)

    def test_bad_date_rejected(self):
        from django.core.management.base import CommandError
        with pytest.raises(CommandError):
            self._call("10/01/2025")
