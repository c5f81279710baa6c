"""Tests for the availability calculator."""

from datetime import datetime, timedelta

from agenda.schemas.schedule import TimeRange, parse_location_schedule
from agenda.services.slots import BookingConfig, compute_slots, slots_in_ranges
from tests.conftest import BEFORE_MONDAY, MONDAY, WEEKDAYS_8_TO_18, make_booking


class TestComputeSlots:
    def test_full_day_without_bookings(self, weekday_schedule, config):
        slots = compute_slots(MONDAY, weekday_schedule, 30, [], BEFORE_MONDAY, config)
        assert slots[0] == "08:00"
        # Last start that still ends by 18:00
        assert slots[-1] == "17:30"
        assert len(slots) == 58

    def test_approved_booking_blocks_overlapping_starts(self, weekday_schedule, config):
        approved = [make_booking("10:00", 30, booking_id=1)]
        slots = compute_slots(MONDAY, weekday_schedule, 30, approved, BEFORE_MONDAY, config)

        for blocked in ("09:40", "09:50", "10:00", "10:10", "10:20"):
            assert blocked not in slots
        # Adjacent intervals do not overlap
        for free in ("09:30", "10:30"):
            assert free in slots

    def test_longer_service_blocks_earlier_starts(self, weekday_schedule, config):
        approved = [make_booking("10:00", 30, booking_id=1)]
        slots = compute_slots(MONDAY, weekday_schedule, 60, approved, BEFORE_MONDAY, config)
        assert "09:00" in slots
        assert "09:10" not in slots
        assert "10:20" not in slots
        assert "10:30" in slots

    def test_pending_bookings_do_not_block(self, weekday_schedule, config):
        pending = [
            make_booking("10:00", 30, status="pending_approval", booking_id=1),
            make_booking("11:00", 30, status="rejected", booking_id=2),
            make_booking("12:00", 30, status="cancelled", booking_id=3),
        ]
        slots = compute_slots(MONDAY, weekday_schedule, 30, pending, BEFORE_MONDAY, config)
        assert {"10:00", "11:00", "12:00"} <= set(slots)

    def test_booking_without_duration_uses_default(self, weekday_schedule, config):
        approved = [make_booking("10:00", None, booking_id=1)]
        slots = compute_slots(MONDAY, weekday_schedule, 30, approved, BEFORE_MONDAY, config)
        assert "10:20" not in slots
        assert "10:30" in slots

    def test_booking_with_bad_time_is_skipped(self, weekday_schedule, config):
        approved = [make_booking("10h00", 30, booking_id=1)]
        slots = compute_slots(MONDAY, weekday_schedule, 30, approved, BEFORE_MONDAY, config)
        assert "10:00" in slots

    def test_service_longer_than_range(self, config):
        schedule = parse_location_schedule({
            "weekly": {"mon": {"active": True, "ranges": [{"start": "08:00", "end": "08:20"}]}},
        })
        assert compute_slots(MONDAY, schedule, 30, [], BEFORE_MONDAY, config) == []

    def test_closed_day(self, weekday_schedule, config):
        sunday = MONDAY - timedelta(days=1)
        assert compute_slots(sunday, weekday_schedule, 30, [], datetime(2030, 1, 1), config) == []


class TestNow:
    def test_today_only_future_starts(self, weekday_schedule, config):
        now = datetime.combine(MONDAY, datetime.min.time()).replace(hour=14, minute=5)
        slots = compute_slots(MONDAY, weekday_schedule, 30, [], now, config)
        assert slots[0] == "14:10"
        assert "14:00" not in slots

    def test_start_equal_to_now_is_excluded(self, weekday_schedule, config):
        now = datetime.combine(MONDAY, datetime.min.time()).replace(hour=14)
        slots = compute_slots(MONDAY, weekday_schedule, 30, [], now, config)
        assert slots[0] == "14:10"

    def test_past_date_has_no_slots(self, weekday_schedule, config):
        now = datetime.combine(MONDAY + timedelta(days=1), datetime.min.time())
        assert compute_slots(MONDAY, weekday_schedule, 30, [], now, config) == []

    def test_after_closing(self, weekday_schedule, config):
        now = datetime.combine(MONDAY, datetime.min.time()).replace(hour=17, minute=45)
        assert compute_slots(MONDAY, weekday_schedule, 30, [], now, config) == []


class TestCustomException:
    def test_custom_hours_with_approved_booking(self, config):
        schedule = parse_location_schedule({
            **WEEKDAYS_8_TO_18,
            "exceptions": [{
                "date": MONDAY.isoformat(),
                "type": "custom",
                "ranges": [{"start": "13:00", "end": "17:00"}],
            }],
        })
        approved = [make_booking("14:00", 60, booking_id=1)]
        slots = compute_slots(MONDAY, schedule, 30, approved, BEFORE_MONDAY, config)

        assert slots[0] == "13:00"
        assert slots[-1] == "16:30"
        assert "13:30" in slots
        assert "13:40" not in slots
        assert "14:50" not in slots
        assert "15:00" in slots
        assert "08:00" not in slots


class TestSlotsInRanges:
    def test_overlapping_ranges_are_deduplicated_and_sorted(self, config):
        ranges = [
            TimeRange(start="10:00", end="11:00"),
            TimeRange(start="08:00", end="10:30"),
        ]
        slots = slots_in_ranges(MONDAY, ranges, 30, [], BEFORE_MONDAY, config)
        assert slots == sorted(set(slots))
        assert slots.count("10:00") == 1
        assert slots[0] == "08:00"
        assert slots[-1] == "10:30"

    def test_candidate_may_not_cross_range_gap(self, config):
        ranges = [
            TimeRange(start="08:00", end="12:00"),
            TimeRange(start="13:00", end="14:00"),
        ]
        slots = slots_in_ranges(MONDAY, ranges, 30, [], BEFORE_MONDAY, config)
        assert "11:30" in slots
        assert "11:40" not in slots
        assert "12:30" not in slots
        assert "13:00" in slots

    def test_custom_step(self):
        config = BookingConfig(slot_step_minutes=15)
        ranges = [TimeRange(start="08:00", end="09:00")]
        slots = slots_in_ranges(MONDAY, ranges, 30, [], BEFORE_MONDAY, config)
        assert slots == ["08:00", "08:15", "08:30"]

    def test_missing_duration_uses_default(self, config):
        ranges = [TimeRange(start="08:00", end="09:00")]
        slots = slots_in_ranges(MONDAY, ranges, None, [], BEFORE_MONDAY, config)
        assert slots[-1] == "08:30"
