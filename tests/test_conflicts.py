"""Tests for conflict detection and next-slot suggestion."""

from datetime import timedelta

from agenda.schemas.schedule import TimeRange
from agenda.services.slots import find_conflict, suggest_next_slot
from agenda.services.slots.intervals import busy_interval, overlaps
from tests.conftest import MONDAY, make_booking

DAY_8_TO_18 = [TimeRange(start="08:00", end="18:00")]


class TestOverlap:
    def test_half_open(self):
        assert overlaps(540, 570, 560, 600)
        assert not overlaps(540, 570, 570, 600)
        assert not overlaps(570, 600, 540, 570)

    def test_containment(self):
        assert overlaps(540, 660, 570, 600)
        assert overlaps(570, 600, 540, 660)

    def test_busy_interval_default_duration(self, config):
        assert busy_interval(make_booking("09:00", None), config) == (540, 570)
        assert busy_interval(make_booking("09:00", 0), config) == (540, 570)


class TestFindConflict:
    def test_adjacent_bookings_do_not_conflict(self, config):
        target = make_booking("09:30", 30, status="pending_approval", booking_id=2)
        approved = [make_booking("09:00", 30, booking_id=1), make_booking("10:00", 30, booking_id=3)]
        assert find_conflict(target, approved, config) is None

    def test_overlap_returns_first_conflicting(self, config):
        target = make_booking("10:15", 30, status="pending_approval", booking_id=5)
        first = make_booking("10:00", 30, booking_id=1)
        second = make_booking("10:30", 30, booking_id=2)
        assert find_conflict(target, [first, second], config) == first

    def test_ignores_self(self, config):
        target = make_booking("10:00", 30, booking_id=1)
        assert find_conflict(target, [target], config) is None

    def test_ignores_non_approved(self, config):
        target = make_booking("10:00", 30, status="pending_approval", booking_id=2)
        others = [
            make_booking("10:00", 30, status="pending_approval", booking_id=3),
            make_booking("10:00", 30, status="cancelled", booking_id=4),
            make_booking("10:00", 30, status="completed", booking_id=5),
        ]
        assert find_conflict(target, others, config) is None

    def test_ignores_other_location_and_date(self, config):
        target = make_booking("10:00", 30, status="pending_approval", booking_id=2)
        others = [
            make_booking("10:00", 30, booking_id=3, location_id=9),
            make_booking("10:00", 30, booking_id=4, booking_date=MONDAY + timedelta(days=1)),
        ]
        assert find_conflict(target, others, config) is None

    def test_skips_unparsable_times(self, config):
        target = make_booking("10:00", 30, status="pending_approval", booking_id=2)
        assert find_conflict(target, [make_booking("bad", 30, booking_id=3)], config) is None


class TestSuggestNextSlot:
    def test_starts_at_conflicting_end(self, config):
        target = make_booking("10:15", 30, status="pending_approval", booking_id=2)
        conflicting = make_booking("10:00", 45, booking_id=1)
        suggestion = suggest_next_slot(target, conflicting, [conflicting], DAY_8_TO_18, config)
        assert suggestion == "10:45"

    def test_skips_following_bookings(self, config):
        target = make_booking("10:00", 30, status="pending_approval", booking_id=9)
        approved = [
            make_booking("10:00", 30, booking_id=1),
            make_booking("10:30", 30, booking_id=2),
            make_booking("11:10", 30, booking_id=3),
        ]
        # 11:00 would end at 11:30 and overlap 11:10
        suggestion = suggest_next_slot(target, approved[0], approved, DAY_8_TO_18, config)
        assert suggestion == "11:40"

    def test_target_itself_is_not_busy(self, config):
        target = make_booking("10:30", 30, status="approved", booking_id=2)
        conflicting = make_booking("10:00", 30, booking_id=1)
        suggestion = suggest_next_slot(target, conflicting, [conflicting, target], DAY_8_TO_18, config)
        assert suggestion == "10:30"

    def test_candidate_must_finish_by_day_end(self, config):
        target = make_booking("17:00", 60, status="pending_approval", booking_id=2)
        conflicting = make_booking("16:30", 60, booking_id=1)
        # 17:30 + 60 min > 18:00
        assert suggest_next_slot(target, conflicting, [conflicting], DAY_8_TO_18, config) is None

    def test_exact_fit_at_day_end(self, config):
        target = make_booking("17:00", 30, status="pending_approval", booking_id=2)
        conflicting = make_booking("17:00", 30, booking_id=1)
        assert suggest_next_slot(target, conflicting, [conflicting], DAY_8_TO_18, config) == "17:30"

    def test_bound_is_latest_range_end(self, config):
        ranges = [TimeRange(start="08:00", end="12:00"), TimeRange(start="14:00", end="20:00")]
        target = make_booking("17:45", 30, status="pending_approval", booking_id=2)
        conflicting = make_booking("17:30", 30, booking_id=1)
        # No 18:00 cap: evening hours count
        assert suggest_next_slot(target, conflicting, [conflicting], ranges, config) == "18:00"

    def test_gaps_between_ranges_are_not_checked(self, config):
        ranges = [TimeRange(start="08:00", end="12:00"), TimeRange(start="14:00", end="18:00")]
        target = make_booking("11:30", 30, status="pending_approval", booking_id=2)
        conflicting = make_booking("11:30", 30, booking_id=1)
        assert suggest_next_slot(target, conflicting, [conflicting], ranges, config) == "12:00"

    def test_no_open_ranges_no_suggestion(self, config):
        target = make_booking("10:00", 30, status="pending_approval", booking_id=2)
        conflicting = make_booking("10:00", 30, booking_id=1)
        assert suggest_next_slot(target, conflicting, [conflicting], [], config) is None
