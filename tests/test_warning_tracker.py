"""
Tests for warning cooldown and expiry
"""
import time

from vision_assist.core.warning_tracker import WarningTracker


def hazard(class_name, bbox):
    return {'class': class_name, 'bbox': bbox, 'type': 'danger', 'ratio': 0.5}


class TestWarningTracker:
    def setup_method(self):
        self.tracker = WarningTracker(cooldown=3.0)

    def teardown_method(self):
        self.tracker.close()

    def test_make_key_floors_position(self):
        assert WarningTracker.make_key("person", (10.7, 20.2, 5, 5)) == "person-10-20"

    def test_parse_key(self):
        assert WarningTracker.parse_key("dining table-12-30") == "dining table"
        assert WarningTracker.parse_key("person--3-5") == "person"
        assert WarningTracker.parse_key("garbage") == "garbage"

    def test_new_warning_is_stamped(self):
        warnings = self.tracker.update([hazard("person", (10, 20, 50, 50))], now=100.0)

        assert warnings == {"person-10-20": 100.0}
        assert self.tracker.pending_timers() == 1

    def test_repeat_within_cooldown_keeps_timestamp(self):
        self.tracker.update([hazard("person", (10, 20, 50, 50))], now=100.0)
        warnings = self.tracker.update([hazard("person", (10.4, 20.9, 50, 50))], now=102.0)

        assert warnings == {"person-10-20": 100.0}
        assert self.tracker.pending_timers() == 1

    def test_repeat_after_cooldown_is_restamped(self):
        self.tracker.update([hazard("person", (10, 20, 50, 50))], now=100.0)
        warnings = self.tracker.update([hazard("person", (10, 20, 50, 50))], now=103.5)

        assert warnings == {"person-10-20": 103.5}
        assert self.tracker.pending_timers() == 1

    def test_moved_object_is_a_new_warning(self):
        self.tracker.update([hazard("person", (10, 20, 50, 50))], now=100.0)
        warnings = self.tracker.update([hazard("person", (40, 20, 50, 50))], now=100.5)

        assert warnings == {"person-40-20": 100.5}

    def test_missing_hazards_drop_out(self):
        self.tracker.update([hazard("person", (10, 20, 50, 50)), hazard("car", (0, 0, 9, 9))],
                            now=100.0)
        warnings = self.tracker.update([hazard("car", (0, 0, 9, 9))], now=100.1)

        assert list(warnings) == ["car-0-0"]
        assert self.tracker.active_keys() == ["car-0-0"]

    def test_no_hazards_clears_warnings(self):
        self.tracker.update([hazard("person", (10, 20, 50, 50))], now=100.0)
        assert self.tracker.update([], now=100.1) == {}

    def test_close_cancels_timers(self):
        self.tracker.update([hazard("person", (10, 20, 50, 50)), hazard("car", (0, 0, 9, 9))],
                            now=100.0)
        self.tracker.close()

        assert self.tracker.pending_timers() == 0
        assert self.tracker.active_keys() == []

    def test_warning_expires_after_cooldown(self):
        tracker = WarningTracker(cooldown=0.05)
        try:
            tracker.update([hazard("dog", (1, 2, 3, 4))])
            assert tracker.active_keys() == ["dog-1-2"]

            deadline = time.time() + 2.0
            while tracker.active_keys() and time.time() < deadline:
                time.sleep(0.01)

            assert tracker.active_keys() == []
            assert tracker.pending_timers() == 0
        finally:
            tracker.close()

    def test_stale_expiry_keeps_restamped_warning(self):
        self.tracker.update([hazard("person", (10, 20, 50, 50))], now=100.0)
        stale_timer = self.tracker._timers["person-10-20"]
        self.tracker.update([hazard("person", (10, 20, 50, 50))], now=103.5)

        # The old timer fires after the key was re-stamped
        self.tracker._expire("person-10-20", stale_timer)

        assert self.tracker.active_keys() == ["person-10-20"]
        assert self.tracker.pending_timers() == 1
        self.tracker.close()
        assert self.tracker.pending_timers() == 0
