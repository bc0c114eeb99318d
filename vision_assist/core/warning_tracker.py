"""
Warning bookkeeping for Vision Assist
"""
import re
import math
import time
import threading
import logging

from .. import config

KEY_PATTERN = re.compile(r"^(.*?)-(-?\d+)-(-?\d+)$")


class WarningTracker:
    """
    Tracks which hazards are currently being warned about.

    Warnings are keyed on label and box position. A key is re-stamped only
    once its cooldown has passed, and each fresh warning schedules its own
    removal after the cooldown.
    """

    def __init__(self, cooldown=None, clock=time.time):
        self.logger = logging.getLogger("WarningTracker")
        self.cooldown = config.WARNING_COOLDOWN if cooldown is None else cooldown
        self.clock = clock

        self.warnings = {}  # key -> time the warning was last issued
        self._timers = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(class_name, bbox):
        x, y = bbox[0], bbox[1]
        return f"{class_name}-{math.floor(x)}-{math.floor(y)}"

    @staticmethod
    def parse_key(key):
        """Label part of a warning key"""
        match = KEY_PATTERN.match(key)
        return match.group(1) if match else key

    def update(self, hazards, now=None):
        """Replace the active warnings with the ones raised by this frame's hazards"""
        if now is None:
            now = self.clock()

        with self._lock:
            previous = self.warnings
            new_warnings = {}
            for hazard in hazards:
                key = self.make_key(hazard['class'], hazard['bbox'])
                last_warning = previous.get(key, 0)

                if now - last_warning > self.cooldown:
                    new_warnings[key] = now
                    self._schedule_expiry(key)
                else:
                    new_warnings[key] = last_warning

            self.warnings = new_warnings
            return dict(new_warnings)

    def _schedule_expiry(self, key):
        existing = self._timers.pop(key, None)
        if existing is not None:
            existing.cancel()

        timer = threading.Timer(self.cooldown, self._expire)
        timer.args = (key, timer)
        timer.daemon = True
        self._timers[key] = timer
        timer.start()

    def _expire(self, key, timer):
        with self._lock:
            # A timer that fired while the key was being re-stamped is stale
            if self._timers.get(key) is not timer:
                return
            self.warnings.pop(key, None)
            del self._timers[key]
        self.logger.debug(f"Warning expired: {key}")

    def active_keys(self):
        with self._lock:
            return list(self.warnings.keys())

    def pending_timers(self):
        with self._lock:
            return len(self._timers)

    def close(self):
        """Cancel every pending expiry timer"""
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            self.warnings = {}
