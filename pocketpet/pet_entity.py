import time
import logging
import threading
from contextlib import contextmanager

from pocketpet.constants import (
    MAX_HEALTH,
    MAX_SCORE,
    HEALTH_DECREASE_RATE,
    HEALTH_RECOVERY_RATE,
    SLEEP_DURATION_SECONDS,
)
from pocketpet.models import CARE_NEEDS, DisplayState, NeedKind, PetSnapshot

logger = logging.getLogger("pet")

DEATH_MESSAGE = "Your pet has died! Please create a new pet."
WAKE_MESSAGE = "Your pet woke up!"


def clamp(value, low, high):
    return int(max(low, min(high, value)))


class Pet:
    """Handles the care needs, health and sleep cycle of the virtual pet.

    The pet is shared between the ticker thread and the UI thread, so every
    read-modify-write happens under `self._lock`. Events raised while the lock
    is held are queued and handed to listeners once the outermost holder
    releases it, which keeps listeners free to call back into the pet.
    """

    def __init__(self, clock=time.monotonic, name="Pet"):
        self.name = name
        self.clock = clock
        self._lock = threading.RLock()
        self._depth = 0
        self._outbox = []
        self._listeners = {"change": [], "message": [], "death": []}
        # Survives resets so a stale happy timer never matches a new pet
        self._happy_serial = 0
        self._init_state()

    def _init_state(self):
        self._health = MAX_HEALTH
        self._scores = {kind: 0 for kind in CARE_NEEDS}
        self._current_need = NeedKind.NORMAL
        # Last critical need we told the user about
        self._notified_need = NeedKind.NORMAL
        self._happy = False
        self.is_sleeping = False
        self.is_alive = True
        self.sleep_start_time = None
        self.last_action_time = self.clock()

    # ------------------------------------------------------------------
    # Locking and listeners
    # ------------------------------------------------------------------
    @contextmanager
    def locked(self):
        """Hold the pet lock; queued events are dispatched on final release."""
        events = None
        try:
            with self._lock:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                    if self._depth == 0 and self._outbox:
                        events, self._outbox = self._outbox, []
        finally:
            if events:
                self._dispatch(events)

    def subscribe(self, on_change=None, on_message=None, on_death=None):
        """Register presentation/ticker callbacks. All are optional."""
        if on_change:
            self._listeners["change"].append(on_change)
        if on_message:
            self._listeners["message"].append(on_message)
        if on_death:
            self._listeners["death"].append(on_death)

    def _emit(self, kind, payload=None):
        self._outbox.append((kind, payload))

    def _dispatch(self, events):
        for kind, payload in events:
            for listener in list(self._listeners[kind]):
                try:
                    if kind == "message":
                        listener(payload)
                    else:
                        listener()
                except Exception:
                    logger.exception("Pet %s listener failed", kind)

    def notify_changed(self):
        """Tell the presentation layer to re-read the pet."""
        with self.locked():
            self._emit("change")

    def post_message(self, text):
        """Send a user-facing log line to message listeners."""
        with self.locked():
            self._emit("message", text)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def health(self) -> int:
        return self._health

    @property
    def current_need(self) -> NeedKind:
        return self._current_need

    @property
    def scores(self) -> dict:
        with self._lock:
            return dict(self._scores)

    def score(self, kind: NeedKind) -> int:
        return self._scores.get(kind, 0)

    def has_critical_need(self) -> bool:
        return any(score >= MAX_SCORE for score in self._scores.values())

    @property
    def display_state(self) -> DisplayState:
        with self._lock:
            if not self.is_alive:
                return DisplayState.DEAD
            if self.is_sleeping:
                return DisplayState.SLEEPING
            if self._happy:
                return DisplayState.HAPPY
            return DisplayState.for_need(self._current_need)

    def snapshot(self) -> PetSnapshot:
        with self._lock:
            return PetSnapshot(
                health=self._health,
                scores={kind.name: score for kind, score in self._scores.items()},
                current_need=self._current_need,
                display=self.display_state,
                is_sleeping=self.is_sleeping,
                is_alive=self.is_alive,
            )

    # ------------------------------------------------------------------
    # Raw writes (always clamped)
    # ------------------------------------------------------------------
    def update_need(self, kind: NeedKind, score):
        if kind == NeedKind.NORMAL:
            return
        with self.locked():
            if not self.is_alive:
                return
            self._scores[kind] = clamp(score, 0, MAX_SCORE)
            self.recompute_current_need()
            self._emit("change")

    def set_health(self, value):
        with self.locked():
            if not self.is_alive:
                return
            self._health = clamp(value, 0, MAX_HEALTH)
            if self._health == 0:
                self._die()
                return
            self._emit("change")

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------
    def apply_need_tick(self, kind: NeedKind) -> bool:
        """Grow one need by its weight. Needs are frozen while asleep or dead."""
        with self.locked():
            if not self.is_alive or self.is_sleeping:
                return False
            self._scores[kind] = clamp(self._scores[kind] + kind.weight, 0, MAX_SCORE)
            self.recompute_current_need()
            return True

    def apply_health_tick(self):
        """Recover while asleep or fine, decay at a flat rate while any need is critical."""
        with self.locked():
            if not self.is_alive:
                return
            if self.is_sleeping or not self.has_critical_need():
                self._health = min(self._health + HEALTH_RECOVERY_RATE, MAX_HEALTH)
                return
            # Flat rate no matter how many needs are critical at once
            self._health = max(self._health - HEALTH_DECREASE_RATE, 0)
            if self._health == 0:
                self._die()

    def recompute_current_need(self) -> NeedKind:
        """Pick the heaviest critical need, or NORMAL; TIRED while sleeping."""
        with self.locked():
            if self.is_sleeping:
                self._current_need = NeedKind.TIRED
                return self._current_need

            critical = [kind for kind in CARE_NEEDS if self._scores[kind] >= MAX_SCORE]
            need = max(critical, key=lambda kind: kind.weight) if critical else NeedKind.NORMAL
            self._current_need = need

            if need != self._notified_need:
                self._notified_need = need
                if need != NeedKind.NORMAL and self.is_alive:
                    logger.info("%s became critical", need.name)
                    self._emit("message", f"{need.info.message} {need.info.remedy}")
            return need

    def _die(self):
        logger.info("%s died", self.name)
        self._health = 0
        self.is_alive = False
        self.is_sleeping = False
        self.sleep_start_time = None
        self._happy = False
        self._scores = {kind: 0 for kind in CARE_NEEDS}
        self._current_need = NeedKind.NORMAL
        self._notified_need = NeedKind.NORMAL
        self._emit("message", DEATH_MESSAGE)
        self._emit("death")
        self._emit("change")

    # ------------------------------------------------------------------
    # Care
    # ------------------------------------------------------------------
    def satisfy_need(self, kind: NeedKind):
        """Zero a need after a care action.

        The notified-need memory is cleared first so a second need that is
        still critical announces itself again.
        """
        with self.locked():
            self._scores[kind] = 0
            self._notified_need = NeedKind.NORMAL
            self.recompute_current_need()

    def mark_action(self):
        self.last_action_time = self.clock()

    def show_happy(self) -> int:
        """Enter the cosmetic happy display. Returns the serial to end it with."""
        with self.locked():
            self._happy_serial += 1
            self._happy = True
            self._emit("change")
            return self._happy_serial

    def end_happy(self, serial) -> bool:
        """Leave the happy display, unless the pet moved on since `serial` was issued."""
        with self.locked():
            if not self._happy or serial != self._happy_serial:
                return False
            if self.is_sleeping or not self.is_alive:
                return False
            self._happy = False
            self.recompute_current_need()
            self._emit("change")
            return True

    # ------------------------------------------------------------------
    # Sleep
    # ------------------------------------------------------------------
    def fall_asleep(self):
        with self.locked():
            logger.info("%s fell asleep", self.name)
            self._scores[NeedKind.TIRED] = 0
            self._happy = False
            self.is_sleeping = True
            self.sleep_start_time = self.clock()
            self._current_need = NeedKind.TIRED
            self._emit("change")

    def wake_up(self) -> bool:
        with self.locked():
            if not self.is_sleeping:
                return False
            logger.info("%s woke up", self.name)
            self.is_sleeping = False
            self.sleep_start_time = None
            self._current_need = NeedKind.NORMAL
            self._notified_need = NeedKind.NORMAL
            self._emit("change")
            return True

    def check_auto_wake(self) -> bool:
        """Wake the pet once it has slept for SLEEP_DURATION_SECONDS."""
        with self.locked():
            if not self.is_sleeping or self.sleep_start_time is None:
                return False
            if self.clock() - self.sleep_start_time < SLEEP_DURATION_SECONDS:
                return False
            self.wake_up()
            self._emit("message", WAKE_MESSAGE)
            return True

    # ------------------------------------------------------------------
    def reset(self):
        """Start over with a fresh pet (full health, no needs, awake)."""
        with self.locked():
            logger.info("New pet created")
            self._init_state()
            self._emit("change")
