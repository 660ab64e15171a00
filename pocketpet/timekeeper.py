import time
import logging
import itertools
import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Callable

from pocketpet.constants import (
    TIME_SCALE,
    SCHEDULER_RESOLUTION,
    HEALTH_TICK_SECONDS,
    HUNGRY_TICK_SECONDS,
    DIRTY_TICK_SECONDS,
    TIRED_TICK_SECONDS,
    BORED_TICK_SECONDS,
    WAKE_CHECK_SECONDS,
)
from pocketpet.models import NeedKind

logger = logging.getLogger("ticker")

# Decay timer per need, seconds between ticks
NEED_INTERVALS = {
    NeedKind.HUNGRY: HUNGRY_TICK_SECONDS,
    NeedKind.DIRTY: DIRTY_TICK_SECONDS,
    NeedKind.TIRED: TIRED_TICK_SECONDS,
    NeedKind.BORED: BORED_TICK_SECONDS,
}


class ScaledClock:
    """Monotonic clock that runs TIME_SCALE times faster than real time."""

    def __init__(self, scale=TIME_SCALE, source=time.monotonic):
        self.scale = scale
        self.source = source
        self._origin = source()

    def __call__(self) -> float:
        return self._origin + (self.source() - self._origin) * self.scale


@dataclass
class Timer:
    name: str
    interval: float
    callback: Callable
    due: float
    repeat: bool = True
    seq: int = 0
    cancelled: bool = field(default=False, compare=False)


class Scheduler:
    """Fixed-rate repeating timers and one-shot delays on a single clock.

    `poll()` fires everything that is due, oldest first, so a caller that
    advances the clock in big steps still sees every tick in order. `start()`
    runs the polling on a daemon thread; tests drive `poll()` directly.
    """

    def __init__(self, clock=time.monotonic, resolution=SCHEDULER_RESOLUTION):
        self.clock = clock
        self.resolution = resolution
        self._timers = []
        self._seq = itertools.count()
        self._lock = threading.RLock()
        self._thread = None
        self._stop_event = threading.Event()

    def every(self, name, interval, callback, delay=None) -> Timer:
        """Run `callback` every `interval` seconds, first after `delay` (defaults to interval)."""
        first = interval if delay is None else delay
        with self._lock:
            timer = Timer(name, interval, callback, self.clock() + first, True, next(self._seq))
            self._timers.append(timer)
        return timer

    def after(self, delay, callback, name="once") -> Timer:
        """Run `callback` once, `delay` seconds from now."""
        with self._lock:
            timer = Timer(name, delay, callback, self.clock() + delay, False, next(self._seq))
            self._timers.append(timer)
        return timer

    def cancel(self, timer):
        with self._lock:
            timer.cancelled = True
            if timer in self._timers:
                self._timers.remove(timer)

    def cancel_all(self):
        with self._lock:
            for timer in self._timers:
                timer.cancelled = True
            self._timers = []

    @property
    def pending(self):
        with self._lock:
            return [t.name for t in self._timers if not t.cancelled]

    def poll(self, now=None) -> int:
        """Fire every timer due at `now` (default: the clock). Returns how many fired."""
        if now is None:
            now = self.clock()
        fired = 0
        while True:
            with self._lock:
                due = [t for t in self._timers if not t.cancelled and t.due <= now]
                if not due:
                    return fired
                timer = min(due, key=lambda t: (t.due, t.seq))
                if timer.repeat:
                    timer.due += timer.interval
                else:
                    self._timers.remove(timer)
                    timer.cancelled = True
            # Callbacks run unlocked so they may schedule, cancel or stop
            try:
                timer.callback()
            except Exception:
                logger.exception("Timer %r failed", timer.name)
            fired += 1

    # --- Background thread ---
    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        with self._lock:
            if self.running:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run, args=(self._stop_event,), name="pet-ticker", daemon=True
            )
            self._thread.start()
        logger.debug("Scheduler thread started")

    def _run(self, stop_event):
        while not stop_event.wait(self.resolution):
            self.poll()

    def stop(self):
        """Cancel all timers and stop the polling thread."""
        with self._lock:
            self.cancel_all()
            thread, self._thread = self._thread, None
            self._stop_event.set()
        # A timer callback may stop its own thread; it exits after the callback
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        logger.debug("Scheduler stopped")

    def restart(self):
        self.stop()
        self.start()


class PetTicker:
    """Drives need decay, health drift and the auto-wake check for one pet."""

    def __init__(self, pet, scheduler=None):
        self.pet = pet
        self.scheduler = scheduler or Scheduler(clock=pet.clock)
        self.threaded = True
        self._timers = []
        pet.subscribe(on_death=self._on_pet_death)

    @property
    def running(self) -> bool:
        return bool(self._timers)

    def start(self, threaded=True):
        """Install the timers; with `threaded` also start the polling thread."""
        if self._timers:
            return
        self.threaded = threaded
        every = self.scheduler.every
        self._timers = [every("health", HEALTH_TICK_SECONDS, self._health_tick)]
        for kind, interval in NEED_INTERVALS.items():
            self._timers.append(every(kind.value, interval, partial(self._need_tick, kind)))
        self._timers.append(every("wake", WAKE_CHECK_SECONDS, self._wake_check))
        if threaded:
            self.scheduler.start()
        logger.info("Ticker started (%s)", "threaded" if threaded else "manual")

    def stop(self):
        self._timers = []
        self.scheduler.stop()
        logger.info("Ticker stopped")

    def restart(self):
        threaded = self.threaded
        self.stop()
        self.start(threaded=threaded)

    # --- Timer callbacks ---
    def _health_tick(self):
        self.pet.apply_health_tick()
        self.pet.notify_changed()

    def _need_tick(self, kind):
        self.pet.apply_need_tick(kind)
        self.pet.notify_changed()

    def _wake_check(self):
        if self.pet.check_auto_wake():
            self.pet.notify_changed()

    def _on_pet_death(self):
        self.stop()
