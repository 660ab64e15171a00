import os

# Headless pygame for the engine tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from pocketpet.actions import ActionProcessor
from pocketpet.pet_entity import Pet
from pocketpet.timekeeper import PetTicker


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def messages():
    return []


@pytest.fixture
def pet(clock, messages):
    p = Pet(clock=clock)
    p.subscribe(on_message=messages.append)
    return p


@pytest.fixture
def ticker(pet):
    t = PetTicker(pet)
    t.start(threaded=False)
    yield t
    t.stop()


@pytest.fixture
def processor(pet, ticker):
    return ActionProcessor(pet, ticker)


@pytest.fixture
def advance(clock, ticker):
    """Move the fake clock forward one second at a time, firing due timers."""
    def _advance(seconds):
        for _ in range(int(seconds)):
            clock.advance(1.0)
            ticker.scheduler.poll()
    return _advance
