"""Pocket Pet: a small timer-driven virtual pet."""

from pocketpet.models import ActionRejected, DisplayState, NeedKind, PetAction
from pocketpet.pet_entity import Pet
from pocketpet.timekeeper import PetTicker, Scheduler
from pocketpet.actions import ActionProcessor

__all__ = [
    "ActionProcessor",
    "ActionRejected",
    "DisplayState",
    "NeedKind",
    "Pet",
    "PetAction",
    "PetTicker",
    "Scheduler",
]
