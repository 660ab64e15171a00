import logging
from functools import partial

from pocketpet.constants import (
    MAX_SCORE,
    ACTION_COOLDOWN_SECONDS,
    HAPPY_DURATION_SECONDS,
)
from pocketpet.models import ActionRejected, CARE_NEEDS, NeedKind, PetAction

logger = logging.getLogger("actions")

DEAD_REASON = "Your pet has died. Please create a new pet."
SLEEPING_REASON = "Your pet is sleeping. Wake it up first!"
NOT_TIRED_REASON = "Your pet is not tired!"
ALIVE_REASON = "Your pet is still alive!"


class ActionProcessor:
    """Validates and applies the user's care actions.

    `perform()` raises ActionRejected for anything the pet refuses; `handle()`
    is the UI-facing wrapper that turns both outcomes into message lines.
    """

    def __init__(self, pet, ticker):
        self.pet = pet
        self.ticker = ticker
        self.scheduler = ticker.scheduler

    def perform(self, action: PetAction) -> str:
        pet = self.pet
        with pet.locked():
            if not pet.is_alive:
                raise ActionRejected(DEAD_REASON, action)

            if pet.is_sleeping:
                if action is not PetAction.REST:
                    raise ActionRejected(SLEEPING_REASON, action)
                pet.wake_up()
                pet.mark_action()
                return "Your pet woke up!"

            if action is PetAction.REST:
                self._check_can_sleep()
                pet.fall_asleep()
                pet.mark_action()
                return "Your pet is sleeping."

            elapsed = pet.clock() - pet.last_action_time
            if pet.score(action.target) == 0 and elapsed < ACTION_COOLDOWN_SECONDS:
                raise ActionRejected(f"Your pet doesn't need to {action.verb} now!", action)

            pet.satisfy_need(action.target)
            serial = pet.show_happy()
            pet.mark_action()

        self.scheduler.after(HAPPY_DURATION_SECONDS, partial(self._end_happy, serial), name="happy")
        return f"Performed {action.verb}."

    def _check_can_sleep(self):
        pet = self.pet
        if pet.score(NeedKind.TIRED) == 0:
            raise ActionRejected(NOT_TIRED_REASON, PetAction.REST)
        # The most pressing other need is the one named
        others = sorted(
            (kind for kind in CARE_NEEDS if kind is not NeedKind.TIRED),
            key=lambda kind: kind.weight,
            reverse=True,
        )
        for kind in others:
            if pet.score(kind) >= MAX_SCORE:
                verb = PetAction.for_need(kind).verb
                raise ActionRejected(f"Please {verb} your pet first!", PetAction.REST)

    def _end_happy(self, serial):
        if self.pet.end_happy(serial):
            logger.debug("Happy display ended")

    def new_pet(self) -> str:
        """Replace a dead pet with a fresh one and restart the ticker."""
        with self.pet.locked():
            if self.pet.is_alive:
                raise ActionRejected(ALIVE_REASON)
            self.pet.reset()
        self.ticker.restart()
        return "Created a new pet!"

    # --- UI seam ---
    def handle(self, action: PetAction) -> bool:
        """Perform `action` and report the outcome as a message line."""
        try:
            message = self.perform(action)
        except ActionRejected as exc:
            logger.debug("%s rejected: %s", action.name, exc.reason)
            self.pet.post_message(exc.reason)
            return False
        logger.info("%s performed", action.name)
        self.pet.post_message(message)
        return True

    def handle_new_pet(self) -> bool:
        try:
            message = self.new_pet()
        except ActionRejected as exc:
            self.pet.post_message(exc.reason)
            return False
        self.pet.post_message(message)
        return True
