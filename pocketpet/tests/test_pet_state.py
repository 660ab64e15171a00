from pocketpet.models import DisplayState, NeedKind
from pocketpet.pet_entity import DEATH_MESSAGE, Pet


def test_new_pet_defaults(pet):
    assert pet.health == 100
    assert pet.current_need == NeedKind.NORMAL
    assert pet.display_state == DisplayState.NORMAL
    assert not pet.is_sleeping
    assert pet.is_alive
    assert all(score == 0 for score in pet.scores.values())


def test_need_scores_are_clamped(pet):
    pet.update_need(NeedKind.HUNGRY, 15)
    assert pet.score(NeedKind.HUNGRY) == 10
    assert pet.current_need == NeedKind.HUNGRY
    pet.update_need(NeedKind.HUNGRY, -4)
    assert pet.score(NeedKind.HUNGRY) == 0
    assert pet.current_need == NeedKind.NORMAL


def test_normal_is_not_a_score(pet):
    pet.update_need(NeedKind.NORMAL, 5)
    assert NeedKind.NORMAL not in pet.scores


def test_health_is_clamped(pet):
    pet.set_health(150)
    assert pet.health == 100
    pet.set_health(42)
    assert pet.health == 42


def test_setting_health_to_zero_kills(pet, messages):
    pet.update_need(NeedKind.DIRTY, 7)
    pet.set_health(-5)
    assert pet.health == 0
    assert not pet.is_alive
    assert pet.scores[NeedKind.DIRTY] == 0
    assert messages[-1] == DEATH_MESSAGE


def test_priority_follows_weight(pet):
    # Dirty(5) > Tired(4) > Hungry(3) > Bored(2)
    pet.update_need(NeedKind.BORED, 10)
    assert pet.current_need == NeedKind.BORED
    pet.update_need(NeedKind.HUNGRY, 10)
    assert pet.current_need == NeedKind.HUNGRY
    pet.update_need(NeedKind.TIRED, 10)
    assert pet.current_need == NeedKind.TIRED
    pet.update_need(NeedKind.DIRTY, 10)
    assert pet.current_need == NeedKind.DIRTY
    assert pet.display_state == DisplayState.DIRTY


def test_need_tick_adds_weight_up_to_max(pet):
    pet.apply_need_tick(NeedKind.HUNGRY)
    assert pet.score(NeedKind.HUNGRY) == 3
    for _ in range(5):
        pet.apply_need_tick(NeedKind.HUNGRY)
    assert pet.score(NeedKind.HUNGRY) == 10


def test_need_tick_is_frozen_while_sleeping(pet):
    pet.update_need(NeedKind.BORED, 4)
    pet.fall_asleep()
    assert pet.apply_need_tick(NeedKind.BORED) is False
    assert pet.score(NeedKind.BORED) == 4


def test_health_recovers_when_fine(pet):
    pet.set_health(50)
    pet.apply_health_tick()
    assert pet.health == 55
    pet.set_health(98)
    pet.apply_health_tick()
    assert pet.health == 100


def test_health_decay_is_flat_with_many_critical_needs(pet):
    pet.set_health(50)
    pet.update_need(NeedKind.HUNGRY, 10)
    pet.apply_health_tick()
    assert pet.health == 48
    pet.update_need(NeedKind.DIRTY, 10)
    pet.update_need(NeedKind.TIRED, 10)
    pet.apply_health_tick()
    assert pet.health == 46


def test_sleeping_recovers_even_with_critical_need(pet):
    pet.update_need(NeedKind.BORED, 10)
    pet.set_health(20)
    pet.fall_asleep()
    pet.apply_health_tick()
    assert pet.health == 25


def test_sleep_shows_tired_need(pet):
    pet.update_need(NeedKind.TIRED, 6)
    pet.fall_asleep()
    assert pet.score(NeedKind.TIRED) == 0
    assert pet.recompute_current_need() == NeedKind.TIRED
    assert pet.display_state == DisplayState.SLEEPING


def test_critical_need_notifies_once(pet, messages):
    pet.update_need(NeedKind.HUNGRY, 10)
    pet.update_need(NeedKind.HUNGRY, 10)
    assert messages == ["Your pet is hungry! Please feed it."]


def test_heavier_need_takes_over_notification(pet, messages):
    pet.update_need(NeedKind.HUNGRY, 10)
    pet.update_need(NeedKind.DIRTY, 10)
    assert messages[-1] == "Your pet is dirty! Please clean it."


def test_death_clears_needs_and_silences_notifications(pet, messages):
    pet.update_need(NeedKind.HUNGRY, 10)
    pet.set_health(2)
    pet.apply_health_tick()
    assert not pet.is_alive
    assert pet.health == 0
    assert all(score == 0 for score in pet.scores.values())
    assert pet.display_state == DisplayState.DEAD
    assert messages[-1] == DEATH_MESSAGE
    # Dead pets ignore ticks and raw writes
    pet.apply_need_tick(NeedKind.HUNGRY)
    pet.update_need(NeedKind.DIRTY, 10)
    pet.apply_health_tick()
    assert pet.score(NeedKind.HUNGRY) == 0
    assert pet.score(NeedKind.DIRTY) == 0
    assert pet.health == 0
    assert messages[-1] == DEATH_MESSAGE


def test_reset_starts_fresh(pet, clock):
    pet.update_need(NeedKind.BORED, 10)
    pet.set_health(0)
    clock.advance(12)
    pet.reset()
    assert pet.is_alive
    assert pet.health == 100
    assert pet.last_action_time == clock()
    assert all(score == 0 for score in pet.scores.values())


def test_auto_wake_after_sixty_seconds(pet, clock, messages):
    pet.update_need(NeedKind.TIRED, 8)
    pet.fall_asleep()
    clock.advance(59)
    assert pet.check_auto_wake() is False
    clock.advance(1)
    assert pet.check_auto_wake() is True
    assert not pet.is_sleeping
    assert pet.current_need == NeedKind.NORMAL
    assert messages[-1] == "Your pet woke up!"


def test_stale_happy_serial_is_ignored(pet):
    first = pet.show_happy()
    second = pet.show_happy()
    assert pet.end_happy(first) is False
    assert pet.display_state == DisplayState.HAPPY
    assert pet.end_happy(second) is True
    assert pet.display_state == DisplayState.NORMAL


def test_listener_errors_do_not_propagate(clock, caplog):
    p = Pet(clock=clock)

    def broken():
        raise RuntimeError("boom")

    p.subscribe(on_change=broken)
    p.set_health(90)
    assert p.health == 90
    assert "listener failed" in caplog.text


def test_snapshot_is_a_copy(pet):
    pet.update_need(NeedKind.HUNGRY, 4)
    snap = pet.snapshot()
    pet.update_need(NeedKind.HUNGRY, 9)
    assert snap.scores["HUNGRY"] == 4
    assert snap.display == DisplayState.NORMAL


def test_infinite_inputs_are_clamped(pet):
    pet.update_need(NeedKind.HUNGRY, float("inf"))
    assert pet.score(NeedKind.HUNGRY) == 10
    pet.update_need(NeedKind.HUNGRY, float("-inf"))
    assert pet.score(NeedKind.HUNGRY) == 0
    pet.set_health(float("inf"))
    assert pet.health == 100
    pet.set_health(float("-inf"))
    assert pet.health == 0
    assert not pet.is_alive
