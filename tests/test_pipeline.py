from dataclasses import replace

from core.effects import apply_policy_upkeep
from core.rng import ScriptedSource
from core.state import MerchantOffer, default_start_state

from engine.commands import dismiss_merchant, sleep, tax
from engine.config import EngineConfig
from engine.pipeline import advance_day

# Choice events off so a scripted day only draws for the random event and policies.
QUIET = EngineConfig(choice_events_enabled=False)


def _fresh(**kw):
    return replace(default_start_state(name="Testland", death_day=120), **kw)


def _with_policy(s, name):
    policies = dict(s.policies)
    policies[name] = replace(policies[name], locked=False, active=True)
    return replace(s, policies=policies)


def test_sleep_restores_strength_and_advances_day():
    s = _fresh(strength=0, inventory=_fresh().inventory.add("bread", 100))

    out, _ = advance_day(s, ScriptedSource([90]), QUIET)

    assert out.day == 2
    assert out.strength == out.maxstrength


def test_food_shortage_exact_losses():
    s = _fresh()  # 50 people, 10 bread

    out, lines = advance_day(s, ScriptedSource([90]), QUIET)

    assert out.inventory.bread == 0
    assert out.happiness == 50 - 20
    assert out.people == 50 - 8
    assert ("Food Shortage. Lost 8 people, happiness -20.", "warn") in lines


def test_food_consumed_when_stocked():
    s = _fresh(inventory=_fresh().inventory.add("bread", 90))

    out, lines = advance_day(s, ScriptedSource([90]), QUIET)

    assert out.inventory.bread == 50
    assert lines[0] == ("You consumed 50 food for your population.", "event")
    assert out.happiness == 50


def test_food_rationing_cuts_demand():
    s = _with_policy(_fresh(inventory=_fresh().inventory.add("bread", 90)), "Food Rationing")

    out, _ = advance_day(s, ScriptedSource([90]), QUIET)

    assert out.inventory.bread == 100 - 37


def test_day_line_order():
    s = _fresh(inventory=_fresh().inventory.add("bread", 90))

    _, lines = advance_day(s, ScriptedSource([90]), QUIET)

    assert [tag for _, tag in lines] == ["event", "muted", "muted"]
    assert lines[-1] == ("A calm day passes.", "muted")


def test_universal_tax_upkeep():
    s = _with_policy(_fresh(inventory=_fresh().inventory.add("bread", 90)), "Universal Tax")

    out, _ = advance_day(s, ScriptedSource([90, 30]), QUIET)

    assert out.money == 530
    assert out.happiness == 48


def test_royal_festival_only_every_fifth_day():
    s = _with_policy(_fresh(day=4, inventory=_fresh().inventory.add("bread", 200)), "Royal Festival")

    out, _ = advance_day(s, ScriptedSource([90]), QUIET)
    assert out.happiness == 58

    out, _ = advance_day(out, ScriptedSource([90]), QUIET)
    assert out.happiness == 58


def test_ageing_hint_ten_days_out():
    s = _fresh(day=9, death_day=20, inventory=_fresh().inventory.add("bread", 90))

    _, lines = advance_day(s, ScriptedSource([90]), QUIET)

    assert ("You feel your age catching up to you...", "muted") in lines


def test_buildings_produce_after_food():
    s = _fresh(buildings=("farm",))  # 10 bread + 15 from the farm, 50 needed

    out, lines = advance_day(s, ScriptedSource([90]), QUIET)

    assert out.inventory.bread == 15
    assert ("Your buildings produced 15 bread.", "good") in lines


def test_choice_event_triggers_on_low_roll():
    s = _fresh(inventory=_fresh().inventory.add("bread", 90))

    out, lines = advance_day(s, ScriptedSource([90, 5, 1]), EngineConfig())

    assert out.choice_event == "bridge"
    assert lines[-1] == ("A decision awaits your judgement: The Old Bridge.", "system")


def test_death_day_ends_reign_and_locks_commands():
    s = _fresh(day=1, death_day=2, inventory=_fresh().inventory.add("bread", 90))

    s, entries = sleep(s, ScriptedSource([90]), QUIET)
    assert s.ended
    assert entries[-1].tag == "danger"

    after, refused = tax(s, ScriptedSource([]), QUIET)
    assert replace(after, logs=()) == replace(s, logs=())
    assert refused[0].text == "Your reign is over. Start a new game to play again."

    after, _ = sleep(after, ScriptedSource([]), QUIET)
    assert after.day == s.day


def test_soft_game_over_keeps_playing():
    cfg = EngineConfig(choice_events_enabled=False, hard_game_over=False)
    s = _fresh(day=1, death_day=2, inventory=_fresh().inventory.add("bread", 200))

    s, _ = sleep(s, ScriptedSource([90]), cfg)
    s, _ = sleep(s, ScriptedSource([90]), cfg)

    assert s.ended
    assert s.day == 3


def test_dismiss_merchant_allowed_after_death():
    s = _fresh(ended=True, pending_merchant=MerchantOffer(kind="unique", name="Map Fragment", price=800))

    out, entries = dismiss_merchant(s, QUIET)

    assert out.pending_merchant is None
    assert entries[0].text == "You sent the merchant away. Map Fragment is no longer on offer."


def test_charity_relief_needs_thirty_coins():
    s = _with_policy(_fresh(), "Charity Relief")

    out, lines = apply_policy_upkeep(s, ScriptedSource([]))
    assert (out.money, out.happiness) == (470, 54)
    assert lines == [("Charity Relief: -30 coins, +4 happiness.", "system")]

    poor = _with_policy(_fresh(money=29), "Charity Relief")
    out, lines = apply_policy_upkeep(poor, ScriptedSource([]))
    assert out == poor
    assert lines == []


def test_public_health_both_branches():
    s = _with_policy(_fresh(), "Public Health")

    out, lines = apply_policy_upkeep(s, ScriptedSource([10]))
    assert out.happiness == 50
    assert lines == [("Public Health prevented a disease outbreak.", "good")]

    out, lines = apply_policy_upkeep(s, ScriptedSource([11]))
    assert out.happiness == 51
    assert lines == []


def test_open_borders_migrants():
    s = _with_policy(_fresh(), "Open Borders")

    out, lines = apply_policy_upkeep(s, ScriptedSource([15, 6]))
    assert out.people == 56
    assert lines == [("Open Borders: +6 migrants joined.", "good")]

    src = ScriptedSource([16])
    out, lines = apply_policy_upkeep(s, src)
    assert out == s
    assert src.remaining == 0


def test_work_tax_rebate():
    s = _with_policy(_fresh(), "Work Tax Rebate")

    out, lines = apply_policy_upkeep(s, ScriptedSource([]))
    assert (out.money, out.happiness) == (485, 52)
    assert lines == [("Work Tax Rebate: -15 coins, +2 happiness.", "system")]

    poor = _with_policy(_fresh(money=14), "Work Tax Rebate")
    out, _ = apply_policy_upkeep(poor, ScriptedSource([]))
    assert out == poor


def test_electric_welfare_only_in_electric_age():
    stone = _with_policy(_fresh(), "Electric Welfare")
    src = ScriptedSource([])
    out, lines = apply_policy_upkeep(stone, src)
    assert out == stone
    assert lines == []

    electric = _with_policy(_fresh(number=4), "Electric Welfare")
    assert electric.current_era == "Electric Age"
    out, lines = apply_policy_upkeep(electric, ScriptedSource([20]))
    assert out == electric
    assert lines == [("Electric Welfare prevented a disaster.", "good")]

    out, lines = apply_policy_upkeep(electric, ScriptedSource([21]))
    assert lines == []
