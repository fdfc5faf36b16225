"""
core.selfcheck
Minimal "it runs" proof for the core rules.

Run:
  python -m core.selfcheck
"""

from __future__ import annotations

from dataclasses import replace

from .buildings import apply_daily_building_benefits, maybe_trigger_choice_event, pending_choice, resolve_choice
from .combat import player_action, start_fight
from .effects import apply_policy_upkeep, consume_food
from .events import resolve_random_event
from .rng import source_from
from .state import INVENTORY_KEYS, Ledger, default_start_state


def check_invariants(s: Ledger) -> None:
    assert 0 <= s.happiness <= 100
    assert 0 <= s.phealth <= s.maxphealth
    assert s.ehealth >= 0
    if s.fight.cfg is not None:
        assert s.ehealth <= s.fight.cfg.health
    assert 0 <= s.strength <= s.maxstrength
    assert s.people >= 0
    assert s.money >= 0
    for k in INVENTORY_KEYS:
        assert getattr(s.inventory, k) >= 0


def run_60_days_smoke() -> None:
    rng = source_from("selfcheck", base_seed=42)
    state = default_start_state(name="Selfcheck", death_day=150, money=2000, bread=200)
    state = replace(state, policies={k: replace(p, locked=False, active=True) for k, p in state.policies.items()})

    for _ in range(60):
        state = replace(state, strength=state.maxstrength, day=state.day + 1)
        state, _ = consume_food(state)
        state, _ = resolve_random_event(state, rng)
        state, _ = apply_policy_upkeep(state, rng)
        state, _ = apply_daily_building_benefits(state)
        state, _ = maybe_trigger_choice_event(state, rng)
        ev = pending_choice(state)
        if ev is not None:
            state, _ = resolve_choice(state, ev.options[0].key)

        state, _ = start_fight(state, "EASY")
        while state.fight.active:
            state, _ = player_action(state, "strike", rng)
            check_invariants(state)

        check_invariants(state)

    print("OK: 60-day core smoke test passed.")
    print("Final:", {k: getattr(state, k) for k in ("day", "money", "people", "happiness", "wfight", "lfight")})


if __name__ == "__main__":
    run_60_days_smoke()
