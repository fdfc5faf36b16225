"""
core.effects
Kingdom economy rules:
- clamp rules (apply_delta)
- food consumption
- daily policy upkeep
- small ledger helpers shared by the command layer
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Tuple

from .rng import RngSource
from .state import Ledger, LogLine, clamp

Delta = Dict[str, int]

DELTA_KEYS = ("money", "happiness", "people", "bread", "maxstrength", "pmoney")


def apply_delta(ledger: Ledger, delta: Delta) -> Ledger:
    """Apply delta with clamp rules (pure function).

    money / people / bread floor at 0, happiness clamps to [0, 100],
    maxstrength never drops below 1 and strength follows it down.
    """
    unknown = set(delta) - set(DELTA_KEYS)
    if unknown:
        raise ValueError(f"Unknown delta keys: {sorted(unknown)}")

    money = max(0, ledger.money + int(delta.get("money", 0)))
    happiness = clamp(ledger.happiness + int(delta.get("happiness", 0)), 0, 100)
    people = max(0, ledger.people + int(delta.get("people", 0)))
    pmoney = max(0, ledger.pmoney + int(delta.get("pmoney", 0)))
    maxstrength = max(1, ledger.maxstrength + int(delta.get("maxstrength", 0)))
    strength = min(ledger.strength, maxstrength)
    inventory = ledger.inventory
    if delta.get("bread"):
        inventory = inventory.add("bread", int(delta["bread"]))
    return replace(
        ledger,
        money=money,
        happiness=happiness,
        people=people,
        pmoney=pmoney,
        maxstrength=maxstrength,
        strength=strength,
        inventory=inventory,
    )


def spend_strength(ledger: Ledger, n: int = 1) -> Ledger:
    return replace(ledger, strength=max(0, ledger.strength - int(n)))


def required_food(ledger: Ledger) -> int:
    if ledger.policy_active("Food Rationing"):
        return int(ledger.people * 0.75)
    return int(ledger.people)


def consume_food(ledger: Ledger) -> Tuple[Ledger, List[LogLine]]:
    need = required_food(ledger)
    bread = ledger.inventory.bread
    if bread >= need:
        out = replace(ledger, inventory=replace(ledger.inventory, bread=bread - need))
        return out, [(f"You consumed {need} food for your population.", "event")]

    shortage = need - bread
    happiness_loss = shortage // 2
    people_lost = shortage // 5
    out = replace(
        ledger,
        inventory=replace(ledger.inventory, bread=0),
        happiness=clamp(ledger.happiness - happiness_loss, 0, 100),
        people=max(0, ledger.people - people_lost),
    )
    return out, [(f"Food Shortage. Lost {people_lost} people, happiness -{happiness_loss}.", "warn")]


def apply_policy_upkeep(ledger: Ledger, rng: RngSource) -> Tuple[Ledger, List[LogLine]]:
    """Daily effects of every active policy, in table order."""
    s = ledger
    lines: List[LogLine] = []

    if s.policy_active("Universal Tax"):
        bonus = rng.draw_int(20, 50)
        s = apply_delta(s, {"money": bonus, "happiness": -2})
        lines.append((f"Universal Tax active: +{bonus} coins, -2 happiness.", "system"))

    if s.policy_active("Charity Relief") and s.money >= 30:
        s = apply_delta(s, {"money": -30, "happiness": 4})
        lines.append(("Charity Relief: -30 coins, +4 happiness.", "system"))

    if s.policy_active("Royal Festival") and s.day % 5 == 0:
        s = apply_delta(s, {"happiness": 8})
        lines.append(("Royal Festival held: +8 happiness.", "good"))

    if s.policy_active("Public Health"):
        if rng.draw_int(1, 100) <= 10:
            lines.append(("Public Health prevented a disease outbreak.", "good"))
        else:
            s = apply_delta(s, {"happiness": 1})

    if s.policy_active("Open Borders") and rng.draw_int(1, 100) <= 15:
        influx = rng.draw_int(2, 8)
        s = apply_delta(s, {"people": influx})
        lines.append((f"Open Borders: +{influx} migrants joined.", "good"))

    if s.policy_active("Work Tax Rebate") and s.money >= 15:
        s = apply_delta(s, {"money": -15, "happiness": 2})
        lines.append(("Work Tax Rebate: -15 coins, +2 happiness.", "system"))

    if s.policy_active("Electric Welfare") and s.current_era == "Electric Age" and rng.draw_int(1, 100) <= 20:
        lines.append(("Electric Welfare prevented a disaster.", "good"))

    return s, lines
