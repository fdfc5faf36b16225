"""
core.events
Daily random event resolver.

One d100 roll picks exactly one outcome bucket (inclusive cumulative ranges).
Every bucket logs exactly one line; the merchant bucket logs the offer instead.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, List, Tuple

from .effects import apply_delta
from .merchant import generate_offer
from .rng import RngSource
from .state import Ledger, LogLine

Outcome = Tuple[Ledger, List[LogLine]]


def _protest(s: Ledger, rng: RngSource) -> Outcome:
    loss = rng.draw_int(100, 300)
    happiness_loss = rng.draw_int(5, 15)
    s = apply_delta(s, {"money": -loss, "happiness": -happiness_loss, "pmoney": 1})
    return s, [(f"Protest in the streets. Lost {loss} coins. Happiness reduced.", "warn")]


def _rogue_faction(s: Ledger, rng: RngSource) -> Outcome:
    if rng.draw_int(1, 10) <= 6:
        reward = rng.draw_int(300, 800)
        return apply_delta(s, {"money": reward}), [(f"You repelled a rogue faction and looted {reward} coins.", "good")]
    loss = rng.draw_int(100, 400)
    lost = rng.draw_int(3, 10)
    s = apply_delta(s, {"people": -lost, "money": -loss})
    return s, [(f"You lost to a rogue faction. People and {loss} coins lost.", "warn")]


def _merchant(s: Ledger, rng: RngSource) -> Outcome:
    return generate_offer(s, rng)


def _disaster(s: Ledger, rng: RngSource) -> Outcome:
    if rng.draw_unit() < 0.5:
        lost = rng.draw_int(5, 15)
        s = apply_delta(s, {"people": -lost, "bread": -lost, "happiness": -10})
        return s, [(f"Famine struck. {lost} people died and food supplies dwindled.", "warn")]
    loss = rng.draw_int(10, 20)
    s = apply_delta(s, {"bread": -loss, "happiness": -5})
    return s, [(f"Flooding damaged crops. {loss} bread lost.", "warn")]


def _royal_decision(s: Ledger, rng: RngSource) -> Outcome:
    return apply_delta(s, {"happiness": 10}), [("A royal decision pleased the people. Happiness rises.", "good")]


def _relic(s: Ledger, rng: RngSource) -> Outcome:
    if rng.draw_unit() < 0.5:
        return apply_delta(s, {"happiness": -10, "money": -200}), [("A cursed relic brought misfortune.", "warn")]
    return apply_delta(s, {"happiness": 10, "money": 500}), [("An enchanted relic blessed the land. +500 coins.", "good")]


def _policy_unlock(s: Ledger, rng: RngSource) -> Outcome:
    locked = [k for k, p in s.policies.items() if p.locked]
    if not locked:
        return s, [("The council met, but had no new policy to propose.", "muted")]
    key = locked[rng.draw_int(0, len(locked) - 1)]
    policies = dict(s.policies)
    policies[key] = replace(policies[key], locked=False)
    return replace(s, policies=policies), [(f"New policy emerged: {key}. {policies[key].desc}", "system")]


def _festival(s: Ledger, rng: RngSource) -> Outcome:
    bonus = rng.draw_int(10, 30)
    return apply_delta(s, {"happiness": bonus}), [(f"A festival boosted morale. +{bonus} happiness.", "good")]


def _treasure(s: Ledger, rng: RngSource) -> Outcome:
    coins = rng.draw_int(200, 600)
    return apply_delta(s, {"money": coins}), [(f"Buried treasure found. +{coins} coins.", "good")]


def _calm(s: Ledger, rng: RngSource) -> Outcome:
    return s, [("A calm day passes.", "muted")]


# (upper bound of the roll, key, handler); lower bound is the previous upper + 1
BUCKETS: Tuple[Tuple[int, str, Callable[[Ledger, RngSource], Outcome]], ...] = (
    (10, "protest", _protest),
    (20, "rogue_faction", _rogue_faction),
    (30, "merchant", _merchant),
    (40, "disaster", _disaster),
    (50, "royal_decision", _royal_decision),
    (55, "relic", _relic),
    (60, "policy_unlock", _policy_unlock),
    (70, "festival", _festival),
    (80, "treasure", _treasure),
    (100, "calm", _calm),
)


def bucket_for_roll(roll: int) -> str:
    for upper, key, _ in BUCKETS:
        if roll <= upper:
            return key
    raise ValueError(f"roll out of range: {roll}")


def resolve_random_event(ledger: Ledger, rng: RngSource) -> Outcome:
    roll = rng.draw_int(1, 100)
    for upper, _, handler in BUCKETS:
        if roll <= upper:
            return handler(ledger, rng)
    raise ValueError(f"roll out of range: {roll}")
