"""
core.buildings
Optional kingdom extension: constructed buildings and pending choice events.

The day pipeline calls the two hooks below only when the extension is
enabled, so the core loop stays the same with or without it.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .catalog import BASE_BUILDING_SLOTS, BUILDINGS, CHOICE_EVENTS, CHOICE_EVENTS_BY_ID, Building, ChoiceEvent
from .effects import apply_delta, spend_strength
from .rng import RngSource
from .state import Ledger, LogLine

CHOICE_EVENT_CHANCE = 10  # percent per day

_BENEFIT_TEXT = {
    "money": "Your buildings earned {v} coins.",
    "bread": "Your buildings produced {v} bread.",
    "happiness": "Your buildings lifted happiness by {v}.",
}


def building_slots(ledger: Ledger) -> int:
    """Base slots plus one per era reached."""
    return BASE_BUILDING_SLOTS + max(0, ledger.number + 1)


def daily_totals(buildings: Tuple[str, ...]) -> Dict[str, int]:
    totals = {"money": 0, "bread": 0, "happiness": 0}
    for bid in buildings:
        b = BUILDINGS.get(bid)
        if b is None:
            continue  # stale save
        for k in totals:
            totals[k] += int(b.daily.get(k, 0))
    return totals


def apply_daily_building_benefits(ledger: Ledger) -> Tuple[Ledger, List[LogLine]]:
    s = ledger
    lines: List[LogLine] = []
    for k, v in daily_totals(ledger.buildings).items():
        if v == 0:
            continue
        s = apply_delta(s, {k: v})
        lines.append((_BENEFIT_TEXT[k].format(v=v), "good"))
    return s, lines


def maybe_trigger_choice_event(ledger: Ledger, rng: RngSource) -> Tuple[Ledger, List[LogLine]]:
    if ledger.choice_event is not None:
        return ledger, []
    if rng.draw_int(1, 100) > CHOICE_EVENT_CHANCE:
        return ledger, []
    ev = CHOICE_EVENTS[rng.draw_int(0, len(CHOICE_EVENTS) - 1)]
    return replace(ledger, choice_event=ev.id), [(f"A decision awaits your judgement: {ev.title}.", "system")]


def pending_choice(ledger: Ledger) -> Optional[ChoiceEvent]:
    if ledger.choice_event is None:
        return None
    return CHOICE_EVENTS_BY_ID.get(ledger.choice_event)


def build(ledger: Ledger, building_id: str) -> Tuple[Ledger, List[LogLine]]:
    b: Optional[Building] = BUILDINGS.get(str(building_id))
    if b is None:
        return ledger, [(f"No such building: {building_id}.", "muted")]
    if len(ledger.buildings) >= building_slots(ledger):
        return ledger, [("No free building plots. Expand to a new age for more room.", "muted")]
    if ledger.people < b.min_people:
        return ledger, [(f"A {b.name} needs at least {b.min_people} people.", "muted")]
    if ledger.money < b.cost:
        return ledger, [(f"You need {b.cost - ledger.money} more coins to build a {b.name}.", "warn")]
    if ledger.strength < 1:
        return ledger, [("Too exhausted to oversee construction. Sleep to restore strength.", "muted")]

    s = spend_strength(replace(ledger, money=ledger.money - b.cost, buildings=(*ledger.buildings, b.id)))
    return s, [(f"You built a {b.name}. {b.desc}", "good")]


def resolve_choice(ledger: Ledger, option_key: str) -> Tuple[Ledger, List[LogLine]]:
    ev = pending_choice(ledger)
    if ev is None:
        if ledger.choice_event is not None:
            # unknown id from an old save: drop it
            return replace(ledger, choice_event=None), [("The old matter was forgotten.", "muted")]
        return ledger, [("There is no decision waiting.", "muted")]
    opt = ev.option(str(option_key))
    if opt is None:
        return ledger, [(f"'{option_key}' is not an option for {ev.title}.", "muted")]

    s = replace(apply_delta(ledger, opt.delta), choice_event=None)
    return s, [(f"{ev.title}: {opt.label}. {opt.outcome}", "system")]
