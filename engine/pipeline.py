"""engine.pipeline

Core day flow (headless).

Responsibilities, in order:
- restore strength, advance the day
- feed the population
- era flavour and ageing hints
- one random event
- policy upkeep
- building benefits and choice events (optional extension)
- death check

This layer is UI-agnostic. It returns log lines; the command layer commits them.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

from core.buildings import apply_daily_building_benefits, maybe_trigger_choice_event
from core.catalog import ERA_FLAVOUR
from core.effects import apply_policy_upkeep, consume_food
from core.events import resolve_random_event
from core.rng import RngSource
from core.state import Ledger, LogLine

from .config import EngineConfig

AGEING_WARNING_DAYS = (10, 5)


def _flavour(ledger: Ledger) -> List[LogLine]:
    lines: List[LogLine] = []
    text = ERA_FLAVOUR.get(ledger.current_era)
    if text:
        lines.append((text, "muted"))
    if ledger.day in [ledger.death_day - d for d in AGEING_WARNING_DAYS]:
        lines.append(("You feel your age catching up to you...", "muted"))
    return lines


def advance_day(ledger: Ledger, rng: RngSource, config: EngineConfig) -> Tuple[Ledger, List[LogLine]]:
    """Run one full day. Pure: (ledger, draws) -> (ledger, lines)."""
    lines: List[LogLine] = []

    # 1) rest
    s = replace(ledger, strength=ledger.maxstrength, day=ledger.day + 1)

    # 2) food
    s, more = consume_food(s)
    lines.extend(more)

    # 3) flavour
    lines.extend(_flavour(s))

    # 4) random event
    s, more = resolve_random_event(s, rng)
    lines.extend(more)

    # 5) policies
    s, more = apply_policy_upkeep(s, rng)
    lines.extend(more)

    # 6) buildings + choice events
    if config.buildings_enabled:
        s, more = apply_daily_building_benefits(s)
        lines.extend(more)
    if config.choice_events_enabled:
        s, more = maybe_trigger_choice_event(s, rng)
        lines.extend(more)

    # 7) death check
    if s.day >= s.death_day:
        s = replace(s, ended=True)
        lines.append(("Your time has come. Your kingdom now lives on in legend.", "danger"))

    return s, lines
