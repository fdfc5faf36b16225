"""engine.commands

Command layer: the only way the UI changes a Ledger.

Every command returns (new_ledger, new_log_entries). Preconditions are
checked before anything changes; a refused command returns the same Ledger
plus one log entry explaining why.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from core import buildings as kingdom_buildings
from core import combat
from core import merchant
from core.catalog import BASE_MAX_DMG, BASE_MIN_DMG, MAX_ERA_NUMBER, find_shop_item, find_weapon
from core.effects import apply_delta, spend_strength
from core.rng import RngSource
from core.state import Ledger, LogEntry, LogLine, default_start_state

from .config import EngineConfig
from .logging import append_lines
from .pipeline import advance_day

CommandResult = Tuple[Ledger, List[LogEntry]]

DEFAULT_CONFIG = EngineConfig()


def _commit(ledger: Ledger, lines: Iterable[LogLine], config: EngineConfig) -> CommandResult:
    return append_lines(ledger, lines, cap=config.log_cap)


def _ended(ledger: Ledger, config: EngineConfig) -> Optional[CommandResult]:
    if ledger.ended and config.hard_game_over:
        return _commit(ledger, [("Your reign is over. Start a new game to play again.", "muted")], config)
    return None


# -------------------------
# Start / day cycle
# -------------------------


def new_game(name: str, rng: RngSource, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    name = str(name or "").strip() or "kingdom name"
    ledger = default_start_state(
        name=name,
        death_day=rng.draw_int(80, 150),
        money=config.start_money,
        people=config.start_people,
        bread=config.start_bread,
    )
    lines = [
        (f"{name}, it is. Use the actions on the left to play.", "system"),
        ("=" * 50, "muted"),
    ]
    return _commit(ledger, lines, config)


def sleep(ledger: Ledger, rng: RngSource, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    s, lines = advance_day(ledger, rng, config)
    return _commit(s, lines, config)


# -------------------------
# Kingdom actions
# -------------------------


def tax(ledger: Ledger, rng: RngSource, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    if ledger.happiness < 1:
        return _commit(ledger, [("Your people are too miserable to pay any more taxes.", "warn")], config)
    if ledger.strength < 1:
        return _commit(ledger, [("Too exhausted to collect taxes. Sleep to restore strength.", "muted")], config)

    delta = rng.draw_int(1, 5)
    coins = rng.draw_int(25, 50)
    s = spend_strength(apply_delta(ledger, {"happiness": -delta, "money": coins}))
    return _commit(s, [(f"You taxed the people: +{coins} coins, happiness -{delta}.", "warn")], config)


def pay(ledger: Ledger, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    if ledger.people < 1:
        return _commit(ledger, [(f"You have no-one left in {ledger.name} to pay.", "warn")], config)
    if ledger.money < 5:
        return _commit(ledger, [("You cannot afford to pay the people.", "warn")], config)
    if ledger.strength < 1:
        return _commit(ledger, [("Too exhausted to hand out coins. Sleep to restore strength.", "muted")], config)

    s = spend_strength(apply_delta(ledger, {"money": -5, "happiness": 5}))
    return _commit(s, [("You paid the people. Happiness +5.", "good")], config)


def expand(ledger: Ledger, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    if ledger.number >= MAX_ERA_NUMBER:
        return _commit(ledger, [("You are already at the top Age.", "muted")], config)
    if ledger.money < ledger.exmoney:
        return _commit(ledger, [(f"You need {ledger.exmoney - ledger.money} more coins to expand.", "muted")], config)
    if ledger.strength < 1:
        return _commit(ledger, [("Too exhausted to expand. Sleep to restore strength.", "muted")], config)

    s = replace(
        ledger,
        money=ledger.money - ledger.exmoney,
        exmoney=ledger.exmoney * 2,
        maxpeople=ledger.maxpeople * 2,
        number=ledger.number + 1,
        maxstrength=max(ledger.maxstrength, 4),
    )
    s = spend_strength(s)
    return _commit(s, [(f"You advanced to {s.current_era}. Max population is now {s.maxpeople}.", "good")], config)


def toggle_policy(ledger: Ledger, name: str, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    p = ledger.policies.get(str(name))
    if p is None:
        return _commit(ledger, [(f"No such policy: {name}.", "muted")], config)
    if p.locked:
        return _commit(ledger, [(f"{name} is still locked.", "muted")], config)

    policies = dict(ledger.policies)
    policies[str(name)] = replace(p, active=not p.active)
    state = "ENABLED" if not p.active else "DISABLED"
    return _commit(replace(ledger, policies=policies), [(f"{name} is now {state}.", "system")], config)


# -------------------------
# Shop
# -------------------------


def buy_item(ledger: Ledger, var: str, qty: int = 1, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    item = find_shop_item(str(var))
    if item is None:
        return _commit(ledger, [(f"The shop does not sell {var}.", "muted")], config)
    qty = int(qty)
    if qty <= 0:
        return _commit(ledger, [("Choose a quantity of at least 1.", "muted")], config)
    total = item.price * qty
    if ledger.money < total:
        return _commit(ledger, [("Not enough coins.", "warn")], config)

    s = replace(ledger, money=ledger.money - total, inventory=ledger.inventory.add(item.var, qty))
    return _commit(s, [(f"Purchased {qty} {item.name}.", "good")], config)


def buy_weapon(ledger: Ledger, era: int, weapon_id: int, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    w = find_weapon(era, weapon_id)
    if w is None:
        return _commit(ledger, [("The smith has no such weapon.", "muted")], config)
    if w.id <= ledger.owned_weapon.get(w.era, 0):
        return _commit(ledger, [("That weapon is locked.", "muted")], config)
    if ledger.money < w.price:
        return _commit(ledger, [("Not enough coins.", "warn")], config)

    owned = dict(ledger.owned_weapon)
    owned[w.era] = w.id
    s = replace(
        ledger,
        money=ledger.money - w.price,
        owned_weapon=owned,
        min_dmg=BASE_MIN_DMG + w.damage,
        max_dmg=BASE_MAX_DMG + w.damage,
        current_sword=f"{w.name} (+{w.damage} DMG)",
    )
    return _commit(s, [(f"Purchased {w.name}.", "good")], config)


def buy_merchant(ledger: Ledger, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    s, lines = merchant.buy_offer(ledger)
    return _commit(s, lines, config)


def dismiss_merchant(ledger: Ledger, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    s, lines = merchant.dismiss_offer(ledger)
    return _commit(s, lines, config)


# -------------------------
# Buildings / choice events
# -------------------------


def build(ledger: Ledger, building_id: str, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    if not config.buildings_enabled:
        return _commit(ledger, [("Building is not available in this game.", "muted")], config)
    s, lines = kingdom_buildings.build(ledger, building_id)
    return _commit(s, lines, config)


def resolve_choice(ledger: Ledger, option_key: str, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    s, lines = kingdom_buildings.resolve_choice(ledger, option_key)
    return _commit(s, lines, config)


# -------------------------
# Fights
# -------------------------


def start_fight(ledger: Ledger, difficulty: str, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    s, lines = combat.start_fight(ledger, difficulty)
    return _commit(s, lines, config)


def fight_action(ledger: Ledger, action: str, rng: RngSource, config: EngineConfig = DEFAULT_CONFIG) -> CommandResult:
    refused = _ended(ledger, config)
    if refused:
        return refused
    s, lines = combat.player_action(ledger, action, rng)
    return _commit(s, lines, config)


# -------------------------
# Dispatch
# -------------------------

_NEEDS_RNG = {"sleep", "tax", "fight_action"}

COMMANDS: Dict[str, Callable[..., CommandResult]] = {
    "sleep": sleep,
    "tax": tax,
    "pay": pay,
    "expand": expand,
    "toggle_policy": toggle_policy,
    "buy_item": buy_item,
    "buy_weapon": buy_weapon,
    "buy_merchant": buy_merchant,
    "dismiss_merchant": dismiss_merchant,
    "build": build,
    "resolve_choice": resolve_choice,
    "start_fight": start_fight,
    "fight_action": fight_action,
}


def run_command(
    ledger: Ledger,
    command: str,
    rng: RngSource,
    config: EngineConfig = DEFAULT_CONFIG,
    **args: Any,
) -> CommandResult:
    """Dispatch by name (used by the UI and the headless runner)."""
    fn = COMMANDS.get(str(command))
    if fn is None:
        raise ValueError(f"Unknown command: {command}")
    if command in _NEEDS_RNG:
        return fn(ledger, rng=rng, config=config, **args)
    return fn(ledger, config=config, **args)
