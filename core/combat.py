"""
core.combat
Turn-based fight resolver.

States: idle (no cfg) -> active (cfg set, not over) -> over. Starting a new
fight always resets the sub-state. Every player action is followed by the
poison tick and the settlement check; strike, block and the damage potion
also give the enemy its turn.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

from .modes import get_enemy_spec
from .rng import RngSource
from .state import FightState, Ledger, LogLine

ACTIONS = ("strike", "block", "heal", "dmg_pot", "lightning", "sleep", "poison")

DAMAGE_POTION_BONUS = 10
POISON_TURNS = 3
POISON_DAMAGE = 5

# action -> (inventory field, message on use, message when none left)
_POTION_ACTIONS = {
    "heal": ("hpotion", "You healed to full health.", "No Health potions left."),
    "lightning": ("lightning_potion", "Lightning potion used. Enemy is stunned next turn.", "No Lightning potions left."),
    "sleep": ("sleep_potion", "Sleep potion used. Enemy sleeps for one turn.", "No Sleep potions left."),
    "poison": ("poison_potion", "Poison applied. Enemy will take damage over 3 turns.", "No Poison potions left."),
}


def start_fight(ledger: Ledger, difficulty: str) -> Tuple[Ledger, List[LogLine]]:
    cfg = get_enemy_spec(difficulty)
    if cfg is None:
        return ledger, [(f"Unknown difficulty: {difficulty}.", "muted")]
    if ledger.strength < 1:
        return ledger, [("Too exhausted to fight. Sleep to restore strength.", "muted")]

    s = replace(
        ledger,
        strength=max(0, ledger.strength - 1),
        phealth=ledger.maxphealth,
        ehealth=cfg.health,
        fight=FightState(cfg=cfg, difficulty=cfg.key),
    )
    label = cfg.key.lower()
    article = "An" if label[0] in "aeiou" else "A"
    return s, [(f"{article} {label} enemy approaches ({cfg.health} HP).", "event")]


def _poison_tick(s: Ledger) -> Tuple[Ledger, List[LogLine]]:
    f = s.fight
    if f.poison_turns > 0 and s.ehealth > 0:
        s = replace(
            s,
            ehealth=max(0, s.ehealth - POISON_DAMAGE),
            fight=replace(f, poison_turns=f.poison_turns - 1),
        )
        return s, [(f"Poison deals {POISON_DAMAGE} damage to the enemy.", "event")]
    return s, []


def _settle(s: Ledger, rng: RngSource) -> Tuple[Ledger, List[LogLine]]:
    cfg = s.fight.cfg
    if cfg is None:
        return s, []
    if s.ehealth <= 0:
        reward = rng.draw_int(cfg.coins_min, cfg.coins_max)
        s = replace(s, money=s.money + reward, wfight=s.wfight + 1, fight=replace(s.fight, over=True))
        return s, [(f"You defeated the enemy. Earned {reward} coins.", "good")]
    if s.phealth <= 0:
        s = replace(s, lfight=s.lfight + 1, fight=replace(s.fight, over=True))
        return s, [("You were defeated. Retreating to your kingdom.", "danger")]
    return s, []


def _finish(s: Ledger, lines: List[LogLine], rng: RngSource) -> Tuple[Ledger, List[LogLine]]:
    s, more = _poison_tick(s)
    lines.extend(more)
    s, more = _settle(s, rng)
    lines.extend(more)
    return s, lines


def _use_potion(s: Ledger, action: str) -> Tuple[Ledger, List[LogLine]]:
    key, used, _ = _POTION_ACTIONS[action]
    s = replace(s, inventory=s.inventory.add(key, -1))
    if action == "heal":
        s = replace(s, phealth=s.maxphealth)
    elif action in ("lightning", "sleep"):
        s = replace(s, fight=replace(s.fight, stunned=True))
    elif action == "poison":
        s = replace(s, fight=replace(s.fight, poison_turns=POISON_TURNS))
    return s, [(used, "event")]


def player_action(ledger: Ledger, action: str, rng: RngSource) -> Tuple[Ledger, List[LogLine]]:
    """Resolve one player turn. Returns the new ledger and the turn's lines."""
    cfg = ledger.fight.cfg
    if cfg is None or ledger.fight.over:
        return ledger, [("There is no fight in progress.", "muted")]
    if action not in ACTIONS:
        return ledger, [(f"Unknown fight action: {action}.", "muted")]

    s = ledger

    if action in _POTION_ACTIONS:
        key, _, missing = _POTION_ACTIONS[action]
        if getattr(s.inventory, key) <= 0:
            return s, [(missing, "muted")]
        s, lines = _use_potion(s, action)
        return _finish(s, lines, rng)

    lines: List[LogLine] = []
    if action == "strike":
        pdamage = rng.draw_int(s.min_dmg, s.max_dmg)
        lines.append((f"You struck the enemy for {pdamage} damage.", "event"))
    elif action == "block":
        blk = rng.draw_int(10, 30)
        pdamage = -blk
        lines.append((f"You prepare to block {blk} damage.", "event"))
    else:
        if s.inventory.dpotion <= 0:
            return s, [("No Damage potions left.", "muted")]
        pdamage = rng.draw_int(s.min_dmg, s.max_dmg) + DAMAGE_POTION_BONUS
        s = replace(s, inventory=s.inventory.add("dpotion", -1))
        lines.append((f"Damage Potion used. +{DAMAGE_POTION_BONUS} bonus. You hit for {pdamage} damage.", "event"))

    if pdamage >= 0:
        s = replace(s, ehealth=max(0, s.ehealth - pdamage))

    if s.fight.stunned:
        s = replace(s, fight=replace(s.fight, stunned=False))
        lines.append(("Enemy is stunned and skips its turn.", "event"))
    else:
        raw = rng.draw_int(cfg.damage_min, cfg.damage_max)
        edmg = max(0, raw + pdamage) if pdamage < 0 else raw
        s = replace(s, phealth=max(0, s.phealth - edmg))
        lines.append((f"Enemy attacks and deals {edmg} damage.", "warn"))

    return _finish(s, lines, rng)
