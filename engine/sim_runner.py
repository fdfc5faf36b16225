"""engine.sim_runner

Headless runner for quick sanity checks.

This keeps tests deterministic and CI-friendly: a seeded RNG drives both the
game and a tiny built-in autoplayer that picks commands the way a cautious
player would.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Tuple

from core.buildings import building_slots, pending_choice
from core.catalog import BUILDINGS, MAX_ERA_NUMBER
from core.rng import RngSource, source_from
from core.state import Ledger

from .commands import new_game, run_command
from .config import EngineConfig
from .logging import command_log, make_run_export


@dataclass
class AutoPlayer:
    """Deterministic stand-in for a human (no UI)."""

    rng: RngSource

    def next_command(self, s: Ledger) -> Tuple[str, Dict[str, Any]]:
        if s.choice_event is not None:
            ev = pending_choice(s)
            key = ev.options[0].key if ev else ""
            return "resolve_choice", {"option_key": key}
        if s.fight.active:
            if s.phealth < 30 and s.inventory.hpotion > 0:
                return "fight_action", {"action": "heal"}
            return "fight_action", {"action": "strike" if self.rng.draw_int(1, 4) > 1 else "block"}
        if s.pending_merchant is not None:
            if s.money >= s.pending_merchant.price + 200:
                return "buy_merchant", {}
            return "dismiss_merchant", {}
        if s.strength >= 1:
            if s.inventory.bread < s.people and s.money >= 20 * s.people:
                return "buy_item", {"var": "bread", "qty": s.people}
            if s.money >= s.exmoney and s.number < MAX_ERA_NUMBER:
                return "expand", {}
            if (
                len(s.buildings) < building_slots(s)
                and s.people >= BUILDINGS["farm"].min_people
                and s.money >= BUILDINGS["farm"].cost + 200
            ):
                return "build", {"building_id": "farm"}
            roll = self.rng.draw_int(1, 3)
            if roll == 1:
                return "start_fight", {"difficulty": "EASY"}
            if roll == 2 and s.happiness > 20:
                return "tax", {}
            if s.money >= 5 and s.people >= 1:
                return "pay", {}
        for name, p in s.policies.items():
            if not p.locked and not p.active and name != "Charity Relief":
                return "toggle_policy", {"name": name}
        return "sleep", {}


def run_headless_sim(days: int = 30, seed: int = 123, max_commands: int = 5000) -> Dict[str, Any]:
    """Run a deterministic game until `days` sleeps (or the reign ends) and return summary."""
    cfg = EngineConfig(base_seed=seed)
    game_rng = source_from("game", base_seed=seed)
    player = AutoPlayer(rng=source_from("player", base_seed=seed))

    state, _ = new_game("Headless", game_rng, cfg)
    initial = state
    logs: List[Dict[str, Any]] = []
    sleeps = 0

    for _ in range(max_commands):
        if sleeps >= days or state.ended:
            break
        command, args = player.next_command(state)
        before = state
        state, entries = run_command(state, command, game_rng, cfg, **args)
        logs.append(command_log(command, args, before, state, entries))
        if command == "sleep":
            sleeps += 1

    return {
        "days": sleeps,
        "final": state,
        "logs": logs,
        "export": make_run_export(seed=seed, config=asdict(cfg), initial_state=initial, command_logs=logs),
    }
