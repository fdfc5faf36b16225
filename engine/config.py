"""engine.config

Engine configuration passed from UI.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    base_seed: int = 42
    start_money: int = 500
    start_people: int = 50
    start_bread: int = 10
    # True: once the death day is reached every command is refused.
    hard_game_over: bool = True
    buildings_enabled: bool = True
    choice_events_enabled: bool = True
    log_cap: int = 600
