"""
core.modes
Fight difficulty specifications (enemy stat blocks).

Kept in core so balancing lives in one place, but UI can still display labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class EnemySpec:
    key: str
    health: int
    damage_min: int
    damage_max: int
    coins_min: int
    coins_max: int


DEFAULT_ENEMIES: Dict[str, EnemySpec] = {
    "EASY": EnemySpec(
        key="EASY",
        health=100,
        damage_min=2,
        damage_max=7,
        coins_min=50,
        coins_max=150,
    ),
    "MEDIUM": EnemySpec(
        key="MEDIUM",
        health=200,
        damage_min=7,
        damage_max=12,
        coins_min=100,
        coins_max=500,
    ),
    "HARD": EnemySpec(
        key="HARD",
        health=300,
        damage_min=10,
        damage_max=20,
        coins_min=150,
        coins_max=800,
    ),
}


def get_enemy_spec(key: str) -> Optional[EnemySpec]:
    return DEFAULT_ENEMIES.get(str(key or "").strip().upper())
