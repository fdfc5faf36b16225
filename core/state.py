"""
core.state
Core domain data models (UI independent).

The Ledger is the single game-state value. It is never mutated in place;
every transition builds a new Ledger (usually via dataclasses.replace).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

from .modes import EnemySpec, get_enemy_spec

LOG_TAGS = ("event", "good", "warn", "danger", "system", "merchant", "muted")

# (text, tag) produced by rules; ids are assigned when lines are committed.
LogLine = Tuple[str, str]

ERA_NAMES: Tuple[str, ...] = (
    "Stone Age",
    "Bronze Age",
    "Iron Age",
    "Roman Age",
    "Medievil Age",
    "Electric Age",
    "Modern Age",
)


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def era_name(number: int) -> str:
    """Era name for an era index (-1 is the starting Stone Age)."""
    ix = clamp(int(number) + 1, 0, len(ERA_NAMES) - 1)
    return ERA_NAMES[ix]


def era_id(number: int) -> int:
    """1-based era id used by the weapon shop tables."""
    return clamp(int(number) + 2, 1, len(ERA_NAMES))


@dataclass(frozen=True)
class Inventory:
    hpotion: int = 0
    dpotion: int = 0
    mpotion: int = 0
    spotion: int = 0
    lightning_potion: int = 0
    sleep_potion: int = 0
    poison_potion: int = 0
    bread: int = 0
    meat: int = 0
    fruit: int = 0
    cheese: int = 0

    def add(self, key: str, qty: int) -> "Inventory":
        """Return a copy with `key` changed by qty (floored at 0)."""
        if key not in INVENTORY_KEYS:
            raise ValueError(f"Unknown inventory key: {key}")
        return replace(self, **{key: max(0, int(getattr(self, key)) + int(qty))})


INVENTORY_KEYS: Tuple[str, ...] = tuple(f.name for f in fields(Inventory))


@dataclass(frozen=True)
class Policy:
    locked: bool
    active: bool
    desc: str


@dataclass(frozen=True)
class LogEntry:
    text: str
    tag: str
    id: int


@dataclass(frozen=True)
class MerchantOffer:
    """A pending merchant proposal. Prices are already discounted."""

    kind: str  # weapon | unique
    name: str
    price: int
    bonus: int = 0
    rarity: str = ""
    effect: Optional[str] = None  # happiness | maxstrength | None
    value: int = 0
    discount_pct: int = 0


@dataclass(frozen=True)
class FightState:
    cfg: Optional[EnemySpec] = None
    difficulty: Optional[str] = None
    stunned: bool = False
    poison_turns: int = 0
    over: bool = False

    @property
    def active(self) -> bool:
        return self.cfg is not None and not self.over


@dataclass(frozen=True)
class Ledger:
    """Whole game state.

    Grouped roughly as: progress, economy, population, combat readiness,
    inventory/equipment, merchant relation, ownership, policies, log and
    transient sub-state (merchant offer, fight, buildings, choice event).
    """

    name: str
    day: int
    death_day: int
    number: int

    money: int
    exmoney: int
    pmoney: int

    people: int
    maxpeople: int
    happiness: int

    strength: int
    maxstrength: int
    phealth: int
    maxphealth: int
    ehealth: int

    inventory: Inventory = field(default_factory=Inventory)
    current_sword: str = "None"
    min_dmg: int = 5
    max_dmg: int = 15

    wfight: int = 0
    lfight: int = 0

    merchant_relationship: int = 0
    merchant_weapon_log: FrozenSet[str] = frozenset()
    last_merchant_offer_type: Optional[str] = None

    owned_weapon: Dict[int, int] = field(default_factory=dict)
    policies: Dict[str, Policy] = field(default_factory=dict)
    logs: Tuple[LogEntry, ...] = ()

    pending_merchant: Optional[MerchantOffer] = None
    fight: FightState = field(default_factory=FightState)
    buildings: Tuple[str, ...] = ()
    choice_event: Optional[str] = None
    ended: bool = False

    @property
    def current_era(self) -> str:
        return era_name(self.number)

    def policy_active(self, name: str) -> bool:
        p = self.policies.get(name)
        return bool(p and p.active)


# -------------------------
# Mapping bridge (persistence / export)
# -------------------------


def ledger_to_dict(ledger: Ledger) -> Dict[str, Any]:
    """JSON-friendly dict of the whole Ledger."""
    d = asdict(ledger)
    d["merchant_weapon_log"] = sorted(ledger.merchant_weapon_log)
    d["owned_weapon"] = {str(k): int(v) for k, v in ledger.owned_weapon.items()}
    d["logs"] = [asdict(e) for e in ledger.logs]
    d["buildings"] = list(ledger.buildings)
    return d


def _offer_from_mapping(d: Optional[Mapping[str, Any]]) -> Optional[MerchantOffer]:
    if not d:
        return None
    effect = d.get("effect")
    return MerchantOffer(
        kind=str(d["kind"]),
        name=str(d["name"]),
        price=int(d["price"]),
        bonus=int(d.get("bonus", 0)),
        rarity=str(d.get("rarity", "") or ""),
        effect=None if effect is None else str(effect),
        value=int(d.get("value", 0)),
        discount_pct=int(d.get("discount_pct", 0)),
    )


def _fight_from_mapping(d: Optional[Mapping[str, Any]]) -> FightState:
    if not d:
        return FightState()
    cfg = d.get("cfg")
    difficulty = d.get("difficulty")
    spec: Optional[EnemySpec] = None
    if cfg:
        spec = EnemySpec(
            key=str(cfg.get("key") or difficulty or ""),
            health=int(cfg["health"]),
            damage_min=int(cfg["damage_min"]),
            damage_max=int(cfg["damage_max"]),
            coins_min=int(cfg["coins_min"]),
            coins_max=int(cfg["coins_max"]),
        )
    elif difficulty:
        spec = get_enemy_spec(str(difficulty))
    return FightState(
        cfg=spec,
        difficulty=None if difficulty is None else str(difficulty),
        stunned=bool(d.get("stunned", False)),
        poison_turns=int(d.get("poison_turns", 0)),
        over=bool(d.get("over", False)),
    )


def ledger_from_mapping(d: Mapping[str, Any]) -> Ledger:
    """Rebuild a Ledger from ledger_to_dict() output.

    Raises KeyError/TypeError/ValueError on malformed input; callers at the
    persistence boundary translate those.
    """
    inv = dict(d.get("inventory") or {})
    inventory = Inventory(**{k: int(inv.get(k, 0)) for k in INVENTORY_KEYS})

    policies = {
        str(k): Policy(locked=bool(v["locked"]), active=bool(v["active"]), desc=str(v.get("desc", "")))
        for k, v in dict(d.get("policies") or {}).items()
    }
    logs: List[LogEntry] = [
        LogEntry(text=str(e["text"]), tag=str(e["tag"]), id=int(e["id"])) for e in list(d.get("logs") or [])
    ]
    last = d.get("last_merchant_offer_type")
    choice = d.get("choice_event")

    return Ledger(
        name=str(d["name"]),
        day=int(d["day"]),
        death_day=int(d["death_day"]),
        number=int(d["number"]),
        money=int(d["money"]),
        exmoney=int(d["exmoney"]),
        pmoney=int(d.get("pmoney", 0)),
        people=int(d["people"]),
        maxpeople=int(d["maxpeople"]),
        happiness=int(d["happiness"]),
        strength=int(d["strength"]),
        maxstrength=int(d["maxstrength"]),
        phealth=int(d["phealth"]),
        maxphealth=int(d.get("maxphealth", 100)),
        ehealth=int(d["ehealth"]),
        inventory=inventory,
        current_sword=str(d.get("current_sword", "None")),
        min_dmg=int(d.get("min_dmg", 5)),
        max_dmg=int(d.get("max_dmg", 15)),
        wfight=int(d.get("wfight", 0)),
        lfight=int(d.get("lfight", 0)),
        merchant_relationship=int(d.get("merchant_relationship", 0)),
        merchant_weapon_log=frozenset(str(x) for x in (d.get("merchant_weapon_log") or [])),
        last_merchant_offer_type=None if last is None else str(last),
        owned_weapon={int(k): int(v) for k, v in dict(d.get("owned_weapon") or {}).items()},
        policies=policies,
        logs=tuple(logs),
        pending_merchant=_offer_from_mapping(d.get("pending_merchant")),
        fight=_fight_from_mapping(d.get("fight")),
        buildings=tuple(str(x) for x in (d.get("buildings") or [])),
        choice_event=None if choice is None else str(choice),
        ended=bool(d.get("ended", False)),
    )


def default_start_state(
    *,
    name: str,
    death_day: int,
    money: int = 500,
    people: int = 50,
    bread: int = 10,
    policies: Optional[Mapping[str, Policy]] = None,
) -> Ledger:
    """Baseline start state.

    Keep it in core so headless tests and UI share the same baseline.
    The death day is drawn by the caller so this stays a pure function.
    """
    from .catalog import default_policies

    return Ledger(
        name=str(name or "kingdom name"),
        day=1,
        death_day=int(death_day),
        number=-1,
        money=int(money),
        exmoney=5000,
        pmoney=0,
        people=int(people),
        maxpeople=int(people),
        happiness=50,
        strength=3,
        maxstrength=3,
        phealth=100,
        maxphealth=100,
        ehealth=100,
        inventory=Inventory(bread=int(bread)),
        owned_weapon={i: 0 for i in range(1, len(ERA_NAMES) + 1)},
        policies=dict(policies) if policies is not None else default_policies(),
    )
