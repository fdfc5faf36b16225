"""
core.catalog
Static game data: weapons, shop items, merchant stock, policies, buildings,
choice events and era flavour.

Read-only reference tables. Rules look things up here and never modify them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .state import Policy

Delta = Dict[str, int]


@dataclass(frozen=True)
class Weapon:
    id: int
    era: int
    name: str
    price: int
    damage: int


@dataclass(frozen=True)
class ShopItem:
    id: int
    name: str
    price: int
    var: str  # Inventory field


@dataclass(frozen=True)
class MerchantWeapon:
    name: str
    bonus: int
    price: int
    rarity: str  # Common | Rare | Epic


@dataclass(frozen=True)
class UniqueItem:
    name: str
    effect: Optional[str]
    value: int
    price: int


@dataclass(frozen=True)
class Building:
    id: str
    name: str
    cost: int
    min_people: int
    daily: Delta = field(default_factory=dict)  # money / bread / happiness
    desc: str = ""


@dataclass(frozen=True)
class ChoiceOption:
    key: str
    label: str
    delta: Delta
    outcome: str


@dataclass(frozen=True)
class ChoiceEvent:
    id: str
    title: str
    prompt: str
    options: Tuple[ChoiceOption, ...]

    def option(self, key: str) -> Optional[ChoiceOption]:
        return next((o for o in self.options if o.key == key), None)


# Era index 0..5 reached through Expand (index -1 is the starting Stone Age).
ERA_SEQ: Tuple[str, ...] = ("Bronze Age", "Iron Age", "Roman Age", "Medievil Age", "Electric Age", "Modern Age")
MAX_ERA_NUMBER = len(ERA_SEQ)  # one past Modern Age; the name stays Modern

ERA_FLAVOUR: Dict[str, str] = {
    "Stone Age": "Your people are learning to craft stone tools.",
    "Bronze Age": "Metalworking begins to shape the future of your army.",
    "Iron Age": "Blacksmiths forge powerful weapons.",
    "Roman Age": "Infrastructure expands under imperial guidance.",
    "Medievil Age": "Armies are growing and the people whisper of war.",
    "Electric Age": "Inventions surge across your cities.",
    "Modern Age": "Skyscrapers rise as society industrialises.",
}

BASE_MIN_DMG = 5
BASE_MAX_DMG = 15

WEAPONS: Tuple[Weapon, ...] = (
    Weapon(1, 1, "Pebble", 1000, 2),
    Weapon(2, 1, "Stone", 5000, 5),
    Weapon(3, 1, "Rock", 7500, 7),
    Weapon(4, 1, "Chiselled Stone", 12000, 12),
    Weapon(5, 1, "Sharpened Rock", 16000, 15),
    Weapon(1, 3, "Iron Spear", 165000, 34),
    Weapon(2, 3, "Steel Sword", 200000, 38),
    Weapon(3, 3, "Lance", 220000, 42),
    Weapon(4, 3, "Axe", 235000, 46),
    Weapon(5, 3, "Bow", 260000, 50),
    Weapon(1, 5, "Socketed Axe", 30000, 17),
    Weapon(2, 5, "Dagger", 45000, 20),
    Weapon(3, 5, "Sickle Sword", 60000, 24),
    Weapon(4, 5, "Reinforced Axe", 90000, 27),
    Weapon(5, 5, "Dead Oak Bow", 120000, 30),
    Weapon(1, 6, "Glock", 1045000, 98),
    Weapon(2, 6, "Uzi", 1100000, 100),
    Weapon(3, 6, "Maxim Gun", 1150000, 102),
    Weapon(4, 6, "AK-47", 1200000, 104),
    Weapon(5, 6, "M1 Garand", 1300000, 106),
    Weapon(1, 7, "Composite Knife", 9000, 75),
    Weapon(2, 7, "Smartsteel Katana", 12000, 95),
    Weapon(3, 7, "Laser Saber", 20000, 120),
)

POTIONS: Tuple[ShopItem, ...] = (
    ShopItem(1, "Health Potion", 500, "hpotion"),
    ShopItem(2, "Mana Potion", 750, "mpotion"),
    ShopItem(3, "Stamina Potion", 1000, "spotion"),
    ShopItem(4, "Damage Potion", 1500, "dpotion"),
    ShopItem(5, "Lightning Potion", 2000, "lightning_potion"),
    ShopItem(6, "Sleep Potion", 1800, "sleep_potion"),
    ShopItem(7, "Poison Potion", 1700, "poison_potion"),
)

FOOD: Tuple[ShopItem, ...] = (
    ShopItem(1, "Bread", 20, "bread"),
    ShopItem(2, "Meat", 50, "meat"),
    ShopItem(3, "Fruit", 30, "fruit"),
    ShopItem(4, "Cheese", 40, "cheese"),
)

MERCHANT_BY_ERA: Dict[str, Tuple[MerchantWeapon, ...]] = {
    "Stone Age": (
        MerchantWeapon("Sharpened Bone", 15, 600, "Common"),
        MerchantWeapon("Jagged Flint Axe", 20, 1200, "Rare"),
        MerchantWeapon("Mammoth Fang Blade", 30, 2000, "Epic"),
    ),
    "Bronze Age": (
        MerchantWeapon("Bronze Shortblade", 22, 1400, "Common"),
        MerchantWeapon("Fire-Hardened Spear", 30, 2400, "Rare"),
        MerchantWeapon("Sun-Kissed Dagger", 38, 3500, "Epic"),
    ),
    "Iron Age": (
        MerchantWeapon("Iron Cleaver", 35, 3000, "Common"),
        MerchantWeapon("Spiked Mace", 42, 4000, "Rare"),
        MerchantWeapon("Molten Iron Blade", 52, 5500, "Epic"),
    ),
    "Roman Age": (
        MerchantWeapon("Legionnaire's Gladius", 40, 3500, "Common"),
        MerchantWeapon("Colosseum Cutter", 50, 5000, "Rare"),
        MerchantWeapon("Centurion's Edge", 65, 7500, "Epic"),
    ),
    "Medievil Age": (
        MerchantWeapon("Crusader Sword", 50, 5000, "Common"),
        MerchantWeapon("Dragonsteel Falchion", 60, 7000, "Rare"),
        MerchantWeapon("Vampire Slayer", 80, 10000, "Epic"),
    ),
    "Electric Age": (
        MerchantWeapon("Insulated Cutter", 65, 7000, "Common"),
        MerchantWeapon("Arc Blade", 80, 10000, "Rare"),
        MerchantWeapon("Tesla Edge", 100, 15000, "Epic"),
    ),
    "Modern Age": (
        MerchantWeapon("Composite Tactical Knife", 75, 9000, "Common"),
        MerchantWeapon("Smartsteel Katana", 95, 12000, "Rare"),
        MerchantWeapon("Prototype Laser Saber", 120, 20000, "Epic"),
    ),
}

RARITY_WEIGHT: Dict[str, int] = {"Common": 3, "Rare": 2, "Epic": 1}

UNIQUE_ITEMS: Tuple[UniqueItem, ...] = (
    UniqueItem("Golden Cheese", "happiness", 5, 700),
    UniqueItem("Ancient Scroll", "maxstrength", 1, 1000),
    UniqueItem("Map Fragment", None, 0, 800),
)

POLICY_DESCRIPTIONS: Dict[str, str] = {
    "Universal Tax": "Gain more tax money, but lower happiness.",
    "Charity Relief": "Lose money per day to boost happiness.",
    "Royal Festival": "Auto-celebrates a festival every 5 days.",
    "Food Rationing": "Reduce food consumption, reduce happiness.",
    "Open Borders": "Chance for more migrants, but occasional unrest.",
    "Public Health": "Reduces sickness, small gold cost daily.",
    "Work Tax Rebate": "Boost worker morale, costs coins.",
    "Electric Welfare": "Auto-fixes disasters. Electric+ only.",
}

BUILDINGS: Dict[str, Building] = {
    "farm": Building("farm", "Farm", 400, 10, {"bread": 15}, "Grows bread for the kingdom."),
    "market": Building("market", "Market", 800, 25, {"money": 40}, "Traders pay stall fees every day."),
    "shrine": Building("shrine", "Shrine", 600, 15, {"happiness": 2}, "A quiet place that lifts spirits."),
    "bakery": Building("bakery", "Bakery", 1200, 40, {"bread": 25, "money": -10}, "Turns grain into bread at a small cost."),
    "tavern": Building("tavern", "Tavern", 1500, 60, {"money": 25, "happiness": 1}, "Ale, songs and a little tax."),
}

BASE_BUILDING_SLOTS = 3

CHOICE_EVENTS: Tuple[ChoiceEvent, ...] = (
    ChoiceEvent(
        id="refugees",
        title="Refugees at the Gate",
        prompt="A column of refugees asks for shelter inside your walls.",
        options=(
            ChoiceOption("accept", "Open the gates", {"people": 8, "bread": -10}, "The refugees settle in and start working."),
            ChoiceOption("refuse", "Turn them away", {"happiness": -5}, "Your people mutter about cruelty."),
        ),
    ),
    ChoiceEvent(
        id="bridge",
        title="The Old Bridge",
        prompt="The river bridge is crumbling. Repairs would be costly.",
        options=(
            ChoiceOption("repair", "Fund the repairs", {"money": -250, "happiness": 6}, "Trade flows across a sturdy new bridge."),
            ChoiceOption("ignore", "Leave it be", {"happiness": -3}, "Carts take the long way round."),
        ),
    ),
    ChoiceEvent(
        id="harvest_feast",
        title="Harvest Feast",
        prompt="The elders suggest sharing the granary stores in a great feast.",
        options=(
            ChoiceOption("feast", "Hold the feast", {"bread": -20, "happiness": 12}, "Songs echo through the night."),
            ChoiceOption("store", "Keep the stores", {"happiness": -2}, "The granary stays full."),
        ),
    ),
    ChoiceEvent(
        id="tax_collector",
        title="The Zealous Collector",
        prompt="Your tax collector offers to squeeze the villages harder this season.",
        options=(
            ChoiceOption("squeeze", "Let him squeeze", {"money": 300, "happiness": -8}, "Coffers swell, faces sour."),
            ChoiceOption("forbid", "Forbid it", {"happiness": 3}, "The villages thank you."),
        ),
    ),
    ChoiceEvent(
        id="wandering_healer",
        title="A Wandering Healer",
        prompt="A healer offers to teach your people, for a price.",
        options=(
            ChoiceOption("hire", "Pay the healer", {"money": -150, "people": 3, "happiness": 4}, "Fewer fall sick this winter."),
            ChoiceOption("dismiss", "Send her away", {}, "She moves on down the road."),
        ),
    ),
)

CHOICE_EVENTS_BY_ID: Dict[str, ChoiceEvent] = {e.id: e for e in CHOICE_EVENTS}


def default_policies() -> Dict[str, Policy]:
    return {name: Policy(locked=True, active=False, desc=desc) for name, desc in POLICY_DESCRIPTIONS.items()}


def find_weapon(era: int, weapon_id: int) -> Optional[Weapon]:
    return next((w for w in WEAPONS if w.era == int(era) and w.id == int(weapon_id)), None)


def find_shop_item(var: str) -> Optional[ShopItem]:
    return next((x for x in (*POTIONS, *FOOD) if x.var == var), None)


def weapons_for_era(era: int) -> List[Weapon]:
    return [w for w in WEAPONS if w.era == int(era)]
