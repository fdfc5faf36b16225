"""
core.merchant
Travelling merchant: offer generation, relationship discount and purchase.

Generating an offer never charges the player; buying is a separate step.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

from .catalog import BASE_MAX_DMG, BASE_MIN_DMG, MERCHANT_BY_ERA, RARITY_WEIGHT, UNIQUE_ITEMS, MerchantWeapon
from .effects import apply_delta
from .rng import RngSource
from .state import Ledger, LogLine, MerchantOffer

MAX_RELATIONSHIP = 5
DISCOUNT_PER_LEVEL = 6
WEAPON_OFFER_CHANCE = 3  # percent


def discounted_price(base: int, relationship: int) -> Tuple[int, int]:
    """Return (final_price, discount_percent)."""
    pct = int(relationship) * DISCOUNT_PER_LEVEL
    disc = (int(base) * pct) // 100
    return int(base) - disc, pct


def weighted_pool(items: Tuple[MerchantWeapon, ...]) -> List[MerchantWeapon]:
    """Expand the catalog so each entry appears `weight` times."""
    pool: List[MerchantWeapon] = []
    for w in items:
        pool.extend([w] * RARITY_WEIGHT.get(w.rarity, 1))
    return pool


def choose_offer_type(ledger: Ledger, rng: RngSource) -> str:
    offer_type = "unique"
    era = ledger.current_era
    if era in MERCHANT_BY_ERA and era not in ledger.merchant_weapon_log:
        if rng.draw_int(1, 100) <= WEAPON_OFFER_CHANCE and ledger.last_merchant_offer_type != "weapon":
            offer_type = "weapon"
    if offer_type == ledger.last_merchant_offer_type:
        offer_type = "unique"
    return offer_type


def generate_offer(ledger: Ledger, rng: RngSource) -> Tuple[Ledger, List[LogLine]]:
    """Produce one pending offer plus its announcement line."""
    offer_type = choose_offer_type(ledger, rng)

    if offer_type == "weapon":
        pool = weighted_pool(MERCHANT_BY_ERA[ledger.current_era])
        sel = pool[rng.draw_int(0, len(pool) - 1)]
        final, pct = discounted_price(sel.price, ledger.merchant_relationship)
        offer = MerchantOffer(
            kind="weapon",
            name=sel.name,
            price=final,
            bonus=sel.bonus,
            rarity=sel.rarity,
            discount_pct=pct,
        )
        article = "an" if sel.rarity[0] in "AEIOU" else "a"
        line = (
            f"Merchant offers {article} {sel.rarity} weapon: {sel.name} (+{sel.bonus} DMG). "
            f"Price {final} coins ({pct}% off).",
            "merchant",
        )
        return replace(ledger, pending_merchant=offer, last_merchant_offer_type="weapon"), [line]

    choices = [u for u in UNIQUE_ITEMS if u.name != ledger.last_merchant_offer_type]
    item = choices[rng.draw_int(0, len(choices) - 1)]
    final, pct = discounted_price(item.price, ledger.merchant_relationship)
    offer = MerchantOffer(
        kind="unique",
        name=item.name,
        price=final,
        effect=item.effect,
        value=item.value,
        discount_pct=pct,
    )
    line = (f"Merchant offers {item.name}. Price {final} coins.", "merchant")
    return replace(ledger, pending_merchant=offer, last_merchant_offer_type=item.name), [line]


def buy_offer(ledger: Ledger) -> Tuple[Ledger, List[LogLine]]:
    offer = ledger.pending_merchant
    if offer is None:
        return ledger, [("The merchant has nothing on offer.", "muted")]
    if ledger.money < offer.price:
        return ledger, [("You cannot afford it.", "warn")]

    relationship = min(MAX_RELATIONSHIP, ledger.merchant_relationship + 1)
    s = replace(ledger, money=ledger.money - offer.price)

    if offer.kind == "weapon":
        s = replace(
            s,
            min_dmg=BASE_MIN_DMG + offer.bonus,
            max_dmg=BASE_MAX_DMG + offer.bonus,
            current_sword=f"{offer.name} (+{offer.bonus} DMG)",
            merchant_weapon_log=ledger.merchant_weapon_log | {ledger.current_era},
            merchant_relationship=relationship,
            pending_merchant=None,
        )
        return s, [(f"You purchased {offer.name}.", "merchant")]

    if offer.effect == "happiness":
        s = apply_delta(s, {"happiness": offer.value})
    elif offer.effect == "maxstrength":
        s = apply_delta(s, {"maxstrength": offer.value})
    s = replace(s, merchant_relationship=relationship, pending_merchant=None)
    return s, [(f"You bought {offer.name}.", "merchant")]


def dismiss_offer(ledger: Ledger) -> Tuple[Ledger, List[LogLine]]:
    if ledger.pending_merchant is None:
        return ledger, [("The merchant has nothing on offer.", "muted")]
    name = ledger.pending_merchant.name
    return replace(ledger, pending_merchant=None), [(f"You sent the merchant away. {name} is no longer on offer.", "muted")]
