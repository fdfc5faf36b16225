import json
from dataclasses import replace

import pytest

from core.effects import apply_delta
from core.modes import DEFAULT_ENEMIES
from core.rng import ScriptedSource, source_from
from core.state import FightState, Inventory, MerchantOffer, default_start_state, era_id, era_name

from engine.config import EngineConfig
from engine.logging import append_lines
from engine.persistence import SaveError, deserialize, load_save, serialize


def _fresh(**kw):
    return replace(default_start_state(name="Testland", death_day=120), **kw)


def test_default_start_state():
    s = _fresh()

    assert s.day == 1
    assert s.number == -1
    assert s.current_era == "Stone Age"
    assert s.money == 500
    assert s.people == 50 and s.maxpeople == 50
    assert s.happiness == 50
    assert s.strength == s.maxstrength == 3
    assert s.inventory.bread == 10
    assert s.owned_weapon == {i: 0 for i in range(1, 8)}
    assert all(p.locked and not p.active for p in s.policies.values())
    assert not s.fight.active
    assert s.pending_merchant is None


def test_era_helpers():
    assert era_name(-1) == "Stone Age"
    assert era_name(0) == "Bronze Age"
    assert era_name(5) == "Modern Age"
    assert era_name(6) == "Modern Age"
    assert era_id(-1) == 1
    assert era_id(5) == 7


def test_apply_delta_clamps():
    s = _fresh(money=10, happiness=95, people=3)

    out = apply_delta(s, {"money": -50, "happiness": 20, "people": -10, "bread": -99})

    assert out.money == 0
    assert out.happiness == 100
    assert out.people == 0
    assert out.inventory.bread == 0


def test_apply_delta_maxstrength_floor_pulls_strength_down():
    s = _fresh(strength=3, maxstrength=3)

    out = apply_delta(s, {"maxstrength": -10})

    assert out.maxstrength == 1
    assert out.strength == 1


def test_apply_delta_rejects_unknown_keys():
    with pytest.raises(ValueError):
        apply_delta(_fresh(), {"gold": 5})


def test_inventory_add_floors_at_zero():
    inv = Inventory(hpotion=1)

    assert inv.add("hpotion", -5).hpotion == 0
    with pytest.raises(ValueError):
        inv.add("elixir", 1)


def test_scripted_source_rejects_bad_scripts():
    src = ScriptedSource([5, 0.5])

    with pytest.raises(ValueError):
        src.draw_int(6, 10)

    src = ScriptedSource([])
    with pytest.raises(RuntimeError):
        src.draw_unit()


def test_seeded_sources_repeat():
    a = source_from("x", 1, base_seed=42)
    b = source_from("x", 1, base_seed=42)

    assert [a.draw_int(1, 100) for _ in range(20)] == [b.draw_int(1, 100) for _ in range(20)]


def test_log_ids_increase_and_cap_keeps_newest():
    s = _fresh()
    s, added = append_lines(s, [("one", "event"), ("two", "good")], cap=3)
    assert [e.id for e in added] == [1, 2]

    s, _ = append_lines(s, [("three", "warn"), ("four", "muted"), ("five", "system")], cap=3)

    assert [e.text for e in s.logs] == ["three", "four", "five"]
    assert [e.id for e in s.logs] == [3, 4, 5]


def test_log_rejects_unknown_tag():
    with pytest.raises(ValueError):
        append_lines(_fresh(), [("hello", "shout")])


def test_save_round_trip_keeps_everything():
    s = _fresh(day=33, number=1, money=1234, merchant_relationship=2)
    policies = dict(s.policies)
    policies["Universal Tax"] = replace(policies["Universal Tax"], locked=False, active=True)
    s = replace(
        s,
        policies=policies,
        inventory=s.inventory.add("poison_potion", 2),
        owned_weapon={**s.owned_weapon, 1: 3},
        merchant_weapon_log=frozenset({"Stone Age", "Iron Age"}),
        last_merchant_offer_type="weapon",
        pending_merchant=MerchantOffer(kind="unique", name="Ancient Scroll", price=880, effect="maxstrength", value=1, discount_pct=12),
        fight=FightState(cfg=DEFAULT_ENEMIES["HARD"], difficulty="HARD", stunned=True, poison_turns=2),
        ehealth=250,
        buildings=("farm", "market"),
        choice_event="bridge",
    )
    s, _ = append_lines(s, [("A calm day passes.", "muted")])

    assert deserialize(serialize(s)) == s


def test_load_save_failure_keeps_current_ledger():
    s = _fresh(money=777)

    out, entries = load_save(s, b"{not json", EngineConfig())

    assert replace(out, logs=()) == replace(s, logs=())
    assert [(e.text, e.tag) for e in entries] == [("Failed to load save.", "danger")]


def test_deserialize_rejects_missing_state():
    with pytest.raises(SaveError):
        deserialize(b'{"version": 1}')
    with pytest.raises(SaveError):
        deserialize(b'{"version": 1, "state": {"name": "x"}}')


def test_load_save_replaces_ledger():
    saved = _fresh(money=4242, day=9)
    current = _fresh()

    out, entries = load_save(current, serialize(saved))

    assert out.money == 4242
    assert out.day == 9
    assert entries[-1].tag == "system"


def _save_with(**state):
    data = json.loads(serialize(_fresh()))
    data["state"].update(state)
    return json.dumps(data).encode("utf-8")


@pytest.mark.parametrize(
    "raw",
    [
        _save_with(fight="broken"),
        _save_with(pending_merchant="broken"),
        _save_with(inventory=["bread"]),
        serialize(_fresh()).replace(b'"day": 1, ', b'"day": 1e400, '),
        b"[" * 100000,
        b"\xff\xfe",
    ],
)
def test_corrupt_saves_never_escape_load_save(raw):
    s = _fresh(money=777)

    with pytest.raises(SaveError):
        deserialize(raw)

    out, entries = load_save(s, raw)

    assert replace(out, logs=()) == replace(s, logs=())
    assert [(e.text, e.tag) for e in entries] == [("Failed to load save.", "danger")]
