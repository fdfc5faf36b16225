from dataclasses import replace

from core.combat import player_action, start_fight
from core.rng import ScriptedSource
from core.state import default_start_state


def _fresh(**kw):
    return replace(default_start_state(name="Testland", death_day=120), **kw)


def _in_fight(difficulty="EASY", **kw):
    s, _ = start_fight(_fresh(**kw), difficulty)
    return s


def test_start_fight_resets_sub_state():
    s = _fresh(phealth=12, ehealth=0)

    out, lines = start_fight(s, "easy")

    assert out.fight.active
    assert out.fight.difficulty == "EASY"
    assert out.phealth == 100
    assert out.ehealth == 100
    assert out.strength == 2
    assert lines == [("An easy enemy approaches (100 HP).", "event")]


def test_start_fight_refusals():
    s = _fresh(strength=0)
    out, lines = start_fight(s, "HARD")
    assert out == s
    assert lines[0][1] == "muted"

    out, _ = start_fight(_fresh(), "LEGENDARY")
    assert out == _fresh()


def test_ten_strikes_win_easy_fight():
    s = _in_fight(min_dmg=10, max_dmg=10)
    script = [10, 2] * 10 + [100]

    src = ScriptedSource(script)
    for _ in range(10):
        s, lines = player_action(s, "strike", src)

    assert src.remaining == 0
    assert s.ehealth == 0
    assert s.phealth == 100 - 20
    assert s.money == 600
    assert s.wfight == 1
    assert s.fight.over and not s.fight.active
    assert lines[-1] == ("You defeated the enemy. Earned 100 coins.", "good")


def test_enemy_still_attacks_on_killing_turn():
    s = replace(_in_fight(), ehealth=8)
    src = ScriptedSource([9, 5, 100])

    out, lines = player_action(s, "strike", src)

    assert out.ehealth == 0
    assert out.phealth == 95
    assert out.money == 600
    assert out.wfight == 1
    assert lines[-1] == ("You defeated the enemy. Earned 100 coins.", "good")
    assert src.remaining == 0


def test_block_absorbs_enemy_hit():
    s = _in_fight()

    out, lines = player_action(s, "block", ScriptedSource([20, 7]))

    assert out.ehealth == 100
    assert out.phealth == 100
    assert lines[-1] == ("Enemy attacks and deals 0 damage.", "warn")


def test_partial_block():
    s = _in_fight("HARD")

    out, _ = player_action(s, "block", ScriptedSource([10, 18]))

    assert out.phealth == 92


def test_heal_short_circuits_enemy_turn():
    s = replace(_in_fight(), phealth=40, inventory=_fresh().inventory.add("hpotion", 1))
    src = ScriptedSource([])

    out, lines = player_action(s, "heal", src)

    assert out.phealth == 100
    assert out.inventory.hpotion == 0
    assert out.ehealth == 100
    assert lines == [("You healed to full health.", "event")]


def test_missing_potion_is_a_no_op():
    s = _in_fight()

    for action in ("heal", "lightning", "sleep", "poison", "dmg_pot"):
        out, lines = player_action(s, action, ScriptedSource([]))
        assert out == s
        assert len(lines) == 1 and lines[0][1] == "muted"


def test_lightning_stuns_for_one_enemy_turn():
    s = replace(_in_fight(min_dmg=10, max_dmg=10), inventory=_fresh().inventory.add("lightning_potion", 1))

    s, _ = player_action(s, "lightning", ScriptedSource([]))
    assert s.fight.stunned

    s, lines = player_action(s, "strike", ScriptedSource([10]))
    assert not s.fight.stunned
    assert s.phealth == 100
    assert ("Enemy is stunned and skips its turn.", "event") in lines

    s, _ = player_action(s, "strike", ScriptedSource([10, 4]))
    assert s.phealth == 96


def test_poison_ticks_three_times():
    s = replace(_in_fight(min_dmg=10, max_dmg=10), inventory=_fresh().inventory.add("poison_potion", 1))

    s, _ = player_action(s, "poison", ScriptedSource([]))
    assert s.ehealth == 95
    assert s.fight.poison_turns == 2

    s, _ = player_action(s, "strike", ScriptedSource([10, 3]))
    assert s.ehealth == 80
    assert s.fight.poison_turns == 1

    s, _ = player_action(s, "strike", ScriptedSource([10, 3]))
    s, _ = player_action(s, "strike", ScriptedSource([10, 3]))
    assert s.ehealth == 55
    assert s.fight.poison_turns == 0


def test_poison_can_finish_the_enemy():
    s = replace(_in_fight(), ehealth=5, inventory=_fresh().inventory.add("poison_potion", 1))

    out, lines = player_action(s, "poison", ScriptedSource([60]))

    assert out.ehealth == 0
    assert out.wfight == 1
    assert out.money == 560
    assert lines[-1][1] == "good"


def test_damage_potion_adds_bonus():
    s = replace(_in_fight(), inventory=_fresh().inventory.add("dpotion", 1))

    out, _ = player_action(s, "dmg_pot", ScriptedSource([10, 2]))

    assert out.ehealth == 80
    assert out.inventory.dpotion == 0
    assert out.phealth == 98


def test_defeat():
    s = replace(_in_fight(), phealth=3)

    out, lines = player_action(s, "strike", ScriptedSource([10, 7]))

    assert out.phealth == 0
    assert out.lfight == 1
    assert out.fight.over
    assert lines[-1][1] == "danger"


def test_actions_outside_a_fight():
    s = _fresh()

    out, lines = player_action(s, "strike", ScriptedSource([]))

    assert out == s
    assert lines == [("There is no fight in progress.", "muted")]

    finished = replace(_in_fight(), fight=replace(_in_fight().fight, over=True))
    out, _ = player_action(finished, "block", ScriptedSource([]))
    assert out == finished
