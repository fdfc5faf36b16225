"""Kingdom Idle (Streamlit)

UI shell.

Principles:
- UI only renders + triggers.
- Every button maps to one engine command; no game rules live here.
- Saves are the serialized Ledger (download / upload).

Entry point: streamlit run app.py
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List

import streamlit as st

from core.buildings import building_slots, pending_choice
from core.catalog import BUILDINGS, FOOD, POTIONS, WEAPONS, weapons_for_era
from core.modes import DEFAULT_ENEMIES
from core.rng import RandomSource, rng_from
from core.state import Ledger, era_name, ledger_to_dict

from engine.commands import new_game, run_command
from engine.config import EngineConfig
from engine.logging import command_log, dumps_run_export, make_run_export
from engine.persistence import load_save, serialize


APP_TITLE = "Kingdom Idle"
APP_SUBTITLE = "Sleep, tax, expand and fight. Keep your people fed until the end of your reign."
APP_VERSION = "1.0.0"

st.set_page_config(page_title=APP_TITLE, page_icon="👑", layout="wide", initial_sidebar_state="expanded")

CSS = """
<style>
.block-container {padding-top: 3.2rem; padding-bottom: 2rem;}
section[data-testid="stSidebar"] .block-container {padding-top: 2.0rem;}
.card {
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 16px;
  padding: 14px 16px;
  background: rgba(255,255,255,0.03);
}
.log-line {font-size: 14px; padding: 1px 0;}
.log-good {color: #7ee2a0;}
.log-warn {color: #ffc25a;}
.log-danger {color: #ff7b7b;}
.log-system {color: #8fb8ff;}
.log-merchant {color: #e3a8ff;}
.log-muted {opacity: .6;}
.small {font-size: 13px; opacity: .75;}
hr.soft {border: none; border-top: 1px solid rgba(255,255,255,0.08); margin: 1rem 0;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)


# =========================
# Session State
# =========================


def _now_id() -> str:
    return datetime.utcnow().strftime("%Y%m%d%H%M%S%f")


def _ensure_state() -> None:
    ss = st.session_state
    if "run_id" not in ss:
        ss.run_id = _now_id()
    if "base_seed" not in ss:
        ss.base_seed = 42
    if "kingdom_name" not in ss:
        ss.kingdom_name = ""
    if "config" not in ss:
        ss.config = EngineConfig()
    if "rng" not in ss:
        ss.rng = None
    if "ledger" not in ss:
        ss.ledger = None
    if "initial" not in ss:
        ss.initial = None
    if "command_logs" not in ss:
        ss.command_logs = []


def _start_game() -> None:
    ss = st.session_state
    cfg = EngineConfig(base_seed=int(ss.base_seed))
    rng = RandomSource(rng_from("game", ss.run_id, base_seed=cfg.base_seed))
    ledger, _ = new_game(str(ss.kingdom_name), rng, cfg)
    ss.config = cfg
    ss.rng = rng
    ss.ledger = ledger
    ss.initial = ledger
    ss.command_logs = []


def _do(command: str, **args: Any) -> None:
    ss = st.session_state
    before: Ledger = ss.ledger
    after, entries = run_command(before, command, ss.rng, ss.config, **args)
    ss.ledger = after
    ss.command_logs.append(command_log(command, args, before, after, entries))


# =========================
# UI Pages
# =========================


def page_setup() -> None:
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)
    st.markdown("""
    ### How to play
    - **Sleep** ends the day: strength is restored, your people eat, and something happens.
    - **Tax**, **Pay**, **Expand**, **Build** and **Fight** each cost 1 strength.
    - Unlock policies through events, keep bread in stock, and watch the merchant.
    """)


def _metrics(s: Ledger) -> None:
    a, b, c, d, e, f = st.columns(6)
    a.metric("Day", f"{s.day}")
    b.metric("Age", s.current_era)
    c.metric("Money", f"{s.money:,}")
    d.metric("Population", f"{s.people}/{s.maxpeople}")
    e.metric("Bread", f"{s.inventory.bread}")
    f.metric("Strength", f"{s.strength}/{s.maxstrength}")
    st.progress(s.happiness / 100.0, text=f"Happiness: {s.happiness}")


def _actions(s: Ledger) -> None:
    st.markdown("#### Actions")
    cols = st.columns(4)
    if cols[0].button("Sleep", use_container_width=True):
        _do("sleep")
        st.rerun()
    if cols[1].button("Tax", use_container_width=True):
        _do("tax")
        st.rerun()
    if cols[2].button("Pay", use_container_width=True):
        _do("pay")
        st.rerun()
    if cols[3].button(f"Expand ({s.exmoney:,})", use_container_width=True):
        _do("expand")
        st.rerun()


def _merchant(s: Ledger) -> None:
    offer = s.pending_merchant
    if offer is None:
        return
    st.markdown("<div class='card'>", unsafe_allow_html=True)
    label = f"{offer.rarity} weapon {offer.name} (+{offer.bonus} DMG)" if offer.kind == "weapon" else offer.name
    st.markdown(f"#### 🧳 Merchant: {label} for {offer.price:,} coins")
    c1, c2 = st.columns(2)
    if c1.button("Buy", key="merchant_buy", use_container_width=True):
        _do("buy_merchant")
        st.rerun()
    if c2.button("Dismiss", key="merchant_dismiss", use_container_width=True):
        _do("dismiss_merchant")
        st.rerun()
    st.markdown("</div>", unsafe_allow_html=True)


def _choice(s: Ledger) -> None:
    ev = pending_choice(s)
    if ev is None:
        return
    st.markdown("<div class='card'>", unsafe_allow_html=True)
    st.markdown(f"#### ⚖️ {ev.title}")
    st.markdown(ev.prompt)
    cols = st.columns(len(ev.options))
    for col, opt in zip(cols, ev.options):
        if col.button(opt.label, key=f"choice_{ev.id}_{opt.key}", use_container_width=True):
            _do("resolve_choice", option_key=opt.key)
            st.rerun()
    st.markdown("</div>", unsafe_allow_html=True)


def _fight(s: Ledger) -> None:
    st.markdown("#### ⚔️ Fight")
    f = s.fight
    if f.cfg is None or f.over:
        cols = st.columns(len(DEFAULT_ENEMIES))
        for col, key in zip(cols, DEFAULT_ENEMIES):
            if col.button(key.title(), key=f"fight_{key}", use_container_width=True):
                _do("start_fight", difficulty=key)
                st.rerun()
        st.caption(f"Wins {s.wfight} · Losses {s.lfight} · Weapon {s.current_sword} ({s.min_dmg}-{s.max_dmg})")
        return

    c1, c2 = st.columns(2)
    c1.progress(s.phealth / max(1, s.maxphealth), text=f"You: {s.phealth}")
    c2.progress(s.ehealth / max(1, f.cfg.health), text=f"Enemy: {s.ehealth}" + (" (stunned)" if f.stunned else ""))
    labels = {
        "strike": "Strike",
        "block": "Block",
        "heal": f"Heal ({s.inventory.hpotion})",
        "dmg_pot": f"Damage ({s.inventory.dpotion})",
        "lightning": f"Lightning ({s.inventory.lightning_potion})",
        "sleep": f"Sleep ({s.inventory.sleep_potion})",
        "poison": f"Poison ({s.inventory.poison_potion})",
    }
    cols = st.columns(len(labels))
    for col, (action, label) in zip(cols, labels.items()):
        if col.button(label, key=f"act_{action}", use_container_width=True):
            _do("fight_action", action=action)
            st.rerun()


def _shop(s: Ledger) -> None:
    with st.expander("🛒 Shop"):
        tab_p, tab_f, tab_w = st.tabs(["Potions", "Food", "Weapons"])
        for tab, items in ((tab_p, POTIONS), (tab_f, FOOD)):
            with tab:
                for item in items:
                    c1, c2, c3 = st.columns([2, 1, 1])
                    c1.markdown(f"**{item.name}** · {item.price} coins · owned {getattr(s.inventory, item.var)}")
                    qty = c2.number_input("Qty", min_value=1, value=1, step=1, key=f"qty_{item.var}", label_visibility="collapsed")
                    if c3.button("Buy", key=f"buy_{item.var}", use_container_width=True):
                        _do("buy_item", var=item.var, qty=int(qty))
                        st.rerun()
        with tab_w:
            for era in sorted({w.era for w in WEAPONS}):
                st.markdown(f"**{era_name(era - 2)}**")
                for w in weapons_for_era(era):
                    locked = w.id <= s.owned_weapon.get(w.era, 0)
                    c1, c2 = st.columns([3, 1])
                    c1.markdown(f"{w.name} (+{w.damage} DMG) · {'LOCKED' if locked else f'{w.price:,} coins'}")
                    if c2.button("Buy", key=f"weapon_{w.era}_{w.id}", disabled=locked, use_container_width=True):
                        _do("buy_weapon", era=w.era, weapon_id=w.id)
                        st.rerun()


def _policies(s: Ledger) -> None:
    with st.expander("📜 Policies"):
        for name, p in s.policies.items():
            c1, c2 = st.columns([3, 1])
            status = "Locked" if p.locked else ("Active" if p.active else "Inactive")
            c1.markdown(f"**{name}** · {status}  \n<span class='small'>{p.desc}</span>", unsafe_allow_html=True)
            if c2.button("Disable" if p.active else "Enable", key=f"pol_{name}", disabled=p.locked, use_container_width=True):
                _do("toggle_policy", name=name)
                st.rerun()


def _buildings(s: Ledger) -> None:
    if not st.session_state.config.buildings_enabled:
        return
    with st.expander(f"🏗️ Buildings ({len(s.buildings)}/{building_slots(s)})"):
        if s.buildings:
            st.markdown(", ".join(BUILDINGS[b].name for b in s.buildings if b in BUILDINGS))
        for b in BUILDINGS.values():
            c1, c2 = st.columns([3, 1])
            c1.markdown(f"**{b.name}** · {b.cost:,} coins · needs {b.min_people} people  \n{b.desc}")
            if c2.button("Build", key=f"build_{b.id}", use_container_width=True):
                _do("build", building_id=b.id)
                st.rerun()


def _log(s: Ledger, limit: int = 40) -> None:
    st.markdown("#### Log")
    rows: List[str] = []
    for e in reversed(s.logs[-limit:]):
        rows.append(f"<div class='log-line log-{e.tag}'>{e.text}</div>")
    st.markdown("<div class='card'>" + "".join(rows) + "</div>", unsafe_allow_html=True)


def page_play() -> None:
    ss = st.session_state
    s: Ledger = ss.ledger
    st.title(f"{APP_TITLE}: {s.name}")
    _metrics(s)
    st.markdown("<hr class='soft'/>", unsafe_allow_html=True)

    if s.ended:
        st.error("💀 Your time has come. Your kingdom now lives on in legend.")

    left, right = st.columns([1.2, 1.0])
    with left:
        _actions(s)
        _merchant(s)
        _choice(s)
        _fight(s)
        _shop(s)
        _policies(s)
        _buildings(s)
    with right:
        _log(s)


def page_debug() -> None:
    ss = st.session_state
    st.title("Debug")
    st.subheader("EngineConfig")
    st.json(asdict(ss.config))
    st.subheader("Ledger")
    st.json(ledger_to_dict(ss.ledger) if ss.ledger else {})


def save_load_controls() -> None:
    ss = st.session_state
    st.sidebar.markdown("---")
    st.sidebar.markdown("### Save / Load")

    started = ss.get("ledger") is not None
    st.sidebar.download_button(
        "Download save",
        data=serialize(ss.ledger) if started else b"",
        file_name=f"kingdom_save_{ss.get('run_id', 'run')}.json",
        mime="application/json",
        disabled=not started,
    )
    if started:
        export: Dict[str, Any] = make_run_export(
            seed=int(ss.config.base_seed),
            config=asdict(ss.config),
            initial_state=ss.initial,
            command_logs=list(ss.command_logs),
        )
        st.sidebar.download_button(
            "Download run log",
            data=dumps_run_export(export).encode("utf-8"),
            file_name=f"kingdom_run_{ss.get('run_id', 'run')}.json",
            mime="application/json",
        )

    up = st.sidebar.file_uploader("Load save", type=["json"], accept_multiple_files=False)
    if up is not None and up.file_id != ss.get("loaded_file_id"):
        ss.loaded_file_id = up.file_id
        if not started:
            _start_game()
        ss.ledger, entries = load_save(ss.ledger, up.read(), ss.config)
        if entries and entries[-1].tag == "danger":
            st.sidebar.error("Import failed: the file is not a readable save.")
        else:
            st.sidebar.success("Save loaded.")
        st.rerun()


# =========================
# Sidebar
# =========================


def sidebar() -> str:
    ss = st.session_state

    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION}")
    st.sidebar.markdown("---")

    started = ss.get("ledger") is not None
    ss.kingdom_name = st.sidebar.text_input("Kingdom name", value=str(ss.get("kingdom_name", "")), disabled=started)
    ss.base_seed = st.sidebar.number_input("Seed", value=int(ss.base_seed), step=1, disabled=started)

    cols = st.sidebar.columns(2)
    with cols[0]:
        if st.button("New game", disabled=started, use_container_width=True):
            _start_game()
            st.rerun()
    with cols[1]:
        if st.button("Reset", use_container_width=True):
            for k in list(ss.keys()):
                del ss[k]
            _ensure_state()
            st.rerun()

    save_load_controls()

    st.sidebar.markdown("---")
    return st.sidebar.radio("Page", ["Play", "Debug"], index=0)


# =========================
# Main
# =========================


def main() -> None:
    _ensure_state()
    page = sidebar()

    ss = st.session_state
    if ss.ledger is None:
        page_setup()
        return

    if page == "Play":
        page_play()
    else:
        page_debug()


if __name__ == "__main__":
    main()
