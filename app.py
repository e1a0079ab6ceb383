"""Bank CEO Simulator (Streamlit)

UI/Experience

Principles:
- UI only renders + triggers.
- Core domain and engine are pure Python modules (bankcore / bankengine).
- One session object owns the game; the engine is called once per "Next week".

Entry point for Streamlit Cloud: app.py
"""

from __future__ import annotations

import logging
import os
from typing import List

import streamlit as st

from bankcore.effects import channel_share
from bankcore.modifiers import (
    CAMPAIGN_MAX_BUDGET,
    CAMPAIGN_MAX_WEEKS,
    CAMPAIGN_MIN_BUDGET,
    CAMPAIGN_MIN_WEEKS,
    CAMPAIGNS,
    STRATEGIES,
    TECH_UPGRADES,
)
from bankcore.state import BankType, CampaignType, Difficulty, NewsLevel, Strategy, TechUpgradeType
from bankengine.config import EngineConfig
from bankengine.decisions import TechInvestAction, TurnDecisions, campaign_action_from_form
from bankengine.resolver import GameOverError, usd
from bankengine.session import GameSession, JsonFileStore, SetupChoices, load_snapshot, new_session, restore_or_new

logging.basicConfig(level=logging.INFO)

APP_TITLE = "Bank CEO Simulator"
APP_SUBTITLE = "Weekly bank management: set rates and strategy, run campaigns, invest in tech, stay solvent."
APP_VERSION = "1.0.0"
AUTOSAVE_PATH = os.environ.get("BANK_SIM_AUTOSAVE", ".bank_sim_autosave.json")

st.set_page_config(page_title=APP_TITLE, page_icon="🏦", layout="wide", initial_sidebar_state="expanded")

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
hr.soft {border: none; border-top: 1px solid rgba(255,255,255,0.08); margin: 1rem 0;}
.small {font-size: 13px; opacity:.75;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)

TURN_INPUT_KEYS = ("campaign_stop", "campaign_kind", "tech_pick")

NEWS_RENDER = {
    NewsLevel.SUCCESS: st.success,
    NewsLevel.WARNING: st.warning,
    NewsLevel.INFO: st.info,
    NewsLevel.DANGER: st.error,
}


def _store() -> JsonFileStore:
    return JsonFileStore(AUTOSAVE_PATH)


def _ensure_state() -> None:
    ss = st.session_state
    if "base_seed" not in ss:
        ss.base_seed = 42
    if "session" not in ss:
        ss.session = restore_or_new(_store(), EngineConfig(base_seed=int(ss.base_seed)))


def _start_game(setup: SetupChoices) -> None:
    ss = st.session_state
    ss.session = new_session(setup, EngineConfig(base_seed=int(ss.base_seed)), store=_store())


def _reset_game() -> None:
    _store().clear()
    st.session_state.session = None


# =========================
# Pages
# =========================


def page_setup() -> None:
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)

    with st.form("setup"):
        name = st.text_input("Bank name", value="Pioneer Financial")
        c1, c2 = st.columns(2)
        with c1:
            bank_type = st.selectbox("Bank type", list(BankType), format_func=lambda b: b.value.title())
            logo = st.selectbox("Logo", ["Vault", "Shield", "Landmark", "Coins"])
        with c2:
            difficulty = st.selectbox("Difficulty", list(Difficulty), format_func=lambda d: d.value.title())
            color = st.selectbox("Theme color", ["blue", "green", "purple", "orange"])
        if st.form_submit_button("Open the bank", use_container_width=True):
            _start_game(
                SetupChoices(
                    bank_name=name.strip() or "Pioneer Financial",
                    bank_logo=logo,
                    theme_color=color,
                    bank_type=bank_type,
                    difficulty=difficulty,
                )
            )
            st.rerun()


def _metrics(session: GameSession) -> None:
    s = session.state
    c = st.columns(4)
    c[0].metric("Cash", usd(s.cash))
    c[1].metric("Loans", usd(s.loans))
    c[2].metric("Deposits", usd(s.deposits))
    c[3].metric("Customers", f"{s.total_customers:,}")
    c = st.columns(4)
    c[0].metric("Reputation", f"{s.reputation:.1f}")
    c[1].metric("Satisfaction", f"{s.customer_satisfaction:.1f}")
    c[2].metric("Risk", f"{s.risk_factor:.1f}")
    c[3].metric("App rating", f"{s.app_rating:.2f} ★")


def _decisions_form(session: GameSession) -> None:
    s = session.state
    rec = session.recommendations()
    # one-shot actions must not carry over into next week's form
    if st.session_state.pop("clear_turn_inputs", False):
        for key in TURN_INPUT_KEYS:
            st.session_state.pop(key, None)

    st.markdown("### This week's decisions")
    strategies: List[Strategy] = list(Strategy)
    strategy = st.selectbox(
        "Strategy",
        strategies,
        index=strategies.index(s.current_strategy),
        format_func=lambda k: STRATEGIES[k].name,
    )
    st.caption(STRATEGIES[strategy].description)

    c1, c2 = st.columns(2)
    with c1:
        loan_rate = st.slider("Loan rate (%)", 1.0, 15.0, float(s.loan_interest_rate), 0.125)
        st.caption(f"Suggested {rec.loan.rate:.3f}%: {rec.loan.reason}")
    with c2:
        deposit_rate = st.slider("Deposit rate (%)", 0.0, 8.0, float(s.deposit_interest_rate), 0.125)
        st.caption(f"Suggested {rec.deposit.rate:.3f}%: {rec.deposit.reason}")

    campaign_stop = False
    budget, weeks = CAMPAIGN_MIN_BUDGET, CAMPAIGN_MIN_WEEKS
    with st.expander("Marketing"):
        active = s.active_marketing_campaign
        if active is not None:
            st.write(f"Running: **{CAMPAIGNS[active.type].name}** ({active.weeks_remaining} weeks left, {usd(active.budget)}/week)")
            campaign_stop = st.checkbox("Stop the running campaign", key="campaign_stop")
        campaign_kind = st.selectbox("Launch campaign", [None] + list(CampaignType), key="campaign_kind",
                                     format_func=lambda k: "-" if k is None else CAMPAIGNS[k].name)
        if campaign_kind is not None:
            budget = st.number_input("Weekly budget", CAMPAIGN_MIN_BUDGET, CAMPAIGN_MAX_BUDGET, CAMPAIGN_MIN_BUDGET, 500.0)
            weeks = st.slider("Duration (weeks)", CAMPAIGN_MIN_WEEKS, CAMPAIGN_MAX_WEEKS, 2)

    tech_action = None
    with st.expander("Technology"):
        taken = {u.type for u in s.active_tech_upgrades} | {u.type for u in s.completed_tech_upgrades}
        options = [None] + [t for t in TechUpgradeType if t not in taken]
        pick = st.selectbox(
            "Start project",
            options,
            key="tech_pick",
            format_func=lambda t: "-" if t is None else f"{TECH_UPGRADES[t].name} ({usd(TECH_UPGRADES[t].cost)}, {TECH_UPGRADES[t].duration} wk)",
        )
        if pick is not None:
            st.caption(TECH_UPGRADES[pick].description)
            tech_action = TechInvestAction(pick)
        for u in s.active_tech_upgrades:
            st.write(f"In progress: {TECH_UPGRADES[u.type].name} ({u.weeks_remaining} weeks left)")

    if st.button("Next week ▶", type="primary", use_container_width=True):
        decisions = TurnDecisions(
            strategy=strategy,
            loan_rate=loan_rate,
            deposit_rate=deposit_rate,
            campaign_action=campaign_action_from_form(
                s.active_marketing_campaign,
                stop=campaign_stop,
                launch=campaign_kind,
                budget=budget,
                duration=weeks,
            ),
            tech_action=tech_action,
        )
        try:
            session.play_turn(decisions)
        except GameOverError as e:
            st.error(str(e))
        st.session_state.clear_turn_inputs = True
        st.rerun()


def page_dashboard(session: GameSession) -> None:
    s = session.state
    st.title(s.settings.branding.bank_name)
    st.caption(f"Year {s.year} · Month {s.month} · Week {s.week} · Servers: {s.server_status.value} · App v{s.app_version}")

    _metrics(session)
    st.markdown("<hr class='soft'/>", unsafe_allow_html=True)

    if s.is_game_over:
        st.error(s.game_over_message)
        if st.button("Start over", use_container_width=True):
            _reset_game()
            st.rerun()
    else:
        _decisions_form(session)

    st.markdown("### News")
    for ev in session.news:
        NEWS_RENDER[ev.level](ev.message)


def page_ledger(session: GameSession) -> None:
    st.title("Ledger")
    rows = [
        {"Week": f"{t.year}-{t.month:02d} W{t.week}", "Description": t.description, "Type": t.type.value, "Amount": t.amount}
        for t in session.state.transactions
    ]
    if not rows:
        st.info("No transactions yet.")
        return
    st.dataframe(rows, use_container_width=True)


def page_customers(session: GameSession) -> None:
    s = session.state
    st.title("Customers")
    for channel, share in channel_share(s.channel_usage):
        st.write(f"**{channel.value}**: {s.channel_usage.get(channel, 0):,} ({share:.0%})")
    st.markdown("### Feedback")
    if not s.customer_feedback:
        st.info("No feedback yet.")
    for f in s.customer_feedback:
        st.markdown(f"<div class='card'>Week {f.turn} · {f.sentiment.value}<br/>{f.text}</div>", unsafe_allow_html=True)
        st.write("")


def page_history(session: GameSession) -> None:
    st.title("History")
    if not session.history:
        st.info("No finished weeks yet.")
        return
    st.line_chart({"Cash": [h.cash for h in session.history], "Net outcome": [h.net_outcome for h in session.history]})
    st.dataframe([
        {"Turn": h.turn, "Cash": h.cash, "Loans": h.loans, "Deposits": h.deposits, "Net": h.net_outcome, "Defaults": h.loan_defaults}
        for h in reversed(session.history)
    ], use_container_width=True)


# =========================
# Sidebar
# =========================


def export_import_controls() -> None:
    ss = st.session_state
    st.sidebar.markdown("---")
    st.sidebar.markdown("### Export / Import")

    session = ss.get("session")
    st.sidebar.download_button(
        "Download save",
        data=(session.export_json() if session else "{}").encode("utf-8"),
        file_name="bank_sim_save.json",
        mime="application/json",
        disabled=session is None,
    )

    up = st.sidebar.file_uploader("Load save", type=["json"], accept_multiple_files=False)
    # the uploader keeps its file across reruns; import each upload once
    if up is not None and ss.get("last_upload") != f"{up.name}:{up.size}":
        ss.last_upload = f"{up.name}:{up.size}"
        try:
            ss.session = load_snapshot(up.read().decode("utf-8"), EngineConfig(base_seed=int(ss.base_seed)), store=_store())
            ss.session.autosave()
            st.sidebar.success("Save loaded.")
        except ValueError as e:
            st.sidebar.error(f"Import failed: {e}")


def sidebar() -> str:
    ss = st.session_state

    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION}")
    st.sidebar.markdown("---")

    ss.base_seed = st.sidebar.number_input("Seed", value=int(ss.base_seed), step=1, disabled=ss.session is not None)
    if st.sidebar.button("Reset", use_container_width=True):
        _reset_game()
        st.rerun()

    export_import_controls()

    st.sidebar.markdown("---")
    return st.sidebar.radio("Page", ["Dashboard", "Ledger", "Customers", "History"], index=0)


# =========================
# Main
# =========================


def main() -> None:
    _ensure_state()
    page = sidebar()

    session = st.session_state.session
    if session is None:
        page_setup()
        return

    if page == "Dashboard":
        page_dashboard(session)
    elif page == "Ledger":
        page_ledger(session)
    elif page == "Customers":
        page_customers(session)
    else:
        page_history(session)


if __name__ == "__main__":
    main()
